# -*- coding: utf-8 -*-

import logging
from logging.handlers import RotatingFileHandler

from linkwatch.config import LinkwatchConfig
from linkwatch.logging import setup_logging
from linkwatch.utils.appdirs import get_log_path


def test_setup_logging(config_name, monkeypatch):
    monkeypatch.delenv("INVOCATION_ID", raising=False)
    LinkwatchConfig(config_name).set("app", "log_level", logging.WARNING)

    logger = logging.getLogger("linkwatch")
    handlers = setup_logging(config_name, stderr=False)

    try:
        assert len(handlers) == 1
        assert isinstance(handlers[0], RotatingFileHandler)
        assert handlers[0].level == logging.WARNING
        assert logger.level == logging.INFO

        logging.getLogger("linkwatch.holder").warning("Connectivity stream failed")
        handlers[0].flush()

        with open(get_log_path("linkwatch", f"{config_name}.log")) as f:
            assert "test_logging WARNING: Connectivity stream failed" in f.read()
    finally:
        for handler in handlers:
            logger.removeHandler(handler)
            handler.close()
