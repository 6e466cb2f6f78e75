# external imports
import click

from .. import __version__
from .cli_core import status, watch
from .cli_maintenance import config, log

# local imports
from .core import OrderedGroup


@click.group(cls=OrderedGroup, help="Network connectivity monitor for Linux and macOS.")
@click.version_option(version=__version__, message="%(version)s")
def main() -> None:
    pass


main.add_command(status, section="Core Commands")
main.add_command(watch, section="Core Commands")

main.add_command(log, section="Maintenance")
main.add_command(config, section="Maintenance")
