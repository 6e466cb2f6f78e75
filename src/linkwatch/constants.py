"""
This module provides constants used throughout linkwatch and its CLI. It should be kept
free of memory heavy imports.
"""

# app
APP_NAME = "linkwatch"
DEFAULT_CONFIG_NAME = "linkwatch"

# state messages
CONNECTED = "Connected"
DISCONNECTED = "Connection lost"
