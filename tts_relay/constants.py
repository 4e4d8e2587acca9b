"""
TTS Relay Global Constants

Centralized location for system-wide constants used across the application.
"""

# Application Constants
APP_NAME = "TTS Relay"
APP_VERSION = "0.1.0"

# systemd passes inherited sockets starting at this descriptor (sd_listen_fds)
SD_LISTEN_FDS_START = 3

CORRELATION_ID_HEADER = "x-correlation-id"
