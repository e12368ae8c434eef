"""Shared modules for tssc-cli.

Logging and path helpers used by both the command line and the MCP server.
"""

from .logging import LOG_LEVELS, configure_logging
from .paths import CONFIG_FILE, LOG_DIR, TSSC_DIR, ensure_dirs, get_log_file

__all__ = [
    # Paths
    "TSSC_DIR",
    "CONFIG_FILE",
    "LOG_DIR",
    "ensure_dirs",
    "get_log_file",
    # Logging
    "LOG_LEVELS",
    "configure_logging",
]
