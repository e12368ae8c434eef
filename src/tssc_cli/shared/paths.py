"""Path management for tssc-cli.

Manages the ~/.tssc/ directory used for local configuration and logs.
"""

from pathlib import Path

# Base directory for all tssc data
TSSC_DIR = Path.home() / ".tssc"

# Local CLI configuration file
CONFIG_FILE = TSSC_DIR / "config.yaml"

# Log directory
LOG_DIR = TSSC_DIR / "logs"


def ensure_dirs() -> None:
    """Create directory structure if missing (mode 0o700)."""
    TSSC_DIR.mkdir(mode=0o700, exist_ok=True)
    LOG_DIR.mkdir(mode=0o700, exist_ok=True)


def get_log_file(name: str = "mcp-server") -> Path:
    """Get path to a log file.

    Args:
        name: Log file name (without extension)

    Returns:
        Path to the log file
    """
    return LOG_DIR / f"{name}.log"
