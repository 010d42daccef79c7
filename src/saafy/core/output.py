"""
Unified output system using Loguru.
User-facing messages go to the log file and to the rich console.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger
from rich.console import Console

_console: Optional[Console] = None
_quiet = False

_LEVEL_STYLES = {
    "debug": "cyan",
    "info": None,
    "success": "green",
    "warning": "yellow",
    "error": "bold red",
}

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}"


def get_console() -> Console:
    """Get or create the shared Rich Console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_quiet(quiet: bool) -> None:
    """Suppress console echo of log() messages (file logging continues)."""
    global _quiet
    _quiet = quiet


def setup_loguru(
    log_file: Path,
    level: str = "INFO",
    rotation: str = "10 MB",
    retention: int = 5,
    console_output: bool = False,
) -> None:
    """
    Configure loguru with a rotating file sink.

    Args:
        log_file: Path to log file
        level: Minimum level for logging (DEBUG, INFO, WARNING, ERROR)
        rotation: Size at which the log file rotates
        retention: Number of rotated files to keep
        console_output: Also write log records to stderr
    """
    logger.remove()

    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        rotation=rotation,
        retention=retention,
        level=level,
        format=LOG_FORMAT,
        enqueue=False,
    )

    if console_output:
        logger.add(sys.stderr, level=level, format=LOG_FORMAT)

    logger.info(f"Loguru initialized: {log_file} (level={level})")


def log(message: str, level: str = "info") -> None:
    """
    Unified logging: writes to the log AND prints to the console.

    Use this instead of print() for user-facing messages that should also be logged.

    Args:
        message: User-facing message
        level: Log level (debug, info, success, warning, error)
    """
    log_func = getattr(logger, level)
    log_func(message)

    if _quiet or level == "debug":
        return

    style = _LEVEL_STYLES.get(level)
    console = get_console()
    if style:
        console.print(message, style=style, markup=False)
    else:
        console.print(message, markup=False)
