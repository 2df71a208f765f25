# Logging_Config.py
# Description: Loguru sink configuration for userdesk
#
# Imports
import sys
from pathlib import Path
from typing import Optional, Union, Dict, Any
#
# 3rd-Party Imports
from loguru import logger
#
# Local Imports
from .config import get_setting, get_log_file_path
#
########################################################################################################################
#
# Functions:

DEFAULT_CONSOLE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} - {level} - {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def _ensure_log_dir_exists(file_path: Union[str, Path]) -> Path:
    """Ensure the directory for the log file exists."""
    expanded_path = Path(file_path).expanduser()
    expanded_path.parent.mkdir(parents=True, exist_ok=True)
    return expanded_path


def setup_logger(
    log_level: str = "INFO",
    console_format: str = DEFAULT_CONSOLE_FORMAT,
    app_log_path: Optional[Union[str, Path]] = None,
):
    """
    Sets up Loguru sinks for the console and, optionally, a rotating application log.

    Args:
        log_level (str): The minimum log level to output (e.g., "DEBUG", "INFO").
        console_format (str): The format string for console output.
        app_log_path: Path for the text log file. If None, this sink is disabled.

    Returns:
        The configured logger instance.
    """
    logger.remove()

    logger.add(sys.stderr, level=log_level.upper(), format=console_format)

    if app_log_path:
        path = _ensure_log_dir_exists(app_log_path)
        logger.add(
            path,
            level=log_level.upper(),
            format=FILE_FORMAT,
            rotation="10 MB",
            retention="7 days",
            enqueue=True,
            backtrace=True,
            diagnose=False,  # variable values may include bearer tokens
        )
        logger.info(f"Application logs will be written to: {path}")

    return logger


def configure_logging_from_settings(settings: Optional[Dict[str, Any]] = None):
    log_level = str(get_setting("logging", "log_level", "INFO", settings))
    return setup_logger(log_level=log_level, app_log_path=get_log_file_path(settings))

#
# End of Logging_Config.py
########################################################################################################################
