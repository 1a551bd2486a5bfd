"""Logging configuration."""

import sys
from pathlib import Path

from loguru import logger

from settings import LOG_DIR, LOG_LEVEL, LOG_RETENTION, LOG_TO_FILE

CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | <level>{message}</level>"
DEBUG_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <7}</level> | <cyan>{name}</cyan> | <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <7} | {name}:{function}:{line} | {message}"


def setup_logging(
    level: str = LOG_LEVEL,
    to_file: bool = LOG_TO_FILE,
    log_dir: Path | str | None = None,
):
    """Configure console output and, optionally, daily log files.

    Defaults come from ``FLIP_LOG_LEVEL``, ``FLIP_LOG_TO_FILE`` and
    ``FLIP_LOG_DIR``. At DEBUG the console also shows the module name. The
    file sink always records DEBUG.
    """
    logger.remove()

    level = level.upper()
    logger.add(
        sys.stderr,
        format=DEBUG_CONSOLE_FORMAT if level == "DEBUG" else CONSOLE_FORMAT,
        level=level,
        colorize=True,
    )

    if to_file:
        directory = Path(log_dir) if log_dir is not None else LOG_DIR
        directory.mkdir(parents=True, exist_ok=True)
        logger.add(
            directory / "flip_{time:YYYY-MM-DD}.log",
            format=FILE_FORMAT,
            level="DEBUG",
            rotation="00:00",
            retention=LOG_RETENTION,
            compression="gz",
            enqueue=True,
        )
        logger.info("Logging to {} (console level {})", directory, level)

    return logger
