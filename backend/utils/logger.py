"""Logging setup for the API server

Console output follows the configured level; api.log and error.log are
always written, debug.log only when running at DEBUG.
"""
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from backend.config import settings


FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}"
DETAILED_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"


def _add_file_sink(path: Path, level: str, fmt: str, **extra):
    logger.add(
        path,
        format=fmt,
        level=level,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
        compression="zip",
        enqueue=True,
        **extra
    )


def setup_logging(log_level: Optional[str] = None, log_to_files: bool = True):
    """Configure loguru sinks

    Args:
        log_level: Console level override (DEBUG, INFO, WARNING, ERROR);
                   defaults to settings.log_level
        log_to_files: Also write rotating files under settings.log_dir
    """
    level = (log_level or settings.log_level).upper()

    logger.remove()
    logger.add(sys.stdout, format=settings.log_format, level=level, colorize=True)

    if log_to_files:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        _add_file_sink(log_dir / "api.log", "INFO", FILE_FORMAT)
        _add_file_sink(log_dir / "error.log", "ERROR", DETAILED_FILE_FORMAT, backtrace=True, diagnose=True)
        if level == "DEBUG":
            _add_file_sink(log_dir / "debug.log", "DEBUG", DETAILED_FILE_FORMAT)

        logger.info(f"Log directory: {log_dir.absolute()}")

    logger.info(f"Logging initialized | level={level}")


def get_logger(name: str):
    """Get a logger bound to a module name (typically __name__)"""
    return logger.bind(name=name)
