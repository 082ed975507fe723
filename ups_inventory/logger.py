import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from . import settings


def setup_logger(name: Optional[str] = None, log_level: Optional[int] = None) -> logging.Logger:
    """
    Sets up the import logger with console (StreamHandler) and file (RotatingFileHandler) output.
    Defaults to the root logger so every module's `logging.getLogger(__name__)` is captured.
    """
    level = log_level if log_level is not None else settings.LOG_LEVEL
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Prevent adding handlers multiple times if logger is already set up
    if logger.hasHandlers():
        return logger

    console_format = logging.Formatter("%(message)s")
    file_format = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(console_format)
    logger.addHandler(console_handler)

    settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        settings.LOG_DIR / "import.log",
        maxBytes=5 * 1024 * 1024,  # 5 MB
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(file_format)
    logger.addHandler(file_handler)

    return logger
