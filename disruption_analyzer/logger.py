"""
Logging configuration for the analyzer.
Uses rich for pretty console logging and optional rotating file logging.
"""
import logging
from logging.handlers import RotatingFileHandler
from typing import Optional

from rich.logging import RichHandler

from .config import Settings, settings as default_settings

LOGGER_NAME = "disruption_analyzer"


def setup_logging(settings: Optional[Settings] = None) -> logging.Logger:
    """Configure the package logger hierarchy."""
    settings = settings or default_settings

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(settings.log_level.upper())

    # Close and remove existing handlers so repeated calls (e.g. Streamlit reruns) don't stack them
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    console_handler = RichHandler(
        rich_tracebacks=True,
        show_time=True,
        show_path=False
    )
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if settings.log_file is not None:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            settings.log_file,
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5,
            encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ))
        logger.addHandler(file_handler)

    return logger
