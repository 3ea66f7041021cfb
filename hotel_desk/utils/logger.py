"""
Logger utility - Configures application logging.
"""

import logging
import logging.handlers
import os
from pathlib import Path
from typing import Union

CONSOLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'


def setup_logging(log_level: str = "INFO", log_dir: Union[str, Path] = "logs", console: bool = True):
    """Setup application logging."""

    Path(log_dir).mkdir(parents=True, exist_ok=True)
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    # Console handler
    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(max(level, logging.INFO))
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        root_logger.addHandler(console_handler)

    file_format = logging.Formatter(FILE_FORMAT)

    # Conversation log
    file_handler = logging.handlers.RotatingFileHandler(
        os.path.join(log_dir, 'hotel_desk.log'),
        maxBytes=10*1024*1024,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(file_format)
    root_logger.addHandler(file_handler)

    # Error log
    error_handler = logging.handlers.RotatingFileHandler(
        os.path.join(log_dir, 'errors.log'),
        maxBytes=5*1024*1024,  # 5MB
        backupCount=3,
        encoding='utf-8'
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(file_format)
    root_logger.addHandler(error_handler)

    # Backend SDKs are chatty at INFO
    for noisy in ("httpx", "urllib3", "comtypes"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.info("Logging configured successfully")


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)
