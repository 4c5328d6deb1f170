"""
Logging setup for the print agent.

Every record carries the thread name: Flask serves each request on its own
thread and USB opens run on ``usb-open`` workers, so the thread is what ties
resolver, transport and encoder lines to one print job.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

LOGGER_NAME = "mpos_print_agent"
LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(threadName)s] %(name)s: %(message)s"
MAX_LOG_BYTES = 2 * 1024 * 1024
LOG_BACKUPS = 3


def _attach(logger: logging.Logger, handler: logging.Handler, level: int):
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)


def setup_logging(
    log_level: int = logging.INFO,
    log_dir: Optional[Union[str, Path]] = None,
    enable_file_logging: bool = False,
) -> logging.Logger:
    """
    Configure the ``mpos_print_agent`` logger: stdout always, plus
    ``agent.log`` and ``errors.log`` under ``log_dir`` when file logging is on.
    Safe to call again; existing handlers are replaced.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)
    logger.propagate = False
    logger.handlers.clear()

    _attach(logger, logging.StreamHandler(sys.stdout), log_level)

    if enable_file_logging and log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        for filename, level in (("agent.log", log_level), ("errors.log", logging.ERROR)):
            handler = RotatingFileHandler(
                log_dir / filename, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
            )
            _attach(logger, handler, level)
        logger.info("Writing logs to %s", log_dir)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger nested under ``mpos_print_agent`` whatever ``name`` is."""
    if not name.startswith(LOGGER_NAME):
        name = f"{LOGGER_NAME}.{name}"
    return logging.getLogger(name)
