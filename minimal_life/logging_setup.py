"""Logging configuration for Minimal Life."""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from . import config

_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def configure_logging(
    log_path: Optional[Union[str, Path]] = None,
    *,
    level: int = logging.INFO,
    console: bool = True,
) -> logging.Logger:
    """Attach handlers to the ``minimal_life`` logger once and return it.

    Records go to a rotating file and, unless *console* is false, to stdout.
    Later calls return the already configured logger unchanged.
    """
    logger = logging.getLogger(config.LOGGER_NAME)
    if logger.handlers:
        return logger

    path = Path(log_path if log_path is not None else config.LOG_FILE)
    path.parent.mkdir(parents=True, exist_ok=True)

    handlers: list[logging.Handler] = [
        RotatingFileHandler(
            path,
            maxBytes=config.LOG_MAX_BYTES,
            backupCount=config.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
    ]
    if console:
        handlers.append(logging.StreamHandler(sys.stdout))

    formatter = logging.Formatter(_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
