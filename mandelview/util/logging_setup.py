from __future__ import annotations

import logging
import logging.handlers
from typing import List, Optional

_LOGGER_NAME = "mandelview"
_FORMAT = "%(asctime)s.%(msecs)03d %(threadName)s %(levelname)s %(name)s - %(message)s"

def get_logger(child: Optional[str] = None) -> logging.Logger:
    name = f"{_LOGGER_NAME}.{child}" if child else _LOGGER_NAME
    return logging.getLogger(name)

def parse_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name}")
    return level

def _detach_handlers(logger: logging.Logger) -> None:
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

def reset_logging() -> None:
    """Drop handlers installed by configure_root_logging and propagate again."""
    logger = get_logger()
    _detach_handlers(logger)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True

def configure_root_logging(
    *,
    level: int = logging.INFO,
    console: bool = True,
    log_file: Optional[str] = None,
    rotate_bytes: int = 5 * 1024 * 1024,
    rotate_count: int = 5,
) -> logging.Logger:
    """
    Route the ``mandelview`` logger to stderr and optionally a rotating file.
    Only the CLI calls this; library modules just log. Calling it again
    replaces the previous handlers.
    """
    logger = get_logger()
    _detach_handlers(logger)
    logger.setLevel(level)
    logger.propagate = False

    handlers: List[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler())
    if log_file:
        handlers.append(logging.handlers.RotatingFileHandler(
            log_file, maxBytes=rotate_bytes, backupCount=rotate_count, encoding="utf-8"
        ))

    formatter = logging.Formatter(fmt=_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S")
    for h in handlers:
        h.setLevel(level)
        h.setFormatter(formatter)
        logger.addHandler(h)

    logger.debug("Logging configured level=%s console=%s file=%s",
                 logging.getLevelName(level), console, log_file or "-")
    return logger
