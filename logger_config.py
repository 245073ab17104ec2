"""
Logging configuration for the AWS samples.

Every module gets its own named logger writing to stdout, so the step
narration, timing summary and error detail all land in one stream.
"""
import logging
import os
import sys
from typing import Optional, Set

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_configured: Set[str] = set()
_level_override: Optional[str] = None


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (defaults to this module's name if not provided)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name or __name__)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    # Explicit level wins, then LOG_LEVEL, default to INFO
    log_level = _level_override or os.environ.get('LOG_LEVEL', 'INFO').upper()
    logger.setLevel(getattr(logging, log_level, logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.NOTSET)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    logger.addHandler(handler)

    # Prevent propagation to root logger to avoid duplicate logs
    logger.propagate = False

    _configured.add(logger.name)
    return logger


def set_log_level(level: str) -> None:
    """
    Change the level of every logger handed out by ``get_logger``.

    Args:
        level: Level name such as ``DEBUG`` or ``WARNING``

    Raises:
        ValueError: If ``level`` is not a known level name
    """
    global _level_override
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")
    _level_override = level.upper()
    for name in _configured:
        logging.getLogger(name).setLevel(numeric)
