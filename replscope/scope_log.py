"""
loguru sinks for a session: stderr, plus an optional rotating log file.
"""

import sys
from typing import Optional

from loguru import logger

from replscope.scope_config import SessionConfig

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}"


def configure_logging(level: str = "INFO",
                      log_file: Optional[str] = None,
                      rotation: str = "1 day",
                      retention: str = "30 days") -> None:
    """Replace loguru's sinks with a stderr sink and, optionally, a rotating file."""
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT, backtrace=False, diagnose=False)
    if log_file:
        logger.add(
            sink=log_file,
            rotation=rotation,
            retention=retention,
            level=level,
            format=LOG_FORMAT,
            backtrace=True,
            diagnose=True,
        )
    logger.debug("Logger initialized at level {}", level)


def configure_from(config: SessionConfig) -> None:
    configure_logging(config.log_level, config.log_file, config.log_rotation, config.log_retention)
