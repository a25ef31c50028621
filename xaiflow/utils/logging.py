"""
Logging setup for xaiflow.

Library modules log through loguru's shared ``logger``. Applications call
``setup_logging`` once to choose the sinks; the library never configures
sinks on import.
"""

import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger

_LOGGER_CONFIGURED = False

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function} | {message}"


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    rotation: str = "1 day",
    retention: str = "30 days",
    force: bool = False,
) -> None:
    """
    Configure loguru sinks: stderr at ``level`` and, optionally, a rotating file.

    Only the first call takes effect unless ``force`` is set.
    """
    global _LOGGER_CONFIGURED
    if _LOGGER_CONFIGURED and not force:
        return

    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)
    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            sink=str(path),
            rotation=rotation,
            retention=retention,
            level=level.upper(),
            format=LOG_FORMAT,
            enqueue=True,
            backtrace=True,
            diagnose=False,
        )
    _LOGGER_CONFIGURED = True
    logger.debug("Logging configured (level={}, file={})", level, log_file)


def reset_logging() -> None:
    """Drop all sinks and allow ``setup_logging`` to run again (used by tests)."""
    global _LOGGER_CONFIGURED
    logger.remove()
    _LOGGER_CONFIGURED = False
