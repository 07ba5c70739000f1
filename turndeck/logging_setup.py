"""Logging configuration for turndeck hosts and command-line tools."""

import logging
import os
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def logging_disabled() -> bool:
    """Whether ``TURNDECK_DISABLE_LOGGING`` asks for quiet operation."""
    return os.environ.get("TURNDECK_DISABLE_LOGGING", "").lower() in ("1", "true", "yes")


def configure_logging(
    level: Union[int, str] = logging.INFO, disabled: Optional[bool] = None
) -> logging.Logger:
    """
    Attach a console handler to the ``turndeck`` logger.

    Calling this more than once does not add duplicate handlers. When
    logging is disabled through the environment only errors are shown.

    Args:
        level: Level name or number for the package logger
        disabled: Force quiet mode on or off; None reads the environment

    Returns:
        The package logger
    """
    logger = logging.getLogger("turndeck")
    if disabled is None:
        disabled = logging_disabled()
    if disabled:
        logger.setLevel(logging.ERROR)
    else:
        logger.setLevel(level.upper() if isinstance(level, str) else level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger
