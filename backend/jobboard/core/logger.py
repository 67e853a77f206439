"""
Console logging helpers.

Every service area gets its own named logger with a bracketed prefix so the
terminal output of a running server stays readable.
"""

import logging


def get_logger(area: str, debug: bool = False) -> logging.Logger:
    """
    Return the logger for a service area, attaching a console handler once.

    Args:
        area: Short area name, e.g. "auth" or "analytics"
        debug: Lower the level to DEBUG

    Returns:
        The configured logger
    """
    logger = logging.getLogger(area)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            f"%(asctime)s [{area.upper()}] %(levelname)s %(message)s"
        ))
        logger.addHandler(handler)

    return logger


LOG_AREAS = ("server", "auth", "otp", "sms", "sessions", "store", "analytics")


def configure_logging(debug: bool = False) -> None:
    """Apply the DEBUG setting to every service area logger."""
    for area in LOG_AREAS:
        get_logger(area, debug=debug)
