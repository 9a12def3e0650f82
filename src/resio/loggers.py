"""Logger setup for resource access."""

import logging
import sys
import time

from resio.settings import get_settings


# pylint: disable=too-few-public-methods
class LogNameFilter(logging.Filter):
    """Filter the logger's name to take only the topmost level."""

    def filter(self, record):
        """Filter the logger's name to take only the topmost level."""
        record.name = record.name.rsplit(".", 1)[-1]
        return True


class UTCFormatter(logging.Formatter):
    """A formatter with timestamps in the UTC timezone."""

    converter = time.gmtime


def get_default_handler() -> logging.Handler:
    """Get the default logging handler."""
    handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(LogNameFilter())
    formatter = UTCFormatter("[%(asctime)s] %(levelname)s - %(name)s: %(message)s")
    handler.setFormatter(formatter)
    return handler


def get_logger(component: str) -> logging.Logger:
    """Get a base logger, that handles its own logging and does not propagate.

    The level is taken from the `log_level` setting on first configuration.

    """
    logger = logging.getLogger(component)

    if not logger.handlers:  # First time configuration.
        logger.propagate = False
        handler = get_default_handler()
        logger.addHandler(handler)
        logger.setLevel(get_settings().log_level)

    return logger


def get_child_logger(component: str, parent: logging.Logger) -> logging.Logger:
    """Get a child logger from a parent.

    These propagate messages up to the parent, rather than handling
    messages themselves.

    """
    if parent.name == "root":
        logger_name = component
    else:
        logger_name = f"{parent.name}.{component}"
    return logging.getLogger(logger_name)


ROOT_LOGGER = get_logger("resio")
"""The base logger for the package. Implementations log via its children."""
