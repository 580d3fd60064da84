"""Logging setup for the command-line entry point."""

import logging
import sys
from typing import Iterable

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# httpx logs every request URL at INFO, and Graph delta links embed sync cursors.
CHATTY_LOGGERS = ("httpx", "httpcore")


def configure_logging(
    level: str = "INFO", *, chatty_loggers: Iterable[str] = CHATTY_LOGGERS
) -> None:
    """Route log records to stderr at ``level``.

    Records go to stderr so they never interleave with the sign-in
    instructions and summaries printed on stdout. Calling this again replaces
    the previous handlers, which lets ``--log-level`` override the setting.
    """
    level_name = level.upper()
    logging.basicConfig(
        level=level_name, format=LOG_FORMAT, stream=sys.stderr, force=True
    )
    quiet_level = max(logging.WARNING, logging.getLogger().level)
    for name in chatty_loggers:
        logging.getLogger(name).setLevel(quiet_level)


__all__ = ["configure_logging"]
