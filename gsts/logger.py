"""
Logger - Handler setup for the ``gsts`` logger hierarchy.

Logs always go to stderr so stdout stays reserved for the credentials
payload read by ``credential_process``.
"""

from typing import IO, Optional
import logging
import sys

LOGGER_NAME = "gsts"

TTY_FORMAT = "%(levelname)s %(message)s"
PLAIN_FORMAT = "%(asctime)s %(levelname)s gsts: %(message)s"
PLAIN_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def level_for_verbosity(verbosity: int) -> int:
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


class SuppressDebugFilter(logging.Filter):
    """Drops DEBUG records, which may contain secrets, when stderr is captured."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno > logging.DEBUG


def configure_logging(
    verbosity: int = 0,
    is_tty: Optional[bool] = None,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """
    Install the single stderr handler of the ``gsts`` logger.

    Calling it again replaces the previous handler.

    Args:
        verbosity: 0 for warnings, 1 for info, 2 or more for debug
        is_tty: Whether output is interactive (defaults to stderr.isatty())
        stream: Destination stream (defaults to stderr)

    Returns:
        The configured ``gsts`` logger
    """
    stream = stream or sys.stderr
    if is_tty is None:
        is_tty = stream.isatty()

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    if is_tty:
        handler.setFormatter(logging.Formatter(TTY_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt=PLAIN_DATE_FORMAT))
        handler.addFilter(SuppressDebugFilter())

    logger.addHandler(handler)
    logger.setLevel(level_for_verbosity(verbosity))
    logger.propagate = False

    return logger
