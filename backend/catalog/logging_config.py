"""Root logger setup for the catalog API.

Failures are reported on ``catalog.failures``; records carry message keys,
error codes and field names, never pattern text submitted by clients.
"""
import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

FAILURE_LOGGER_NAME = "catalog.failures"

# Per-request access lines and SQL echo drown out failure records.
_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine")


def configure_logging(level: str = "INFO") -> None:
    """Send every catalog logger to stdout at ``level`` (``Settings.LOG_LEVEL``).

    Unknown level names fall back to INFO. Called once per ``create_app``.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stdout,
        force=True,
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
