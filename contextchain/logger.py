"""
Opt-in log output for contextchain.

The package only writes through loggers under the ``contextchain`` namespace
and leaves their handlers and propagation to the host. ``enable_logging`` is
for hosts without a logging setup of their own.
"""

import json
import logging
from datetime import datetime, timezone
from typing import IO, Optional

PACKAGE_LOGGER = "contextchain"


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record):
        log_record = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "logger": record.name,
            "level": record.levelname,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_record)


def enable_logging(
    level: int = logging.INFO,
    json_logs: bool = False,
    stream: Optional[IO[str]] = None,
) -> logging.Handler:
    """
    Attach a stream handler to the ``contextchain`` logger.

    Args:
        level: Minimum level of the records to emit
        json_logs: Emit JSON objects instead of plain text lines
        stream: Stream to write to (defaults to stderr)

    Returns:
        The attached handler, to pass to ``disable_logging``
    """
    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        JSONFormatter()
        if json_logs
        else logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s", "%Y-%m-%d %H:%M:%S")
    )
    handler.setLevel(level)
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.addHandler(handler)
    if logger.level == logging.NOTSET or logger.level > level:
        logger.setLevel(level)
    return handler


def disable_logging(handler: logging.Handler) -> None:
    """Detach a handler returned by ``enable_logging``."""
    logging.getLogger(PACKAGE_LOGGER).removeHandler(handler)
    handler.close()
