"""JSON logging configuration for the breakout room client.

The library modules only create named loggers; handlers are installed
by entry points (the CLI) through configure_logging().
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

from breakoutroom.exceptions import BreakoutError


class JsonFormatter(logging.Formatter):
    """One JSON object per record.

    Negotiation context passed through ``extra`` (room key, host or
    participant username, discovery domain) becomes top-level keys. A
    logged BreakoutError also contributes its error code.
    """

    context_fields = ("room_key", "username", "domain")

    def format(self, record):
        payload = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update({
            field: getattr(record, field)
            for field in self.context_fields
            if getattr(record, field, None) is not None
        })
        if record.exc_info:
            error = record.exc_info[1]
            if isinstance(error, BreakoutError):
                payload["code"] = error.code
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(
    log_file: str = None,
    log_level: str = None,
):
    """Configure logging with JSON formatter.

    Console output goes to stderr so that command output on stdout stays
    machine readable.

    Args:
        log_file: Optional path to a log file. Defaults to BREAKOUT_LOG_FILE
            env var; no file handler when unset.
        log_level: Log level. Defaults to BREAKOUT_LOG_LEVEL env var or 'WARNING'.
    """
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(JsonFormatter())
    handlers = [console_handler]

    log_file = log_file or os.getenv("BREAKOUT_LOG_FILE")
    if log_file:
        file_handler = logging.FileHandler(log_file, mode='a')
        file_handler.setFormatter(JsonFormatter())
        handlers.append(file_handler)

    root = logging.getLogger()
    log_level = (log_level or os.getenv("BREAKOUT_LOG_LEVEL", "WARNING")).upper()
    root.setLevel(getattr(logging, log_level, logging.WARNING))
    root.handlers = handlers
