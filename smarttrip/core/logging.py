"""
Structured logging configuration.

Every record emitted under the `smarttrip` logger is written to stdout as one
JSON object per line.
"""
import json
import logging
from datetime import datetime, timezone

_RESERVED = set(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """
    Formats log records as JSON.

    Each entry carries timestamp, level, logger and message, plus any
    fields passed through `extra=`.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED:
                log_entry[key] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def configure_logging(level: str = "INFO", logger_name: str = "smarttrip") -> logging.Logger:
    """
    Install the JSON formatter on the service logger.

    Args:
        level: Level name, e.g. "INFO" or "DEBUG"
        logger_name: Root of the logger hierarchy to configure

    Returns:
        The configured logger
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(level.upper())
    logger.handlers = []

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    return logger
