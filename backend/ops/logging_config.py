"""
Structured logging configuration.

Development gets human-readable console lines; production gets one JSON
object per line on stdout so posting and import activity can be shipped
to a log aggregator as-is.

Environment variables:
- LOG_FORMAT: "json" or "console" (default: json in production)
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
"""
import json
import logging
import os
from datetime import datetime, timezone

# Application loggers that get their own handler entry.
APP_LOGGERS = (
    "accounts",
    "accounting",
    "reports",
    "inventory",
    "dataimport",
    "ops",
    "celery",
)

# Attributes every LogRecord carries; anything else came in through `extra`.
_STANDARD_ATTRS = frozenset({
    "name", "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "lineno", "funcName", "created",
    "msecs", "relativeCreated", "thread", "threadName",
    "processName", "process", "exc_info", "exc_text", "stack_info",
    "message", "taskName",
})


def _logger(level: str, handler: str = "console") -> dict:
    return {"handlers": [handler], "level": level, "propagate": False}


def get_logging_config(debug: bool = False) -> dict:
    """Build the Django LOGGING dict for the given debug mode."""
    level = os.environ.get("LOG_LEVEL", "DEBUG" if debug else "INFO")
    fmt = os.environ.get("LOG_FORMAT", "console" if debug else "json")

    formatters = {
        "json": {"()": "ops.logging_config.JsonFormatter"},
        "console": {"format": "[{asctime}] {levelname} {name} {message}", "style": "{"},
    }

    loggers = {name: _logger(level) for name in APP_LOGGERS}
    loggers.update({
        "django": _logger(level),
        "django.request": _logger(level if debug else "ERROR"),
        # SQL echo only while debugging.
        "django.db.backends": _logger("DEBUG", "console") if debug else _logger("INFO", "null"),
    })

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {fmt: formatters.get(fmt, formatters["json"])},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": fmt,
                "stream": "ext://sys.stdout",
            },
            "null": {"class": "logging.NullHandler"},
        },
        "root": {"handlers": ["console"], "level": level},
        "loggers": loggers,
    }


class JsonFormatter(logging.Formatter):
    """One JSON object per record. Fields passed with ``extra=`` go under "extra"."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.lineno}",
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extra = {key: value for key, value in record.__dict__.items() if key not in _STANDARD_ATTRS}
        if extra:
            entry["extra"] = extra

        return json.dumps(entry, default=str)
