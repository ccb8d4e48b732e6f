"""Log event model.

Defines the immutable log event record consumed by template rendering.

Author: Odiseo
Created: 2025-10-18
Version: 1.0.0
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRIBUTES = frozenset(logging.makeLogRecord({}).__dict__) | {
    "message",
    "asctime",
}

_exception_formatter = logging.Formatter()


class LogEvent(BaseModel):
    """A single structured log event.

    The mail target treats events as opaque: they are only ever consumed
    through template rendering via :meth:`context`.

    Attributes:
        message: Fully formatted log message text.
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        logger_name: Name of the logger that emitted the event.
        timestamp: When the event was created.
        exception: Formatted traceback, if the event carried one.
        properties: Additional context values available to templates.
    """

    model_config = ConfigDict(frozen=True)

    message: str = Field(default="", description="Formatted log message")
    level: str = Field(default="INFO", description="Level name")
    logger_name: str = Field(default="", description="Emitting logger name")
    timestamp: datetime = Field(
        default_factory=datetime.now, description="Event creation time"
    )
    exception: str | None = Field(default=None, description="Formatted traceback")
    properties: dict[str, Any] = Field(
        default_factory=dict, description="Extra template context"
    )

    @classmethod
    def from_record(cls, record: logging.LogRecord) -> LogEvent:
        """Build an event from a standard library log record.

        Args:
            record: Record produced by the logging pipeline.

        Returns:
            Event carrying the record's message, level, logger, time,
            formatted exception and every ``extra`` attribute.
        """
        exception = None
        if record.exc_info:
            exception = _exception_formatter.formatException(record.exc_info)
        elif record.exc_text:
            exception = record.exc_text

        properties = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRIBUTES
        }

        return cls(
            message=record.getMessage(),
            level=record.levelname,
            logger_name=record.name,
            timestamp=datetime.fromtimestamp(record.created),
            exception=exception,
            properties=properties,
        )

    def context(self) -> dict[str, Any]:
        """Return the template rendering context for this event."""
        ts = self.timestamp
        context: dict[str, Any] = {
            "message": self.message,
            "level": self.level,
            "logger": self.logger_name,
            "timestamp": ts,
            "longdate": ts.strftime("%Y-%m-%d %H:%M:%S.") + f"{ts.microsecond // 100:04d}",
            "shortdate": ts.strftime("%Y-%m-%d"),
            "time": ts.strftime("%H:%M:%S.") + f"{ts.microsecond // 100:04d}",
            "exception": self.exception or "",
        }
        context.update(self.properties)
        return context
