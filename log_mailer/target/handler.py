"""Logging handler that mails buffered records through a MailTarget.

Version: 1.0.0
"""

from __future__ import annotations

import logging
import logging.handlers

from log_mailer.models.event import LogEvent
from log_mailer.target.mail import MailTarget


class MailHandler(logging.handlers.BufferingHandler):
    """Buffer log records and send them as one email per flush.

    The buffer is flushed when it reaches ``capacity``, when a record at or
    above ``flush_level`` arrives, and on close. Each flush swaps the buffer
    out under the handler lock, so records from concurrent producers end up
    in exactly one message.

    Send failures are reported through :meth:`logging.Handler.handleError`,
    which is how the logging pipeline surfaces handler errors.

    Example:
        handler = MailHandler(MailTarget.from_settings(), capacity=50)
        logging.getLogger("app").addHandler(handler)
    """

    def __init__(
        self,
        target: MailTarget,
        capacity: int = 1,
        flush_level: int = logging.ERROR,
    ) -> None:
        super().__init__(capacity)
        self.target = target
        self.flush_level = flush_level

    def shouldFlush(self, record: logging.LogRecord) -> bool:
        return (
            len(self.buffer) >= self.capacity
            or record.levelno >= self.flush_level
        )

    def flush(self) -> None:
        self.acquire()
        try:
            records, self.buffer = self.buffer, []
        finally:
            self.release()

        if not records:
            return

        try:
            self.target.write_batch([LogEvent.from_record(r) for r in records])
        except Exception:
            self.handleError(records[-1])
