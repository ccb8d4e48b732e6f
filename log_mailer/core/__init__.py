"""Core module for log mailer.

Provides foundational utilities, exceptions, and logging configuration.

Author: Odiseo
Created: 2025-10-18
Version: 2.0.0
"""

from log_mailer.core.exceptions import (
    CapabilityError,
    LogMailerError,
    MailConfigError,
    TemplateRenderError,
    TransportError,
)
from log_mailer.core.logger import (
    get_logger,
    get_logs_directory,
    log_context,
    setup_logging,
)

__all__ = [
    # Exceptions
    "LogMailerError",
    "MailConfigError",
    "CapabilityError",
    "TransportError",
    "TemplateRenderError",
    # Logging
    "get_logger",
    "setup_logging",
    "get_logs_directory",
    "log_context",
]
