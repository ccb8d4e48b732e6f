"""Models module for log mailer.

Defines Pydantic v2 data models for log events, transport capabilities,
target configuration and outbound messages.

Author: Odiseo
Created: 2025-10-18
Version: 1.0.0
"""

from log_mailer.models.capability import CapabilitySet, TransportTier
from log_mailer.models.event import LogEvent
from log_mailer.models.message import OutboundMessage, split_addresses
from log_mailer.models.target_config import (
    DEFAULT_BODY,
    DEFAULT_SMTP_PORT,
    SmtpAuthenticationMode,
    TargetConfig,
)

__all__ = [
    # Enums
    "SmtpAuthenticationMode",
    "TransportTier",
    # Models
    "CapabilitySet",
    "LogEvent",
    "OutboundMessage",
    "TargetConfig",
    # Helpers
    "split_addresses",
    "DEFAULT_BODY",
    "DEFAULT_SMTP_PORT",
]
