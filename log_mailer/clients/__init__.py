"""Clients module for log mailer.

Contains the SMTP transports and the transport capability probe.

Author: Odiseo
Created: 2025-10-18
Version: 1.0.0
"""

from log_mailer.clients.capability import TIER_CHOICES, probe_capabilities
from log_mailer.clients.smtp import (
    RelayTransport,
    SMTPTransport,
    Transport,
    create_transport,
)

__all__ = [
    "Transport",
    "SMTPTransport",
    "RelayTransport",
    "create_transport",
    "probe_capabilities",
    "TIER_CHOICES",
]
