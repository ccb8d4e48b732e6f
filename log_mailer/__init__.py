"""Log Mailer - deliver log events by email over SMTP.

Converts one or more structured log events into a single email and sends
it through an SMTP server:
- Order-preserving composition of header, per-event bodies and footer
- Jinja2 templates with ``${name}`` placeholders
- Capability-gated configuration (port, authentication, credentials)
- Full and restricted SMTP transport tiers
- A logging.Handler adapter for the standard logging pipeline

Modules:
    - core: Exceptions, logger, base utilities
    - config: Pydantic v2 settings and the capability-checking builder
    - models: Data models (LogEvent, TargetConfig, OutboundMessage, CapabilitySet)
    - templates: Template compilation and rendering (Jinja2)
    - composer: Message composition
    - clients: Capability probe and SMTP transports
    - target: MailTarget and MailHandler

Usage:
    import logging
    from log_mailer import MailHandler, MailTarget

    target = MailTarget.from_settings()      # reads MAIL_* / SMTP_* variables
    handler = MailHandler(target, capacity=20, flush_level=logging.ERROR)
    logging.getLogger("app").addHandler(handler)

Author: Odiseo
Created: 2025-10-18
Version: 1.0.0
"""

__version__ = "1.0.0"

# Clients
from log_mailer.clients import (
    RelayTransport,
    SMTPTransport,
    Transport,
    create_transport,
    probe_capabilities,
)

# Composer
from log_mailer.composer import MessageComposer, compose

# Configuration
from log_mailer.config import ConfigGuard, MailSettings, TargetConfigBuilder

# Core utilities
from log_mailer.core import (
    CapabilityError,
    LogMailerError,
    MailConfigError,
    TemplateRenderError,
    TransportError,
    get_logger,
)

# Models
from log_mailer.models import (
    CapabilitySet,
    LogEvent,
    OutboundMessage,
    SmtpAuthenticationMode,
    TargetConfig,
    TransportTier,
)

# Target
from log_mailer.target import MailHandler, MailTarget

# Templates
from log_mailer.templates import Template, TemplateRenderer

__all__ = [
    # Version
    "__version__",
    # Core exceptions
    "LogMailerError",
    "MailConfigError",
    "CapabilityError",
    "TransportError",
    "TemplateRenderError",
    "get_logger",
    # Configuration
    "MailSettings",
    "ConfigGuard",
    "TargetConfigBuilder",
    # Models - Enums
    "SmtpAuthenticationMode",
    "TransportTier",
    # Models - Core
    "CapabilitySet",
    "LogEvent",
    "OutboundMessage",
    "TargetConfig",
    # Templates
    "Template",
    "TemplateRenderer",
    # Composer
    "MessageComposer",
    "compose",
    # Clients
    "Transport",
    "SMTPTransport",
    "RelayTransport",
    "create_transport",
    "probe_capabilities",
    # Target
    "MailTarget",
    "MailHandler",
]
