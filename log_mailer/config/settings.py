"""Log mailer configuration with Pydantic v2.

Manages message templates, SMTP settings and logging configuration loaded
from environment variables or .env file.

All settings can be overridden via environment variables.

Author: Odiseo
Created: 2025-10-18
Version: 1.0.0
"""

from __future__ import annotations

import codecs

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from log_mailer.clients.capability import TIER_CHOICES
from log_mailer.config.guard import TargetConfigBuilder
from log_mailer.core.exceptions import MailConfigError
from log_mailer.models.capability import CapabilitySet
from log_mailer.models.target_config import (
    DEFAULT_BODY,
    DEFAULT_SMTP_PORT,
    SmtpAuthenticationMode,
    TargetConfig,
)
from log_mailer.templates.renderer import TemplateRenderer


class MailSettings(BaseSettings):
    """Log mailer configuration.

    Loads settings from environment variables and .env file using Pydantic v2.
    All settings are case-sensitive and strictly validated.

    Attributes:
        MAIL_FROM: Sender template.
        MAIL_TO: Recipients template, semicolon separated.
        MAIL_CC: Carbon-copy recipients template.
        MAIL_BCC: Blind carbon-copy recipients template.
        MAIL_SUBJECT: Subject template.
        MAIL_HEADER: Body header template.
        MAIL_FOOTER: Body footer template.
        MAIL_BODY: Per-event body template.
        MAIL_ENCODING: Encoding name (informational).
        MAIL_HTML: Send the body as HTML.
        SMTP_SERVER: SMTP server hostname.
        SMTP_PORT: SMTP server port.
        SMTP_AUTHENTICATION: Authentication mode (None, Basic, Ntlm).
        SMTP_USERNAME: SMTP authentication username.
        SMTP_PASSWORD: SMTP authentication password.
        TRANSPORT_TIER: Transport capability tier (auto, full, restricted,
            restricted-basic).
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        LOG_TO_FILE: Whether to log to file.
        LOG_DIR: Directory for log files.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ========================================================================
    # Message Templates
    # ========================================================================
    MAIL_FROM: str | None = Field(default=None, description="Sender template")
    MAIL_TO: str | None = Field(default=None, description="Recipients template")
    MAIL_CC: str | None = Field(default=None, description="Cc template")
    MAIL_BCC: str | None = Field(default=None, description="Bcc template")
    MAIL_SUBJECT: str | None = Field(default=None, description="Subject template")
    MAIL_HEADER: str | None = Field(default=None, description="Body header template")
    MAIL_FOOTER: str | None = Field(default=None, description="Body footer template")
    MAIL_BODY: str = Field(
        default=DEFAULT_BODY,
        description="Body template repeated for each event",
    )
    MAIL_ENCODING: str = Field(default="utf-8", description="Encoding name")
    MAIL_HTML: bool = Field(default=False, description="Send body as HTML")

    # ========================================================================
    # SMTP Configuration
    # ========================================================================
    SMTP_SERVER: str = Field(default="", description="SMTP server hostname")
    SMTP_PORT: int = Field(
        default=DEFAULT_SMTP_PORT,
        ge=1,
        le=65535,
        description="SMTP server port",
    )
    SMTP_AUTHENTICATION: str = Field(
        default=SmtpAuthenticationMode.NONE.value,
        description="SMTP authentication mode",
    )
    SMTP_USERNAME: str | None = Field(default=None, description="SMTP username")
    SMTP_PASSWORD: str | None = Field(default=None, description="SMTP password")
    TRANSPORT_TIER: str = Field(default="auto", description="Transport tier")

    # ========================================================================
    # Logging Configuration
    # ========================================================================
    LOG_LEVEL: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level",
    )
    LOG_TO_FILE: bool = Field(default=False, description="Whether to log to file")
    LOG_DIR: str = Field(default="./logs", description="Directory for log files")
    LOG_MAX_SIZE_MB: int = Field(
        default=10,
        gt=0,
        description="Maximum log file size in megabytes",
    )
    LOG_BACKUP_COUNT: int = Field(
        default=5,
        gt=0,
        description="Number of backup log files to keep",
    )

    @field_validator(
        "MAIL_FROM",
        "MAIL_TO",
        "MAIL_CC",
        "MAIL_BCC",
        "MAIL_SUBJECT",
        "MAIL_HEADER",
        "MAIL_FOOTER",
        "SMTP_USERNAME",
        "SMTP_PASSWORD",
        mode="before",
    )
    @classmethod
    def blank_as_unset(cls, v: str | None) -> str | None:
        """Treat empty environment values as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("SMTP_SERVER")
    @classmethod
    def validate_smtp_server(cls, v: str) -> str:
        return v.strip()

    @field_validator("SMTP_AUTHENTICATION")
    @classmethod
    def validate_smtp_authentication(cls, v: str) -> str:
        """Normalize the authentication mode name.

        Raises:
            ValueError: If the mode is not None, Basic or Ntlm.
        """
        try:
            return SmtpAuthenticationMode(v).value
        except ValueError:
            raise ValueError(
                f"SMTP_AUTHENTICATION must be None, Basic or Ntlm (got {v!r})"
            ) from None

    @field_validator("MAIL_ENCODING")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        try:
            return codecs.lookup(v).name
        except LookupError:
            raise ValueError(f"Unknown MAIL_ENCODING: {v}") from None

    @field_validator("TRANSPORT_TIER")
    @classmethod
    def validate_transport_tier(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in TIER_CHOICES:
            raise ValueError(
                f"TRANSPORT_TIER must be one of {', '.join(TIER_CHOICES)}"
            )
        return v

    def validate_target_config(self) -> None:
        """Validate the settings required to deliver mail.

        Raises:
            MailConfigError: If required settings are missing.
        """
        missing_fields = [
            name
            for name in ("SMTP_SERVER", "MAIL_FROM", "MAIL_TO", "MAIL_SUBJECT")
            if not getattr(self, name)
        ]
        if missing_fields:
            raise MailConfigError(
                f"Required mail settings missing: {', '.join(missing_fields)}. "
                f"Set these environment variables to enable email sending."
            )

    def get_smtp_config(self) -> dict[str, str | int | None]:
        """Get SMTP configuration as dictionary.

        Returns:
            Dictionary with the SMTP connection settings.
        """
        return {
            "server": self.SMTP_SERVER,
            "port": self.SMTP_PORT,
            "authentication": self.SMTP_AUTHENTICATION,
            "username": self.SMTP_USERNAME,
            "password": self.SMTP_PASSWORD,
            "tier": self.TRANSPORT_TIER,
        }

    def build_target_config(
        self,
        capabilities: CapabilitySet,
        renderer: TemplateRenderer | None = None,
    ) -> TargetConfig:
        """Feed every setting through a TargetConfigBuilder.

        Only privileged settings that differ from their defaults are assigned,
        so an environment that sets nothing privileged works on every tier.

        Args:
            capabilities: Capabilities of the active transport.
            renderer: Renderer to compile templates with (the shared default
                if None).

        Returns:
            Immutable target configuration.

        Raises:
            CapabilityError: If a privileged setting is unsupported.
            MailConfigError: If the configuration is incomplete or invalid.
        """
        builder = (
            TargetConfigBuilder(capabilities, renderer=renderer)
            .set_from(self.MAIL_FROM)
            .set_to(self.MAIL_TO)
            .set_cc(self.MAIL_CC)
            .set_bcc(self.MAIL_BCC)
            .set_subject(self.MAIL_SUBJECT)
            .set_header(self.MAIL_HEADER)
            .set_footer(self.MAIL_FOOTER)
            .set_body(self.MAIL_BODY)
            .set_encoding(self.MAIL_ENCODING)
            .set_html(self.MAIL_HTML)
            .set_smtp_server(self.SMTP_SERVER)
        )

        if self.SMTP_PORT != DEFAULT_SMTP_PORT:
            builder.set_smtp_port(self.SMTP_PORT)
        if SmtpAuthenticationMode(self.SMTP_AUTHENTICATION) is not SmtpAuthenticationMode.NONE:
            builder.set_smtp_authentication(self.SMTP_AUTHENTICATION)
        if self.SMTP_USERNAME:
            builder.set_smtp_username(self.SMTP_USERNAME)
        if self.SMTP_PASSWORD:
            builder.set_smtp_password(self.SMTP_PASSWORD)

        return builder.build()
