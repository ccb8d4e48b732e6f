"""Mail target configuration model.

Defines the immutable configuration of a mail target: message templates,
content settings and SMTP connection parameters. Build instances through
:class:`log_mailer.config.guard.TargetConfigBuilder` so privileged settings
are checked against the transport capabilities.

Author: Odiseo
Created: 2025-10-18
Version: 1.0.0
"""

from __future__ import annotations

import codecs
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from log_mailer.templates.renderer import Template

DEFAULT_SMTP_PORT = 25
DEFAULT_BODY = "${message}"


class SmtpAuthenticationMode(str, Enum):
    """SMTP authentication modes.

    Attributes:
        NONE: No authentication.
        BASIC: Username and password.
        NTLM: Integrated authentication with the process credentials.
    """

    NONE = "None"
    BASIC = "Basic"
    NTLM = "Ntlm"

    @classmethod
    def _missing_(cls, value: object) -> SmtpAuthenticationMode | None:
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return None


class TargetConfig(BaseModel):
    """Mail target configuration.

    Read-only for the lifetime of the target and safe to share across threads.
    From, To and Subject must all be set for a send to happen; otherwise
    delivery is a silent no-op.

    Attributes:
        from_: Sender template (e.g. "logger@example.com").
        to: Recipients template, semicolon separated.
        cc: Carbon-copy recipients template.
        bcc: Blind carbon-copy recipients template.
        subject: Subject template.
        header: Body header template, rendered once per message.
        footer: Body footer template, rendered once per message.
        body: Body template, rendered once per event (default "${message}").
        encoding: Encoding name, exposed for introspection only.
        is_html: Send the body as text/html instead of text/plain.
        smtp_server: SMTP server hostname.
        smtp_port: SMTP server port (default 25).
        smtp_authentication: Authentication mode.
        smtp_username: Username for basic authentication.
        smtp_password: Password for basic authentication.
    """

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,
        populate_by_name=True,
    )

    from_: Template | None = Field(default=None, alias="from")
    to: Template | None = None
    cc: Template | None = None
    bcc: Template | None = None
    subject: Template | None = None
    header: Template | None = None
    footer: Template | None = None
    body: Template | None = Field(
        default_factory=lambda: Template(DEFAULT_BODY, name="body")
    )
    encoding: str = Field(default="utf-8", description="Encoding name")
    is_html: bool = Field(default=False, description="Send body as HTML")
    smtp_server: str = Field(..., min_length=1, description="SMTP server hostname")
    smtp_port: int = Field(
        default=DEFAULT_SMTP_PORT, ge=1, le=65535, description="SMTP server port"
    )
    smtp_authentication: SmtpAuthenticationMode = Field(
        default=SmtpAuthenticationMode.NONE, description="Authentication mode"
    )
    smtp_username: str | None = Field(default=None, description="SMTP username")
    smtp_password: str | None = Field(default=None, description="SMTP password")

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        """Normalize the encoding name through the codec registry.

        Raises:
            ValueError: If the encoding is unknown.
        """
        try:
            return codecs.lookup(v).name
        except LookupError:
            raise ValueError(f"Unknown encoding: {v}") from None

    @field_validator("smtp_server")
    @classmethod
    def validate_smtp_server(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("smtp_server cannot be empty")
        return v.strip()

    @property
    def can_send(self) -> bool:
        """Whether From, To and Subject are all configured."""
        return (
            self.from_ is not None
            and self.to is not None
            and self.subject is not None
        )

    def layouts(self) -> list[Template]:
        """Return every configured template."""
        candidates = (
            self.from_,
            self.to,
            self.cc,
            self.bcc,
            self.subject,
            self.header,
            self.footer,
            self.body,
        )
        return [layout for layout in candidates if layout is not None]
