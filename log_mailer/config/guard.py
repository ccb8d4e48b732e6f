"""Capability-gated configuration for mail targets.

Privileged properties (authentication mode, username, password, and a port
other than 25) are checked against the transport capabilities at the moment
they are assigned, so unsupported settings surface before any log event is
processed.

Version: 1.0.0
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from log_mailer.core.exceptions import CapabilityError, MailConfigError
from log_mailer.core.logger import get_logger
from log_mailer.models.capability import CapabilitySet
from log_mailer.models.target_config import (
    DEFAULT_BODY,
    DEFAULT_SMTP_PORT,
    SmtpAuthenticationMode,
    TargetConfig,
)
from log_mailer.templates.renderer import Template, TemplateRenderer

logger = get_logger(__name__)

PRIVILEGED_PROPERTIES = frozenset(
    {"smtp_authentication", "smtp_username", "smtp_password", "smtp_port"}
)


class ConfigGuard:
    """Validates privileged properties against a CapabilitySet."""

    def __init__(self, capabilities: CapabilitySet) -> None:
        self.capabilities = capabilities

    @staticmethod
    def is_privileged(property_name: str, value: Any) -> bool:
        """Whether assigning ``value`` to ``property_name`` needs extended fields.

        Any authentication mode is privileged, including None. Only the
        port has a free value: 25.
        """
        if property_name not in PRIVILEGED_PROPERTIES:
            return False
        if property_name == "smtp_port":
            return value != DEFAULT_SMTP_PORT
        return True

    def check(self, property_name: str, value: Any) -> None:
        """Validate a single property assignment.

        Args:
            property_name: Configuration property being set.
            value: New value.

        Raises:
            CapabilityError: If the property is privileged and the transport
                lacks extended field support.
        """
        if self.is_privileged(property_name, value) and not self.capabilities.supports_extended_fields:
            logger.warning(
                f"Rejected {property_name}: not supported by the "
                f"{self.capabilities.tier.value} transport tier"
            )
            raise CapabilityError(property_name)


class TargetConfigBuilder:
    """Validating builder for :class:`TargetConfig`.

    Every setter returns the builder so calls can be chained. Privileged
    setters run the ConfigGuard immediately; a rejected value is not stored
    and the builder stays usable.

    Example:
        builder = TargetConfigBuilder(capabilities)
        builder.set_from("app@example.com").set_to("ops@example.com")
        builder.set_subject("[${level}] ${logger}")
        builder.set_smtp_server("mail.example.com")
        config = builder.build()
    """

    def __init__(
        self,
        capabilities: CapabilitySet,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.guard = ConfigGuard(capabilities)
        self._renderer = renderer
        self._values: dict[str, Any] = {}

    @property
    def capabilities(self) -> CapabilitySet:
        return self.guard.capabilities

    def _template(self, name: str, text: str | Template | None) -> Template | None:
        if text is None or isinstance(text, Template):
            return text
        if self._renderer is not None:
            return self._renderer.template(text, name=name)
        return Template(text, name=name)

    def _set_template(self, name: str, text: str | Template | None) -> TargetConfigBuilder:
        self._values[name] = self._template(name, text)
        return self

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------
    def set_from(self, text: str | Template | None) -> TargetConfigBuilder:
        return self._set_template("from_", text)

    def set_to(self, text: str | Template | None) -> TargetConfigBuilder:
        return self._set_template("to", text)

    def set_cc(self, text: str | Template | None) -> TargetConfigBuilder:
        return self._set_template("cc", text)

    def set_bcc(self, text: str | Template | None) -> TargetConfigBuilder:
        return self._set_template("bcc", text)

    def set_subject(self, text: str | Template | None) -> TargetConfigBuilder:
        return self._set_template("subject", text)

    def set_header(self, text: str | Template | None) -> TargetConfigBuilder:
        return self._set_template("header", text)

    def set_footer(self, text: str | Template | None) -> TargetConfigBuilder:
        return self._set_template("footer", text)

    def set_body(self, text: str | Template | None = DEFAULT_BODY) -> TargetConfigBuilder:
        return self._set_template("body", text)

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------
    def set_encoding(self, encoding: str) -> TargetConfigBuilder:
        self._values["encoding"] = encoding
        return self

    def set_html(self, is_html: bool) -> TargetConfigBuilder:
        self._values["is_html"] = bool(is_html)
        return self

    # ------------------------------------------------------------------
    # SMTP
    # ------------------------------------------------------------------
    def set_smtp_server(self, host: str) -> TargetConfigBuilder:
        self._values["smtp_server"] = host
        return self

    def set_smtp_port(self, port: int) -> TargetConfigBuilder:
        """Set the SMTP port; any port other than 25 is privileged."""
        port = int(port)
        self.guard.check("smtp_port", port)
        self._values["smtp_port"] = port
        return self

    def set_smtp_authentication(
        self, mode: SmtpAuthenticationMode | str
    ) -> TargetConfigBuilder:
        """Set the authentication mode; every assignment is privileged."""
        mode = SmtpAuthenticationMode(mode)
        self.guard.check("smtp_authentication", mode)
        self._values["smtp_authentication"] = mode
        return self

    def set_smtp_username(self, username: str | None) -> TargetConfigBuilder:
        self.guard.check("smtp_username", username)
        self._values["smtp_username"] = username
        return self

    def set_smtp_password(self, password: str | None) -> TargetConfigBuilder:
        self.guard.check("smtp_password", password)
        self._values["smtp_password"] = password
        return self

    # ------------------------------------------------------------------
    def build(self) -> TargetConfig:
        """Build the immutable configuration.

        Returns:
            Validated TargetConfig.

        Raises:
            CapabilityError: If a privileged value slipped past the setters.
            MailConfigError: If the SMTP server is missing or a value is invalid.
        """
        for name in PRIVILEGED_PROPERTIES:
            if name in self._values:
                self.guard.check(name, self._values[name])

        if not self._values.get("smtp_server"):
            raise MailConfigError("SMTP server is not configured")

        try:
            return TargetConfig(**self._values)
        except ValidationError as e:
            raise MailConfigError(f"Invalid mail target configuration: {e}") from e
