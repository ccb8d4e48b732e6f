"""SMTP transports for log mailer.

Maps a validated TargetConfig onto a concrete SMTP send. Two transports share
one send skeleton and differ in how they address the message and wire
authentication:

- SMTPTransport: full tier. Structured address headers, custom port and
  credentials applied directly to the SMTP session.
- RelayTransport: restricted tier. Plain delimited-string headers; port and
  authentication travel in an extension field bag, which some relays lack.

Every send opens its own SMTP session, so concurrent callers never share a
connection. Sends are synchronous and single-attempt; failures surface as
TransportError.

Author: Odiseo
Version: 3.0.0
"""

from __future__ import annotations

import email.errors
import smtplib
from email.headerregistry import Address
from email.message import EmailMessage, Message
from email.mime.text import MIMEText
from email.utils import getaddresses
from typing import Any, Protocol, runtime_checkable

from log_mailer.clients.capability import probe_capabilities
from log_mailer.core.exceptions import TransportError
from log_mailer.core.logger import get_logger, log_context
from log_mailer.models.capability import CapabilitySet, TransportTier
from log_mailer.models.message import OutboundMessage, split_addresses
from log_mailer.models.target_config import (
    DEFAULT_SMTP_PORT,
    SmtpAuthenticationMode,
    TargetConfig,
)

logger = get_logger(__name__)

# Body charset is fixed; TargetConfig.encoding is informational only.
BODY_CHARSET = "utf-8"

# Extension field bag keys understood by relay transports
FIELD_SERVER_PORT = "smtpserverport"
FIELD_AUTHENTICATE = "smtpauthenticate"
FIELD_USERNAME = "sendusername"
FIELD_PASSWORD = "sendpassword"
AUTHENTICATE_BASIC = "1"
AUTHENTICATE_NTLM = "2"


@runtime_checkable
class Transport(Protocol):
    """Sends one OutboundMessage per call."""

    capabilities: CapabilitySet

    def send(self, message: OutboundMessage, config: TargetConfig) -> None:
        """Send the message.

        Raises:
            TransportError: On connection, authentication or protocol failure.
        """
        ...


class _BaseSMTPTransport:
    """Shared send skeleton for the SMTP transports."""

    def __init__(
        self,
        capabilities: CapabilitySet,
        smtp_class: type[smtplib.SMTP] = smtplib.SMTP,
    ) -> None:
        self.capabilities = capabilities
        self.smtp_class = smtp_class

    # Subclass hooks -----------------------------------------------------
    def build_message(self, message: OutboundMessage) -> Message:
        raise NotImplementedError

    def _port(self, config: TargetConfig) -> int:
        raise NotImplementedError

    def _authenticate(self, smtp: smtplib.SMTP, config: TargetConfig) -> None:
        raise NotImplementedError

    # --------------------------------------------------------------------
    def _skip_authentication(self, mode: SmtpAuthenticationMode) -> None:
        logger.warning(
            f"SMTP authentication mode {mode.value} is not supported by the "
            f"{self.capabilities.tier.value} transport; sending without authentication"
        )

    def _login_basic(self, smtp: smtplib.SMTP, config: TargetConfig) -> None:
        if not self.capabilities.supports_credentials:
            self._skip_authentication(SmtpAuthenticationMode.BASIC)
            return
        smtp.login(config.smtp_username or "", config.smtp_password or "")

    def _login_integrated(self, smtp: smtplib.SMTP) -> None:
        if not self.capabilities.supports_integrated_auth:
            self._skip_authentication(SmtpAuthenticationMode.NTLM)
            return
        smtp.ehlo_or_helo_if_needed()
        smtp.auth("NTLM", smtp.auth_ntlm)

    def send(self, message: OutboundMessage, config: TargetConfig) -> None:
        """Send an outbound message in a fresh SMTP session.

        Args:
            message: Composed message.
            config: Target configuration supplying server and credentials.

        Raises:
            TransportError: If the message cannot be built or the SMTP
                exchange fails.
        """
        try:
            mime_message = self.build_message(message)
        except (ValueError, email.errors.MessageError) as e:
            logger.error(f"Failed to build mail message: {e}")
            raise TransportError(f"Invalid mail message: {e}") from e

        recipients = self._envelope_recipients(message)
        port = self._port(config)

        logger.debug(f"Sending mail to {message.to} using {config.smtp_server}")

        try:
            with self.smtp_class(config.smtp_server, port) as smtp:
                self._authenticate(smtp, config)
                smtp.send_message(mime_message, to_addrs=recipients)
        except (smtplib.SMTPException, OSError, email.errors.MessageError) as e:
            logger.error(
                "Failed to send mail: "
                + log_context("send", recipient=message.to, server=config.smtp_server, port=port)
                + f": {e}"
            )
            raise TransportError(
                f"Failed to send mail to {message.to} using {config.smtp_server}:{port}: {e}",
                is_transient=self._is_transient_error(e),
            ) from e

        logger.info(
            f"Mail sent to {message.to} - Subject: {message.subject[:50]}"
        )

    def _envelope_recipients(self, message: OutboundMessage) -> list[str]:
        return [addr for _, addr in getaddresses(message.recipients()) if addr]

    @staticmethod
    def _is_transient_error(error: Exception) -> bool:
        """Determine if error is temporary.

        Args:
            error: Exception to analyze.

        Returns:
            True if a later send may succeed.
        """
        if isinstance(error, smtplib.SMTPResponseException):
            return 400 <= error.smtp_code < 500
        if isinstance(error, (smtplib.SMTPServerDisconnected, smtplib.SMTPConnectError)):
            return True

        error_str = str(error).lower()
        transient_keywords = [
            "timeout",
            "timed out",
            "connection",
            "temporarily",
            "try again",
            "unavailable",
            "refused",
            "reset",
            "broken pipe",
        ]
        return any(keyword in error_str for keyword in transient_keywords)


class SMTPTransport(_BaseSMTPTransport):
    """Full-tier transport with structured addressing and direct credentials."""

    @staticmethod
    def _addresses(value: str | None) -> tuple[Address, ...]:
        return tuple(
            Address(display_name=name, addr_spec=addr)
            for name, addr in getaddresses(split_addresses(value))
            if addr
        )

    def build_message(self, message: OutboundMessage) -> EmailMessage:
        """Build a structured EmailMessage.

        Raises:
            ValueError: If a rendered address cannot be parsed.
        """
        msg = EmailMessage()
        msg["From"] = self._addresses(message.from_)
        msg["To"] = self._addresses(message.to)
        if message.cc:
            msg["Cc"] = self._addresses(message.cc)
        if message.bcc:
            msg["Bcc"] = self._addresses(message.bcc)
        msg["Subject"] = message.subject
        msg.set_content(
            message.body,
            subtype="html" if message.is_html else "plain",
            charset=BODY_CHARSET,
        )
        return msg

    def _envelope_recipients(self, message: OutboundMessage) -> list[str]:
        return [
            address.addr_spec
            for field in (message.to, message.cc, message.bcc)
            for address in self._addresses(field)
        ]

    def _port(self, config: TargetConfig) -> int:
        return config.smtp_port

    def _authenticate(self, smtp: smtplib.SMTP, config: TargetConfig) -> None:
        mode = config.smtp_authentication
        if mode is SmtpAuthenticationMode.BASIC:
            self._login_basic(smtp, config)
        elif mode is SmtpAuthenticationMode.NTLM:
            self._login_integrated(smtp)


class RelayTransport(_BaseSMTPTransport):
    """Restricted-tier transport with string addressing and a field bag."""

    def build_message(self, message: OutboundMessage) -> MIMEText:
        msg = MIMEText(
            message.body,
            "html" if message.is_html else "plain",
            BODY_CHARSET,
        )
        msg["From"] = message.from_
        msg["To"] = message.to
        if message.cc:
            msg["Cc"] = message.cc
        if message.bcc:
            msg["Bcc"] = message.bcc
        msg["Subject"] = message.subject
        return msg

    def build_fields(self, config: TargetConfig) -> dict[str, Any] | None:
        """Map port and authentication onto the extension field bag.

        Returns:
            The field bag, or None on relays without one. Port and
            authentication are never configured on such relays.
        """
        if not self.capabilities.supports_extended_fields:
            return None

        fields: dict[str, Any] = {}
        if config.smtp_port != DEFAULT_SMTP_PORT:
            fields[FIELD_SERVER_PORT] = config.smtp_port
        if config.smtp_authentication is SmtpAuthenticationMode.BASIC:
            fields[FIELD_AUTHENTICATE] = AUTHENTICATE_BASIC
            fields[FIELD_USERNAME] = config.smtp_username
            fields[FIELD_PASSWORD] = config.smtp_password
        elif config.smtp_authentication is SmtpAuthenticationMode.NTLM:
            fields[FIELD_AUTHENTICATE] = AUTHENTICATE_NTLM
        return fields

    def _port(self, config: TargetConfig) -> int:
        fields = self.build_fields(config) or {}
        return fields.get(FIELD_SERVER_PORT, DEFAULT_SMTP_PORT)

    def _authenticate(self, smtp: smtplib.SMTP, config: TargetConfig) -> None:
        fields = self.build_fields(config)
        if not fields:
            return
        mode = fields.get(FIELD_AUTHENTICATE)
        if mode == AUTHENTICATE_BASIC:
            if not self.capabilities.supports_credentials:
                self._skip_authentication(SmtpAuthenticationMode.BASIC)
                return
            smtp.login(fields[FIELD_USERNAME] or "", fields[FIELD_PASSWORD] or "")
        elif mode == AUTHENTICATE_NTLM:
            self._login_integrated(smtp)


def create_transport(
    capabilities: CapabilitySet | None = None,
    smtp_class: type[smtplib.SMTP] = smtplib.SMTP,
) -> SMTPTransport | RelayTransport:
    """Select the transport implementation for a capability tier.

    Args:
        capabilities: Probed capabilities (probes with ``auto`` if None).
        smtp_class: SMTP client class to instantiate per send.

    Returns:
        SMTPTransport for the full tier, RelayTransport otherwise.
    """
    capabilities = capabilities or probe_capabilities()
    if capabilities.tier is TransportTier.FULL:
        return SMTPTransport(capabilities, smtp_class=smtp_class)
    return RelayTransport(capabilities, smtp_class=smtp_class)
