"""Integration tests for log mail delivery.

Runs the whole pipeline (settings, capability probe, builder, composer,
transport and logging handler) against an in-process SMTP stand-in, and
exercises the validation command.

Author: Odiseo
Version: 1.0.0
"""

from __future__ import annotations

import logging
import os
from unittest.mock import patch

import pytest

from log_mailer import (
    LogEvent,
    MailHandler,
    MailSettings,
    MailTarget,
    TransportError,
    create_transport,
    probe_capabilities,
)
from log_mailer.scripts import validate_target


class FakeSMTP:
    """Records every session and message it receives."""

    sessions: list[FakeSMTP] = []
    refuse_connections = False

    def __init__(self, host, port):
        if FakeSMTP.refuse_connections:
            raise ConnectionRefusedError(f"Connection refused by {host}:{port}")
        self.host = host
        self.port = port
        self.credentials = None
        self.messages = []
        FakeSMTP.sessions.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def ehlo_or_helo_if_needed(self):
        pass

    def login(self, user, password):
        self.credentials = (user, password)

    def auth(self, mechanism, authobject):
        self.credentials = (mechanism, None)

    def send_message(self, msg, to_addrs=None):
        self.messages.append((msg, list(to_addrs or [])))
        return {}


@pytest.fixture(autouse=True)
def reset_fake_smtp(monkeypatch):
    FakeSMTP.sessions = []
    FakeSMTP.refuse_connections = False
    for name in list(os.environ):
        if name.startswith(("MAIL_", "SMTP_", "TRANSPORT_")):
            monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def app_logger():
    logger = logging.getLogger("tests.integration.app")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    yield logger
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()


def _target(settings: MailSettings) -> MailTarget:
    capabilities = probe_capabilities(settings.TRANSPORT_TIER, FakeSMTP)
    config = settings.build_target_config(capabilities)
    return MailTarget(config, transport=create_transport(capabilities, smtp_class=FakeSMTP))


class TestFullTierDelivery:
    """End-to-end delivery through the full transport."""

    def test_buffered_records_mailed_once(self, app_logger):
        """Test buffered records arrive as one authenticated message."""
        settings = MailSettings(
            _env_file=None,
            MAIL_FROM="Alerts <alerts@example.com>",
            MAIL_TO="ops@example.com;dev@example.com",
            MAIL_BCC="audit@example.com",
            MAIL_SUBJECT="[${level}] ${logger}",
            MAIL_HEADER="Recent events:\n",
            MAIL_BODY="${level} ${message}\n",
            MAIL_FOOTER="-- ${host}",
            SMTP_SERVER="smtp.example.com",
            SMTP_PORT=587,
            SMTP_AUTHENTICATION="Basic",
            SMTP_USERNAME="alerts",
            SMTP_PASSWORD="s3cret",
            TRANSPORT_TIER="auto",
        )
        app_logger.addHandler(MailHandler(_target(settings), capacity=10))

        app_logger.info("cache warm")
        app_logger.warning("queue slow")
        app_logger.error("worker crashed", extra={"host": "web-01"})

        assert len(FakeSMTP.sessions) == 1
        session = FakeSMTP.sessions[0]
        assert (session.host, session.port) == ("smtp.example.com", 587)
        assert session.credentials == ("alerts", "s3cret")

        msg, recipients = session.messages[0]
        assert recipients == ["ops@example.com", "dev@example.com", "audit@example.com"]
        assert msg["Subject"] == "[ERROR] tests.integration.app"
        assert msg["To"] == "ops@example.com, dev@example.com"
        assert msg.get_content() == (
            "Recent events:\n"
            "INFO cache warm\n"
            "WARNING queue slow\n"
            "ERROR worker crashed\n"
            "-- web-01\n"
        )

    def test_unicode_html_body(self):
        """Test HTML bodies with non-ASCII text go out as UTF-8."""
        settings = MailSettings(
            _env_file=None,
            MAIL_FROM="a@example.com",
            MAIL_TO="b@example.com",
            MAIL_SUBJECT="Überwachung",
            MAIL_BODY="<p>${message}</p>",
            MAIL_ENCODING="latin-1",
            MAIL_HTML=True,
            SMTP_SERVER="smtp.example.com",
            TRANSPORT_TIER="full",
        )
        assert _target(settings).write(LogEvent(message="Größe überschritten"))

        msg, _ = FakeSMTP.sessions[0].messages[0]
        assert msg.get_content_type() == "text/html"
        assert msg.get_content_charset() == "utf-8"
        assert "Größe überschritten" in msg.get_content()
        assert msg["Subject"] == "Überwachung"

    def test_connection_failure(self):
        """Test an unreachable server raises a transient TransportError."""
        FakeSMTP.refuse_connections = True
        settings = MailSettings(
            _env_file=None,
            MAIL_FROM="a@example.com",
            MAIL_TO="b@example.com",
            MAIL_SUBJECT="s",
            SMTP_SERVER="smtp.example.com",
        )

        with pytest.raises(TransportError) as exc_info:
            _target(settings).write(LogEvent(message="m"))

        assert exc_info.value.is_transient is True


class TestRestrictedTierDelivery:
    """End-to-end delivery through the relay transport."""

    def test_relay_uses_field_bag(self, app_logger):
        """Test the relay takes port and credentials from the field bag."""
        settings = MailSettings(
            _env_file=None,
            MAIL_FROM="alerts@example.com",
            MAIL_TO="ops@example.com; dev@example.com",
            MAIL_SUBJECT="${message}",
            SMTP_SERVER="relay.example.com",
            SMTP_PORT=2525,
            SMTP_AUTHENTICATION="Basic",
            SMTP_USERNAME="relay",
            SMTP_PASSWORD="pw",
            TRANSPORT_TIER="restricted",
        )
        app_logger.addHandler(MailHandler(_target(settings)))

        app_logger.critical("disk failure")

        session = FakeSMTP.sessions[0]
        assert (session.host, session.port) == ("relay.example.com", 2525)
        assert session.credentials == ("relay", "pw")
        msg, recipients = session.messages[0]
        assert msg["To"] == "ops@example.com; dev@example.com"
        assert recipients == ["ops@example.com", "dev@example.com"]
        assert msg.get_payload(decode=True).decode("utf-8") == "disk failure"

    def test_basic_relay_sends_anonymously(self, app_logger):
        """Test a relay without the field bag sends on port 25."""
        settings = MailSettings(
            _env_file=None,
            MAIL_FROM="alerts@example.com",
            MAIL_TO="ops@example.com",
            MAIL_SUBJECT="alert",
            SMTP_SERVER="relay.example.com",
            TRANSPORT_TIER="restricted-basic",
        )
        app_logger.addHandler(MailHandler(_target(settings)))

        app_logger.info("hello")

        session = FakeSMTP.sessions[0]
        assert session.port == 25
        assert session.credentials is None


class TestValidateTargetCommand:
    """Tests for the validation command."""

    @pytest.fixture(autouse=True)
    def no_root_logging(self):
        with patch.object(validate_target, "setup_logging"):
            yield

    def test_valid_configuration(self, monkeypatch, capsys):
        """Test a complete configuration exits 0 and masks the password."""
        monkeypatch.setenv("MAIL_FROM", "a@example.com")
        monkeypatch.setenv("MAIL_TO", "b@example.com")
        monkeypatch.setenv("MAIL_SUBJECT", "s")
        monkeypatch.setenv("SMTP_SERVER", "smtp.example.com")
        monkeypatch.setenv("SMTP_PASSWORD", "hunter22")

        assert validate_target.main(["--no-header"]) == 0

        output = capsys.readouterr().out
        assert "Target configuration is valid" in output
        assert "hunter22" not in output
        assert "h******2" in output

    def test_rejected_setting(self, monkeypatch, capsys):
        """Test an unsupported setting exits 1 and names the property."""
        monkeypatch.setenv("SMTP_SERVER", "relay.example.com")
        monkeypatch.setenv("SMTP_PORT", "587")

        assert validate_target.main(["--no-header", "--tier", "restricted-basic"]) == 1

        assert "smtp_port is not supported" in capsys.readouterr().out

    def test_send_test_message(self, monkeypatch, capsys):
        """Test --send-test hands one message to the transport."""
        monkeypatch.setenv("MAIL_FROM", "a@example.com")
        monkeypatch.setenv("MAIL_TO", "b@example.com")
        monkeypatch.setenv("MAIL_SUBJECT", "s")
        monkeypatch.setenv("SMTP_SERVER", "smtp.example.com")

        with patch.object(validate_target, "create_transport") as mock_create:
            mock_create.return_value = create_transport(
                probe_capabilities("full", FakeSMTP), smtp_class=FakeSMTP
            )
            assert validate_target.main(["--no-header", "--send-test", "--quiet"]) == 0

        assert len(FakeSMTP.sessions) == 1
        assert "Test message sent" in capsys.readouterr().out

    def test_send_test_skipped_without_subject(self, monkeypatch, capsys):
        """Test --send-test fails when the message would be skipped."""
        monkeypatch.setenv("MAIL_FROM", "a@example.com")
        monkeypatch.setenv("MAIL_TO", "b@example.com")
        monkeypatch.setenv("SMTP_SERVER", "smtp.example.com")

        with patch.object(validate_target, "create_transport") as mock_create:
            mock_create.return_value = create_transport(
                probe_capabilities("full", FakeSMTP), smtp_class=FakeSMTP
            )
            assert validate_target.main(["--no-header", "--send-test"]) == 1

        assert FakeSMTP.sessions == []
        assert "Test message skipped" in capsys.readouterr().out
