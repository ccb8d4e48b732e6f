"""Unit tests for MailTarget and MailHandler.

Tests batch dispatch, skip behavior, error propagation, concurrent writers
and the logging handler adapter.

Author: Odiseo
Version: 1.0.0
"""

from __future__ import annotations

import logging
import threading
from unittest.mock import MagicMock, patch

import pytest

from log_mailer.clients.smtp import RelayTransport, SMTPTransport
from log_mailer.config.guard import TargetConfigBuilder
from log_mailer.config.settings import MailSettings
from log_mailer.core.exceptions import CapabilityError, TransportError
from log_mailer.models.event import LogEvent
from log_mailer.target.handler import MailHandler
from log_mailer.target.mail import MailTarget
from log_mailer.templates.renderer import TemplateRenderer


class RecordingTransport:
    """Transport that stores messages instead of sending them."""

    def __init__(self, capabilities):
        self.capabilities = capabilities
        self.sent = []
        self._lock = threading.Lock()

    def send(self, message, config):
        with self._lock:
            self.sent.append(message)


@pytest.fixture
def transport(full_capabilities) -> RecordingTransport:
    return RecordingTransport(full_capabilities)


@pytest.fixture
def target(target_config, transport) -> MailTarget:
    return MailTarget(target_config, transport=transport)


class TestMailTargetWrite:
    """Tests for write and write_batch."""

    def test_write_batch_sends_one_message(self, target, transport, sample_events):
        """Test a batch becomes exactly one message."""
        assert target.write_batch(sample_events) is True

        assert len(transport.sent) == 1
        message = transport.sent[0]
        assert message.body == "firstsecondthird"
        assert message.subject == "[ERROR] app.c"
        assert message.to == "ops@example.com;dev@example.com"

    def test_write_single_event(self, target, transport, sample_event):
        """Test write sends a batch of one."""
        assert target.write(sample_event) is True

        assert transport.sent[0].body == "Disk almost full"

    def test_empty_batch_skipped(self, target, transport):
        """Test an empty batch sends nothing and raises nothing."""
        assert target.write_batch([]) is False
        assert transport.sent == []

    def test_unsendable_config_skipped(self, full_capabilities, transport, sample_event):
        """Test a config without Subject sends nothing."""
        config = (
            TargetConfigBuilder(full_capabilities)
            .set_from("a@example.com")
            .set_to("b@example.com")
            .set_smtp_server("mail")
            .build()
        )

        assert MailTarget(config, transport=transport).write(sample_event) is False
        assert transport.sent == []

    def test_transport_error_propagates(self, target_config, full_capabilities, sample_event):
        """Test send failures reach the caller without retry."""
        smtp_class = MagicMock(side_effect=OSError("Connection reset by peer"))
        target = MailTarget(
            target_config,
            transport=SMTPTransport(full_capabilities, smtp_class=smtp_class),
        )

        with pytest.raises(TransportError):
            target.write(sample_event)

        assert smtp_class.call_count == 1

    def test_layouts(self, target, target_config):
        """Test layouts exposes every configured template."""
        assert target.layouts() == target_config.layouts()

    def test_default_transport(self, target_config):
        """Test a transport is created from the probed capabilities."""
        target = MailTarget(target_config)

        assert isinstance(target.transport, (SMTPTransport, RelayTransport))


class TestMailTargetConcurrency:
    """Tests for concurrent writers on one target."""

    def test_concurrent_batches_stay_separate(self, target, transport):
        """Test each thread's batch arrives as its own message."""
        thread_count = 8
        barrier = threading.Barrier(thread_count)
        errors = []

        def worker(index):
            events = [
                LogEvent(message=f"t{index}-{n};", logger_name=f"worker.{index}")
                for n in range(5)
            ]
            barrier.wait()
            try:
                target.write_batch(events)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(thread_count)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert len(transport.sent) == thread_count
        bodies = sorted(message.body for message in transport.sent)
        expected = sorted(
            "".join(f"t{i}-{n};" for n in range(5)) for i in range(thread_count)
        )
        assert bodies == expected
        for message in transport.sent:
            worker_index = message.body.split("-")[0][1:]
            assert message.subject.endswith(f"worker.{worker_index}")


class TestMailTargetFromSettings:
    """Tests for MailTarget.from_settings."""

    def test_from_settings_full(self):
        """Test settings produce a full-tier target."""
        settings = MailSettings(
            _env_file=None,
            MAIL_FROM="a@example.com",
            MAIL_TO="b@example.com",
            MAIL_SUBJECT="s",
            SMTP_SERVER="mail",
            SMTP_PORT=587,
            TRANSPORT_TIER="full",
        )

        target = MailTarget.from_settings(settings)

        assert isinstance(target.transport, SMTPTransport)
        assert target.config.smtp_port == 587

    def test_from_settings_restricted(self):
        """Test the restricted tier selects the relay transport."""
        settings = MailSettings(_env_file=None, SMTP_SERVER="relay", TRANSPORT_TIER="restricted")

        target = MailTarget.from_settings(settings)

        assert isinstance(target.transport, RelayTransport)

    def test_from_settings_rejects_privileged(self):
        """Test unsupported settings fail before any event is written."""
        settings = MailSettings(
            _env_file=None,
            SMTP_SERVER="relay",
            SMTP_AUTHENTICATION="Basic",
            TRANSPORT_TIER="restricted-basic",
        )

        with pytest.raises(CapabilityError):
            MailTarget.from_settings(settings)

    def test_from_settings_renderer_compiles_templates(self, transport):
        """Test the given renderer is the one the templates render with."""
        settings = MailSettings(
            _env_file=None,
            MAIL_FROM="a@example.com",
            MAIL_TO="b@example.com",
            MAIL_SUBJECT="s",
            SMTP_SERVER="mail",
            TRANSPORT_TIER="full",
        )

        target = MailTarget.from_settings(settings, renderer=TemplateRenderer(autoescape=True))
        target.transport = transport
        target.write(LogEvent(message="<b>disk</b>"))

        assert transport.sent[0].body == "&lt;b&gt;disk&lt;/b&gt;"


class TestMailHandler:
    """Tests for the logging handler adapter."""

    @pytest.fixture
    def app_logger(self):
        logger = logging.getLogger("tests.mail_handler")
        logger.setLevel(logging.DEBUG)
        logger.propagate = False
        yield logger
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
            handler.close()

    def test_flush_on_capacity(self, target, transport, app_logger):
        """Test records are mailed together when the buffer fills."""
        app_logger.addHandler(MailHandler(target, capacity=3))

        app_logger.info("one")
        app_logger.info("two")
        assert transport.sent == []

        app_logger.info("three")

        assert len(transport.sent) == 1
        assert transport.sent[0].body == "onetwothree"

    def test_flush_on_level(self, target, transport, app_logger):
        """Test an error record flushes the buffered records with it."""
        app_logger.addHandler(MailHandler(target, capacity=100))

        app_logger.info("context")
        app_logger.error("failure")

        assert len(transport.sent) == 1
        assert transport.sent[0].body == "contextfailure"
        assert transport.sent[0].subject == "[ERROR] tests.mail_handler"

    def test_flush_on_close(self, target, transport, app_logger):
        """Test pending records are sent on close."""
        handler = MailHandler(target, capacity=100)
        app_logger.addHandler(handler)

        app_logger.warning("pending")
        handler.close()

        assert transport.sent[0].body == "pending"

    def test_empty_flush_sends_nothing(self, target, transport):
        """Test flushing an empty buffer is a no-op."""
        MailHandler(target).flush()

        assert transport.sent == []

    def test_extra_fields_available(self, full_capabilities, transport, app_logger):
        """Test extra attributes reach the templates."""
        config = (
            TargetConfigBuilder(full_capabilities)
            .set_from("a@example.com")
            .set_to("b@example.com")
            .set_subject("${request_id}")
            .set_smtp_server("mail")
            .build()
        )
        app_logger.addHandler(MailHandler(MailTarget(config, transport=transport)))

        app_logger.info("handled", extra={"request_id": "req-42"})

        assert transport.sent[0].subject == "req-42"

    def test_send_failure_reported(self, target, app_logger):
        """Test transport errors go through handleError."""
        handler = MailHandler(target)
        app_logger.addHandler(handler)

        with patch.object(target, "write_batch", side_effect=TransportError("down")):
            with patch.object(handler, "handleError") as handle_error:
                app_logger.error("failure")

        handle_error.assert_called_once()
        assert handle_error.call_args.args[0].getMessage() == "failure"
        assert handler.buffer == []
