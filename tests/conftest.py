"""Pytest configuration and fixtures for log mailer tests.

Provides reusable fixtures for unit and integration tests including
capability sets, target configurations, log events and mocked SMTP
sessions.

Author: Odiseo
Version: 1.0.0
"""

from __future__ import annotations

import os
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from log_mailer.config.guard import TargetConfigBuilder
from log_mailer.models.capability import CapabilitySet, TransportTier
from log_mailer.models.event import LogEvent
from log_mailer.models.target_config import TargetConfig

# Keep the suite independent of the developer's environment
os.environ.setdefault("LOG_TO_FILE", "false")


# =============================================================================
# Capability Fixtures
# =============================================================================
@pytest.fixture
def full_capabilities() -> CapabilitySet:
    """Full tier with credentials and NTLM available."""
    return CapabilitySet(
        tier=TransportTier.FULL,
        structured_addresses=True,
        supports_extended_fields=True,
        supports_credentials=True,
        supports_integrated_auth=True,
    )


@pytest.fixture
def restricted_capabilities() -> CapabilitySet:
    """Restricted relay tier with the extension field bag."""
    return CapabilitySet(
        tier=TransportTier.RESTRICTED,
        structured_addresses=False,
        supports_extended_fields=True,
        supports_credentials=True,
        supports_integrated_auth=False,
    )


@pytest.fixture
def basic_capabilities() -> CapabilitySet:
    """Restricted relay tier without the field bag."""
    return CapabilitySet(
        tier=TransportTier.RESTRICTED,
        structured_addresses=False,
        supports_extended_fields=False,
        supports_credentials=False,
        supports_integrated_auth=False,
    )


# =============================================================================
# Target Configuration Fixtures
# =============================================================================
@pytest.fixture
def target_config(full_capabilities) -> TargetConfig:
    """A sendable configuration with the default body."""
    return (
        TargetConfigBuilder(full_capabilities)
        .set_from("Logger <logger@example.com>")
        .set_to("ops@example.com;dev@example.com")
        .set_subject("[${level}] ${logger}")
        .set_smtp_server("smtp.test.com")
        .build()
    )


# =============================================================================
# Event Fixtures
# =============================================================================
@pytest.fixture
def sample_event() -> LogEvent:
    """A single error event with a fixed timestamp."""
    return LogEvent(
        message="Disk almost full",
        level="ERROR",
        logger_name="app.storage",
        timestamp=datetime(2025, 10, 18, 14, 30, 5, 123456),
        properties={"host": "web-01"},
    )


@pytest.fixture
def sample_events() -> list[LogEvent]:
    """Three events from different loggers, oldest first."""
    return [
        LogEvent(message="first", level="INFO", logger_name="app.a"),
        LogEvent(message="second", level="WARNING", logger_name="app.b"),
        LogEvent(message="third", level="ERROR", logger_name="app.c"),
    ]


# =============================================================================
# SMTP Fixtures
# =============================================================================
@pytest.fixture
def mock_smtp_connection() -> MagicMock:
    """SMTP session mock usable as a context manager."""
    conn = MagicMock()
    conn.__enter__.return_value = conn
    conn.__exit__.return_value = False
    conn.send_message.return_value = {}
    return conn


@pytest.fixture
def mock_smtp_class(mock_smtp_connection) -> MagicMock:
    """SMTP class mock returning ``mock_smtp_connection``."""
    return MagicMock(return_value=mock_smtp_connection)
