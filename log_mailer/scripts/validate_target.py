#!/usr/bin/env python3
"""Validate mail target configuration and optionally send a test message.

Loads MAIL_* / SMTP_* settings, probes the transport capabilities, builds the
target configuration through the capability checks and reports any setting
the active transport cannot honor.

Usage:
    python -m log_mailer.scripts.validate_target
    python -m log_mailer.scripts.validate_target --verbose
    python -m log_mailer.scripts.validate_target --send-test
    python -m log_mailer.scripts.validate_target --tier restricted
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from log_mailer.clients.capability import TIER_CHOICES, probe_capabilities
from log_mailer.clients.smtp import create_transport
from log_mailer.config.settings import MailSettings
from log_mailer.core.exceptions import CapabilityError, LogMailerError, MailConfigError
from log_mailer.core.logger import get_logger, mask_password, setup_logging
from log_mailer.models.capability import CapabilitySet
from log_mailer.models.event import LogEvent
from log_mailer.models.target_config import TargetConfig
from log_mailer.target.mail import MailTarget

logger = get_logger(__name__)


def print_header() -> None:
    """Print script header."""
    print("\n" + "=" * 80)
    print("  📧 Log Mailer Target Validator")
    print("=" * 80)


def print_footer() -> None:
    """Print script footer."""
    print("=" * 80 + "\n")


def print_config(settings: MailSettings) -> None:
    """Print loaded configuration (with credentials masked).

    Args:
        settings: MailSettings instance.
    """
    smtp_cfg = settings.get_smtp_config()

    print("\n📋 Loaded Configuration:")
    print(f"  From:            {settings.MAIL_FROM or '(not set)'}")
    print(f"  To:              {settings.MAIL_TO or '(not set)'}")
    print(f"  Subject:         {settings.MAIL_SUBJECT or '(not set)'}")
    print(f"  Body:            {settings.MAIL_BODY}")
    print(f"  HTML:            {'Yes' if settings.MAIL_HTML else 'No'}")
    print(f"  SMTP Server:     {smtp_cfg['server'] or '(not set)'}")
    print(f"  SMTP Port:       {smtp_cfg['port']}")
    print(f"  Authentication:  {smtp_cfg['authentication']}")
    print(f"  SMTP Username:   {smtp_cfg['username'] or '(not set)'}")
    print(f"  SMTP Password:   {mask_password(smtp_cfg['password'])}")
    print(f"  Transport Tier:  {smtp_cfg['tier']}")


def print_capabilities(capabilities: CapabilitySet) -> None:
    """Print probed transport capabilities.

    Args:
        capabilities: Probe result.
    """

    def _flag(value: bool) -> str:
        return "Yes" if value else "No"

    print("\n🔎 Transport Capabilities:")
    print(f"  Tier:                 {capabilities.tier.value}")
    print(f"  Structured addresses: {_flag(capabilities.structured_addresses)}")
    print(f"  Port/auth settings:   {_flag(capabilities.supports_extended_fields)}")
    print(f"  Credentials:          {_flag(capabilities.supports_credentials)}")
    print(f"  Integrated (NTLM):    {_flag(capabilities.supports_integrated_auth)}")


def build_config(settings: MailSettings, capabilities: CapabilitySet) -> TargetConfig | None:
    """Build the target configuration, reporting rejected settings.

    Returns:
        TargetConfig, or None if the settings are rejected.
    """
    print("\n🧪 Checking target configuration...")
    try:
        config = settings.build_target_config(capabilities)
    except CapabilityError as e:
        print(f"❌ {e.property_name} is not supported by the {capabilities.tier.value} transport")
        return None
    except MailConfigError as e:
        print(f"❌ {e}")
        return None

    if not config.can_send:
        print("⚠️  MAIL_FROM, MAIL_TO and MAIL_SUBJECT must all be set; mail will be skipped")
    else:
        print("✅ Target configuration is valid")
    return config


def send_test_message(config: TargetConfig, capabilities: CapabilitySet) -> bool:
    """Send a one-event test message.

    Returns:
        True if the message was handed to the SMTP server.
    """
    print(f"\n📧 Sending test message via {config.smtp_server}:{config.smtp_port}")
    target = MailTarget(config, transport=create_transport(capabilities))
    event = LogEvent(
        message="Log mailer test message. The mail target is working correctly.",
        level="INFO",
        logger_name="log_mailer.scripts.validate_target",
    )

    try:
        sent = target.write(event)
    except LogMailerError as e:
        print(f"❌ Test message failed: {e}")
        logger.debug("Test message error", exc_info=True)
        return False

    if not sent:
        print("❌ Test message skipped: From, To or Subject is not configured")
        return False

    print("✅ Test message sent. Check the recipient inbox!")
    return True


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        0 if all checks passed, 1 if any check failed.
    """
    parser = argparse.ArgumentParser(
        description="Validate log mailer target configuration.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Check configuration against the detected transport
  python -m log_mailer.scripts.validate_target

  # Check against the restricted relay tier
  python -m log_mailer.scripts.validate_target --tier restricted

  # Send a test message
  python -m log_mailer.scripts.validate_target --send-test
        """,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging output")
    parser.add_argument("--quiet", "-q", action="store_true", help="Minimal output (only errors and results)")
    parser.add_argument("--send-test", "-t", action="store_true", help="Send a test message")
    parser.add_argument("--tier", choices=TIER_CHOICES, help="Override TRANSPORT_TIER")
    parser.add_argument("--no-header", action="store_true", help="Suppress header and footer output")

    args = parser.parse_args(argv)

    log_level = "DEBUG" if args.verbose else "INFO"
    console_level = "DEBUG" if args.verbose else "WARNING" if args.quiet else "INFO"
    setup_logging(log_level=log_level, console_level=console_level, enable_file=False)

    if not args.no_header:
        print_header()

    exit_code = 0

    try:
        settings = MailSettings()
        if args.tier:
            settings = settings.model_copy(update={"TRANSPORT_TIER": args.tier})

        if settings.LOG_TO_FILE:
            setup_logging(
                log_dir=Path(settings.LOG_DIR),
                log_level=log_level,
                console_level=console_level,
                enable_file=True,
                max_size_mb=settings.LOG_MAX_SIZE_MB,
                backup_count=settings.LOG_BACKUP_COUNT,
            )

        if not args.quiet:
            print_config(settings)

        capabilities = probe_capabilities(settings.TRANSPORT_TIER)
        if not args.quiet:
            print_capabilities(capabilities)

        config = build_config(settings, capabilities)
        if config is None:
            exit_code = 1
        elif args.send_test and not send_test_message(config, capabilities):
            exit_code = 1

    except Exception as e:
        print(f"\n❌ Validation script error: {e}")
        logger.exception("Validation script failed")
        exit_code = 1

    finally:
        if not args.no_header:
            print_footer()

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
