"""Configuration module for log mailer.

Loads settings from environment variables or .env file and builds
capability-checked target configurations.

Author: Odiseo
Created: 2025-10-18
Version: 1.0.0
"""

from log_mailer.config.guard import (
    PRIVILEGED_PROPERTIES,
    ConfigGuard,
    TargetConfigBuilder,
)
from log_mailer.config.settings import MailSettings

__all__ = [
    "MailSettings",
    "ConfigGuard",
    "TargetConfigBuilder",
    "PRIVILEGED_PROPERTIES",
]
