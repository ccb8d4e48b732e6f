"""Composer module for log mailer.

Builds outbound messages from batches of log events.

Author: Odiseo
Created: 2025-10-18
Version: 1.0.0
"""

from log_mailer.composer.message import MessageComposer, compose

__all__ = ["MessageComposer", "compose"]
