"""Target module for log mailer.

Contains the mail target and its logging handler adapter.

Author: Odiseo
Created: 2025-10-18
Version: 1.0.0
"""

from log_mailer.target.handler import MailHandler
from log_mailer.target.mail import MailTarget

__all__ = ["MailTarget", "MailHandler"]
