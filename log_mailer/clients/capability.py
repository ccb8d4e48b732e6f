"""Capability probe for the SMTP transport environment.

Determines once, at startup, which SMTP features the active transport
supports. The result is cached and never changes during the process lifetime.

Tiers:
    - ``full``: the standard library SMTP client with structured addresses,
      custom ports and credentials.
    - ``restricted``: a plain relay with string addressing; port and
      authentication travel in the extension field bag.
    - ``restricted-basic``: a plain relay without the field bag; only
      anonymous sends on port 25 are possible.
    - ``auto``: inspect the standard library and pick ``full`` when it is
      usable, ``restricted`` otherwise.

Version: 1.0.0
"""

from __future__ import annotations

import importlib.util
import smtplib
from functools import lru_cache

from log_mailer.core.exceptions import MailConfigError
from log_mailer.core.logger import get_logger
from log_mailer.models.capability import CapabilitySet, TransportTier

logger = get_logger(__name__)

TIER_CHOICES = ("auto", "full", "restricted", "restricted-basic")


def _smtp_supports_credentials(smtp_class: type[smtplib.SMTP]) -> bool:
    return callable(getattr(smtp_class, "login", None)) and callable(
        getattr(smtp_class, "auth", None)
    )


def _smtp_supports_integrated_auth(smtp_class: type[smtplib.SMTP]) -> bool:
    # Stock smtplib ships no NTLM authobject; subclasses may add ``auth_ntlm``.
    return callable(getattr(smtp_class, "auth_ntlm", None))


def _structured_addresses_available() -> bool:
    return importlib.util.find_spec("email.headerregistry") is not None


def _probe(tier: str, smtp_class: type[smtplib.SMTP]) -> CapabilitySet:
    tier = tier.strip().lower()
    if tier not in TIER_CHOICES:
        raise MailConfigError(
            f"Unknown transport tier {tier!r}; expected one of {', '.join(TIER_CHOICES)}"
        )

    credentials = _smtp_supports_credentials(smtp_class)
    integrated = _smtp_supports_integrated_auth(smtp_class)

    if tier == "auto":
        tier = "full" if credentials and _structured_addresses_available() else "restricted"

    if tier == "full":
        return CapabilitySet(
            tier=TransportTier.FULL,
            structured_addresses=True,
            supports_extended_fields=True,
            supports_credentials=credentials,
            supports_integrated_auth=integrated,
        )

    return CapabilitySet(
        tier=TransportTier.RESTRICTED,
        structured_addresses=False,
        supports_extended_fields=tier == "restricted",
        supports_credentials=credentials,
        supports_integrated_auth=integrated,
    )


@lru_cache(maxsize=None)
def probe_capabilities(
    tier: str = "auto",
    smtp_class: type[smtplib.SMTP] = smtplib.SMTP,
) -> CapabilitySet:
    """Determine the capabilities of the SMTP transport environment.

    The probe runs once per distinct argument set; later calls return the
    cached CapabilitySet.

    Args:
        tier: One of ``auto``, ``full``, ``restricted``, ``restricted-basic``.
        smtp_class: SMTP client class the transport will instantiate.

    Returns:
        Immutable capability set.

    Raises:
        MailConfigError: If the tier name is unknown.
    """
    capabilities = _probe(tier, smtp_class)
    logger.debug(
        f"SMTP capabilities probed: tier={capabilities.tier.value} "
        f"extended_fields={capabilities.supports_extended_fields} "
        f"credentials={capabilities.supports_credentials} "
        f"integrated_auth={capabilities.supports_integrated_auth}"
    )
    return capabilities
