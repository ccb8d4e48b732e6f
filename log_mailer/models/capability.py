"""SMTP transport capability model.

Describes what the active SMTP transport environment can do. Computed once
at startup by the capability probe and injected wherever behavior depends on it.

Author: Odiseo
Created: 2025-10-18
Version: 1.0.0
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TransportTier(str, Enum):
    """Level of SMTP feature support available in the running environment.

    Attributes:
        FULL: Structured addresses, custom port and authentication.
        RESTRICTED: Plain string addressing through a relay; extended
            settings only through the extension field bag, if at all.
    """

    FULL = "full"
    RESTRICTED = "restricted"


class CapabilitySet(BaseModel):
    """Static capabilities of the active transport.

    Attributes:
        tier: Capability tier.
        structured_addresses: Whether address headers are built from parsed
            address objects rather than delimited strings.
        supports_extended_fields: Whether custom port, authentication mode and
            credentials may be configured at all.
        supports_credentials: Whether username/password credentials can be
            wired into the SMTP session.
        supports_integrated_auth: Whether NTLM integrated authentication is
            available.
    """

    model_config = ConfigDict(frozen=True)

    tier: TransportTier = Field(..., description="Capability tier")
    structured_addresses: bool = Field(default=True)
    supports_extended_fields: bool = Field(default=True)
    supports_credentials: bool = Field(default=True)
    supports_integrated_auth: bool = Field(default=False)

    @property
    def supports_auth(self) -> bool:
        """Whether any authentication mode may be configured."""
        return self.supports_extended_fields

    @property
    def supports_custom_port(self) -> bool:
        """Whether a port other than 25 may be configured."""
        return self.supports_extended_fields
