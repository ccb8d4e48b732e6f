"""Outbound message model.

Defines the transient message value built once per send.

Author: Odiseo
Created: 2025-10-18
Version: 1.0.0
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field

_ADDRESS_SEPARATORS = re.compile(r"[;,]")


def split_addresses(value: str | None) -> list[str]:
    """Split a delimited address list into its non-empty entries.

    Args:
        value: Addresses separated by semicolons or commas.

    Returns:
        Stripped address strings in their original order.
    """
    if not value:
        return []
    return [part.strip() for part in _ADDRESS_SEPARATORS.split(value) if part.strip()]


class OutboundMessage(BaseModel):
    """Rendered email ready for dispatch.

    Address and subject fields are rendered from the last event of the batch;
    the body concatenates header, per-event bodies and footer.

    Attributes:
        from_: Rendered sender.
        to: Rendered recipients, semicolon separated.
        cc: Rendered carbon-copy recipients, if configured.
        bcc: Rendered blind carbon-copy recipients, if configured.
        subject: Rendered subject line.
        body: Concatenated body text.
        is_html: Whether the body is sent as text/html.
        encoding: Configured encoding name (informational; bodies go out UTF-8).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_: str = Field(..., alias="from", description="Sender address")
    to: str = Field(..., description="Recipient addresses")
    cc: str | None = Field(default=None, description="Cc addresses")
    bcc: str | None = Field(default=None, description="Bcc addresses")
    subject: str = Field(..., description="Subject line")
    body: str = Field(default="", description="Message body")
    is_html: bool = Field(default=False, description="Send as HTML")
    encoding: str = Field(default="utf-8", description="Configured encoding")

    def recipients(self) -> list[str]:
        """Return the SMTP envelope recipients (To, Cc and Bcc)."""
        return (
            split_addresses(self.to)
            + split_addresses(self.cc)
            + split_addresses(self.bcc)
        )
