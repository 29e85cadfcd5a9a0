"""Checkout DTOs for the service layer.

``CheckoutDTO`` carries the raw payment fields from the request.  The card
number and CVV are ``SecretStr`` so they never show up in a repr, a log
line or a traceback.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, SecretStr


class CheckoutDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    payment_method: str
    card_number: Optional[SecretStr] = None
    card_cvv: Optional[SecretStr] = None
    card_expiry: Optional[str] = None


class CheckoutResultDTO(BaseModel):
    """What a committed checkout returns to the caller."""

    model_config = ConfigDict(frozen=True)

    order_id: UUID
    order_number: str
    total: Decimal
