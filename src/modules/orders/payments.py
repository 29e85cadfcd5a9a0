"""Payment descriptor parsing.

Card payments are validated for format only; there is no gateway.  The
descriptor that leaves this module keeps the payment method, the card's
last four digits and its expiry.  Everything else is discarded here.
"""

from __future__ import annotations

import re
from datetime import date
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ConfigDict

from modules.orders.constants import MIN_CARD_DIGITS, PaymentMethod
from modules.orders.exceptions import PaymentValidation

if TYPE_CHECKING:
    from modules.orders.dtos import CheckoutDTO

CVV_RE = re.compile(r"^\d{3,4}$")
EXPIRY_RE = re.compile(r"^(\d{2})/(\d{2})$")


class PaymentDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    method: PaymentMethod
    card_last4: Optional[str] = None
    card_expiry: Optional[str] = None

    @classmethod
    def parse(cls, dto: CheckoutDTO, today: date) -> PaymentDescriptor:
        """Validate the request's payment fields.

        Raises:
            PaymentValidation: unknown method, or a malformed/expired card.
        """
        method = (dto.payment_method or "").strip().lower()
        if method == PaymentMethod.CASH_ON_DELIVERY:
            return cls(method=PaymentMethod.CASH_ON_DELIVERY)
        if method != PaymentMethod.CARD:
            raise PaymentValidation(f"Unsupported payment method {dto.payment_method!r}.")

        number = dto.card_number.get_secret_value() if dto.card_number else ""
        digits = re.sub(r"\D", "", number)
        if len(digits) < MIN_CARD_DIGITS:
            raise PaymentValidation(
                f"Card number must contain at least {MIN_CARD_DIGITS} digits."
            )

        cvv = dto.card_cvv.get_secret_value().strip() if dto.card_cvv else ""
        if not CVV_RE.match(cvv):
            raise PaymentValidation("Card CVV must be 3 or 4 digits.")

        expiry = (dto.card_expiry or "").strip()
        _check_expiry(expiry, today)

        return cls(method=PaymentMethod.CARD, card_last4=digits[-4:], card_expiry=expiry)


def _check_expiry(expiry: str, today: date) -> None:
    match = EXPIRY_RE.match(expiry)
    if not match:
        raise PaymentValidation("Card expiry must be in MM/YY format.")
    month, year = int(match.group(1)), 2000 + int(match.group(2))
    if not 1 <= month <= 12:
        raise PaymentValidation("Card expiry month must be between 01 and 12.")
    # A card is valid through the last day of its expiry month.
    if (year, month) < (today.year, today.month):
        raise PaymentValidation("Card has expired.")
