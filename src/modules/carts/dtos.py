"""Cart DTOs for the service layer.

Immutable pydantic models exchanged between the cart views and
``CartService``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from modules.catalog.models import normalize_isbn

if TYPE_CHECKING:
    from modules.carts.models import Cart, CartLine


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class AddItemDTO(BaseModel):
    """Request to add ``quantity`` copies of a book to the cart."""

    model_config = ConfigDict(frozen=True)

    isbn: str
    quantity: int = 1

    @field_validator("isbn")
    @classmethod
    def isbn_must_not_be_empty(cls, v: str) -> str:
        isbn = normalize_isbn(v or "")
        if not isbn:
            raise ValueError("ISBN must not be empty.")
        return isbn


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class CartLineOutputDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    isbn: str
    title: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal

    @classmethod
    def from_entity(cls, line: CartLine) -> CartLineOutputDTO:
        return cls(
            isbn=line.book.isbn,
            title=line.book.title,
            unit_price=line.book.price,
            quantity=line.quantity,
            line_total=line.line_total,
        )


class CartOutputDTO(BaseModel):
    """The cart as shown to the customer, priced at current catalog prices."""

    model_config = ConfigDict(frozen=True)

    cart_id: UUID
    customer_id: UUID
    lines: List[CartLineOutputDTO]
    total: Decimal

    @classmethod
    def from_entity(cls, cart: Cart, lines: List[CartLine]) -> CartOutputDTO:
        items = [CartLineOutputDTO.from_entity(line) for line in lines]
        return cls(
            cart_id=cart.id,
            customer_id=cart.customer_id,
            lines=items,
            total=sum((item.line_total for item in items), Decimal("0.00")),
        )
