"""Cart domain exceptions.

Raised by the repository/service layer; the API views translate them into
HTTP responses.
"""

from __future__ import annotations


class InvalidQuantity(Exception):
    """A cart line would end up with quantity <= 0 or above the per-line cap."""

    def __init__(self, quantity: int, maximum: int) -> None:
        self.quantity = quantity
        self.maximum = maximum
        super().__init__(
            f"Line quantity must be between 1 and {maximum} (got {quantity})."
        )
