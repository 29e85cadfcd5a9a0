"""Replenishment domain exceptions."""

from __future__ import annotations


class ReplenishmentRequestNotFound(Exception):
    """The replenishment request does not exist."""


class InvalidReplenishmentStatus(Exception):
    """Only ``PENDING`` requests can be fulfilled or cancelled."""

    def __init__(self, request_id, current_status: str, action: str) -> None:
        self.request_id = request_id
        self.current_status = current_status
        self.action = action
        super().__init__(
            f"Cannot {action} replenishment request {request_id} "
            f"in status {current_status}."
        )
