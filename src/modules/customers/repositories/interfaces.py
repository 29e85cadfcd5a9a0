"""Customer repository interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from modules.customers.models import Customer


class ICustomerRepository(ABC):
    """Read access to customer profiles."""

    @abstractmethod
    def get_by_user(self, user: Any) -> Optional[Customer]:
        """Retrieve the customer linked to an authenticated user."""
