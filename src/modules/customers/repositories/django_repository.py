"""Django ORM implementation of the Customer repository.

Error handling follows the Null Object pattern: methods return ``None``
instead of raising; the caller decides how to translate a missing entity.
"""

from __future__ import annotations

from typing import Any, Optional

from modules.customers.models import Customer
from modules.customers.repositories.interfaces import ICustomerRepository


class CustomerDjangoRepository(ICustomerRepository):
    """Concrete Customer repository backed by Django ORM."""

    def get_by_user(self, user: Any) -> Optional[Customer]:
        """``None`` for anonymous users and users without a profile."""
        if not getattr(user, "is_authenticated", False):
            return None
        return Customer.objects.filter(user_id=user.pk).first()
