"""Customer model.

A customer is the owner of exactly one cart and of the orders placed from
it.  Authentication lives in ``django.contrib.auth``; the customer row is
linked one-to-one to the authenticated user so request handlers can resolve
"whose cart is this" without trusting client input.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from modules.core.models import BaseModel


class Customer(BaseModel):
    """Customer profile attached to a Django auth user."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="customer",
    )
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(max_length=254, unique=True)
    phone = models.CharField(max_length=30, blank=True, default="")
    shipping_address = models.TextField(blank=True, default="")

    class Meta:
        db_table = "customers"
        ordering = ["-created_at"]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self) -> str:
        return f"{self.full_name} <{self.email}>"
