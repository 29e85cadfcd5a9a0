from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from modules.carts.models import Cart, CartLine
from modules.catalog.models import Book, Publisher
from modules.customers.models import Customer

User = get_user_model()


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@pytest.fixture()
def publisher():
    return Publisher.objects.create(name="Acme Books", email="orders@acme.example")


@pytest.fixture()
def make_book(publisher):
    """Factory for books; ``price`` accepts strings for readability."""

    def _make(isbn, stock=10, threshold=0, price="10.00", title=None, **extra):
        return Book.objects.create(
            isbn=isbn,
            title=title or f"Book {isbn}",
            publisher=extra.pop("publisher", publisher),
            price=Decimal(price),
            stock_quantity=stock,
            threshold=threshold,
            **extra,
        )

    return _make


# ---------------------------------------------------------------------------
# Customers & carts
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_customer():
    def _make(username="reader", **extra):
        user = User.objects.create_user(username=username, password="testpass123")
        return Customer.objects.create(
            user=user,
            first_name=extra.pop("first_name", username.title()),
            last_name=extra.pop("last_name", "Tester"),
            email=extra.pop("email", f"{username}@example.com"),
            **extra,
        )

    return _make


@pytest.fixture()
def customer(make_customer):
    return make_customer("reader")


@pytest.fixture()
def fill_cart():
    """Put ``{book: quantity}`` into the customer's cart, bypassing the API."""

    def _fill(customer, items):
        cart, _ = Cart.objects.get_or_create(customer=customer)
        for book, quantity in items.items():
            CartLine.objects.create(cart=cart, book=book, quantity=quantity)
        return cart

    return _fill


@pytest.fixture()
def customer_client(customer):
    """APIClient authenticated as ``customer``'s user."""
    client = APIClient()
    client.force_authenticate(user=customer.user)
    return client


@pytest.fixture()
def staff_client():
    client = APIClient()
    staff = User.objects.create_user(
        username="warehouse", password="testpass123", is_staff=True
    )
    client.force_authenticate(user=staff)
    return client
