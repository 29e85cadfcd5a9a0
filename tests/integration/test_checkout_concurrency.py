"""Concurrent checkout integration tests.

Several customers check out the same book at once.  Each worker runs on its
own DB connection, so the book row lock (``BEGIN IMMEDIATE`` on the SQLite
test database) is what serialises them.

Scenarios:
- Stock 5, 10 customers buying 1 copy each: exactly 5 orders, stock 0.
- Every sale crosses the threshold: still only one pending replenishment
  request for the book.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from decimal import Decimal

import django
from django.contrib.auth import get_user_model
from django.test import TransactionTestCase

from modules.carts.models import Cart, CartLine
from modules.carts.repositories.django_repository import CartDjangoRepository
from modules.catalog.models import Book, Publisher
from modules.catalog.repositories.django_repository import InventoryDjangoRepository
from modules.customers.models import Customer
from modules.orders.dtos import CheckoutDTO
from modules.orders.exceptions import InsufficientStock
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import CheckoutService
from modules.replenishment.models import ReplenishmentRequest, ReplenishmentStatus
from modules.replenishment.repositories.django_repository import (
    ReplenishmentDjangoRepository,
)
from modules.replenishment.trigger import ReplenishmentTrigger

logger = logging.getLogger(__name__)

INITIAL_STOCK = 5
NUM_WORKERS = 10


class TestConcurrentCheckout(TransactionTestCase):
    """Stock and replenishment invariants under concurrent checkouts."""

    def setUp(self):
        publisher = Publisher.objects.create(name="Concurrency Press")
        self.book = Book.objects.create(
            isbn="9781111111111",
            title="Contended Title",
            publisher=publisher,
            price=Decimal("20.00"),
            stock_quantity=INITIAL_STOCK,
            threshold=INITIAL_STOCK,
        )
        User = get_user_model()
        self.customers = []
        for i in range(NUM_WORKERS):
            user = User.objects.create_user(username=f"buyer{i}", password="x")
            customer = Customer.objects.create(
                user=user,
                first_name=f"Buyer{i}",
                last_name="Concurrent",
                email=f"buyer{i}@example.com",
            )
            cart = Cart.objects.create(customer=customer)
            CartLine.objects.create(cart=cart, book=self.book, quantity=1)
            self.customers.append(customer)

    def _checkout_in_thread(self, customer) -> str:
        """Check out one customer's cart.  Returns 'success' or 'insufficient'."""
        django.db.connections.close_all()
        service = CheckoutService(
            cart_repository=CartDjangoRepository(),
            inventory_repository=InventoryDjangoRepository(),
            order_repository=OrderDjangoRepository(),
            replenishment_trigger=ReplenishmentTrigger(ReplenishmentDjangoRepository()),
        )
        try:
            service.checkout(customer.id, CheckoutDTO(payment_method="cod"))
            logger.warning("Customer %s: order placed", customer.user.username)
            return "success"
        except InsufficientStock:
            logger.warning("Customer %s: InsufficientStock (expected)", customer.user.username)
            return "insufficient"
        finally:
            django.db.connections.close_all()

    def _run_all(self):
        results = []
        with ThreadPoolExecutor(max_workers=NUM_WORKERS) as pool:
            futures = [pool.submit(self._checkout_in_thread, c) for c in self.customers]
            for future in as_completed(futures):
                results.append(future.result())
        return results

    def test_concurrent_checkouts_never_oversell(self):
        results = self._run_all()

        self.assertEqual(results.count("success"), INITIAL_STOCK)
        self.assertEqual(results.count("insufficient"), NUM_WORKERS - INITIAL_STOCK)
        self.book.refresh_from_db()
        self.assertEqual(self.book.stock_quantity, 0)
        self.assertEqual(Order.objects.count(), INITIAL_STOCK)

    def test_losing_carts_are_left_untouched(self):
        self._run_all()

        # Conservation: every copy is either in an order or still on the shelf.
        self.book.refresh_from_db()
        self.assertEqual(CartLine.objects.count(), NUM_WORKERS - INITIAL_STOCK)
        self.assertEqual(Order.objects.count() + self.book.stock_quantity, INITIAL_STOCK)

    def test_one_pending_request_per_book(self):
        self._run_all()

        requests = ReplenishmentRequest.objects.filter(book=self.book)
        self.assertEqual(requests.count(), 1)
        pending = requests.get()
        self.assertEqual(pending.status, ReplenishmentStatus.PENDING)
        self.assertEqual(pending.quantity, INITIAL_STOCK * 3)
