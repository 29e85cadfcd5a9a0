"""Unit tests for CheckoutService.

Covers:
- The happy path: order written, stock decremented, cart emptied.
- Replenishment triggering at or below threshold.
- Failure modes: empty cart, unknown/removed book, insufficient stock,
  payment validation.
- Atomicity: any failure leaves stock, cart, orders and requests untouched.
- DB error classification into LockTimeout / PersistenceFailure.
"""

from __future__ import annotations

from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

import pytest
from django.db import IntegrityError, OperationalError
from pydantic import SecretStr

from modules.carts.models import CartLine
from modules.carts.repositories.django_repository import CartDjangoRepository
from modules.catalog.repositories.django_repository import InventoryDjangoRepository
from modules.core.models import OutboxEvent
from modules.orders.constants import CheckoutPhase, PaymentMethod
from modules.orders.dtos import CheckoutDTO
from modules.orders.exceptions import (
    BookUnavailable,
    EmptyCart,
    InsufficientStock,
    LockTimeout,
    PaymentValidation,
    PersistenceFailure,
)
from modules.orders.models import Order, OrderLine
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import CheckoutService
from modules.replenishment.models import ReplenishmentRequest
from modules.replenishment.repositories.django_repository import (
    ReplenishmentDjangoRepository,
)
from modules.replenishment.trigger import ReplenishmentTrigger

pytestmark = pytest.mark.unit

COD = CheckoutDTO(payment_method="cod")


def _fixed_clock():
    return datetime(2025, 6, 15, 12, 0, tzinfo=dt_timezone.utc)


def _build_service(inventory=None):
    return CheckoutService(
        cart_repository=CartDjangoRepository(),
        inventory_repository=inventory or InventoryDjangoRepository(),
        order_repository=OrderDjangoRepository(),
        replenishment_trigger=ReplenishmentTrigger(
            ReplenishmentDjangoRepository(), reorder_factor=3
        ),
        clock=_fixed_clock,
    )


@pytest.fixture()
def service():
    return _build_service()


@pytest.fixture()
def book_a(make_book):
    return make_book("9780000000001", stock=5, threshold=3, price="10.00")


@pytest.fixture()
def book_b(make_book):
    return make_book("9780000000002", stock=5, threshold=0, price="5.50")


def _stock(book):
    book.refresh_from_db()
    return book.stock_quantity


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------


class TestSuccessfulCheckout:
    def test_two_books_with_replenishment(self, service, customer, fill_cart, book_a, book_b):
        fill_cart(customer, {book_a: 2, book_b: 1})

        result = service.checkout(customer.id, COD)

        assert result.total == Decimal("25.50")
        assert result.order_number.startswith("BK-20")
        assert _stock(book_a) == 3
        assert _stock(book_b) == 4
        assert not CartLine.objects.filter(cart__customer=customer).exists()

        [request] = ReplenishmentRequest.objects.all()
        assert request.book_id == book_a.id
        assert request.quantity == 9

    def test_order_lines_snapshot_price_and_title(self, service, customer, fill_cart, book_a, book_b):
        fill_cart(customer, {book_a: 2, book_b: 1})

        result = service.checkout(customer.id, COD)

        order = Order.objects.get(pk=result.order_id)
        assert order.total_amount == Decimal("25.50")
        assert order.payment_method == PaymentMethod.CASH_ON_DELIVERY
        assert order.card_last4 is None
        lines = list(order.lines.order_by("isbn"))
        assert [(l.isbn, l.unit_price, l.quantity, l.subtotal) for l in lines] == [
            (book_a.isbn, Decimal("10.00"), 2, Decimal("20.00")),
            (book_b.isbn, Decimal("5.50"), 1, Decimal("5.50")),
        ]
        assert lines[0].title == book_a.title

    def test_total_equals_sum_of_line_subtotals(self, service, customer, fill_cart, make_book):
        books = {
            make_book("9780000000011", price="0.10"): 3,
            make_book("9780000000012", price="19.99"): 7,
            make_book("9780000000013", price="3.33"): 3,
        }
        fill_cart(customer, books)

        result = service.checkout(customer.id, COD)

        subtotals = OrderLine.objects.filter(order_id=result.order_id).values_list(
            "subtotal", flat=True
        )
        assert result.total == sum(subtotals) == Decimal("150.22")

    def test_card_payment_keeps_only_last4_and_expiry(self, service, customer, fill_cart, book_b):
        fill_cart(customer, {book_b: 1})
        dto = CheckoutDTO(
            payment_method="card",
            card_number=SecretStr("4111 1111 1111 1234"),
            card_cvv=SecretStr("123"),
            card_expiry="12/27",
        )

        result = service.checkout(customer.id, dto)

        order = Order.objects.get(pk=result.order_id)
        assert order.payment_method == PaymentMethod.CARD
        assert order.card_last4 == "1234"
        assert order.card_expiry == "12/27"

    def test_order_placed_event_in_outbox(self, service, customer, fill_cart, book_b):
        fill_cart(customer, {book_b: 1})

        result = service.checkout(customer.id, COD)

        event = OutboxEvent.objects.get(event_type="OrderPlaced")
        assert event.aggregate_id == str(result.order_id)
        assert event.payload["order_number"] == result.order_number

    def test_stock_exactly_consumed(self, service, customer, fill_cart, make_book):
        book = make_book("9780000000001", stock=2, threshold=0)
        fill_cart(customer, {book: 2})
        service.checkout(customer.id, COD)
        assert _stock(book) == 0

    def test_existing_pending_request_is_not_duplicated(
        self, service, make_customer, fill_cart, book_a
    ):
        first, second = make_customer("first"), make_customer("second")
        fill_cart(first, {book_a: 2})
        fill_cart(second, {book_a: 1})

        service.checkout(first.id, COD)
        service.checkout(second.id, COD)

        assert _stock(book_a) == 2
        assert ReplenishmentRequest.objects.filter(book=book_a).count() == 1

    def test_lines_added_by_another_session_survive(self, service, customer, fill_cart, book_a, book_b):
        """Only the lines read under lock are cleared."""
        cart = fill_cart(customer, {book_b: 1})
        repo = CartDjangoRepository()
        original = repo.lines_for_checkout

        def _read_then_concurrent_add(cart_arg):
            lines = original(cart_arg)
            CartLine.objects.create(cart=cart, book=book_a, quantity=1)
            return lines

        service._carts.lines_for_checkout = _read_then_concurrent_add
        service.checkout(customer.id, COD)

        assert list(CartLine.objects.filter(cart=cart).values_list("book_id", flat=True)) == [
            book_a.id
        ]


# ---------------------------------------------------------------------------
# Failures and atomicity
# ---------------------------------------------------------------------------


class TestFailedCheckout:
    def test_insufficient_stock_leaves_everything_untouched(self, service, customer, fill_cart, make_book):
        book = make_book("9780000000001", stock=2)
        fill_cart(customer, {book: 10})

        with pytest.raises(InsufficientStock) as excinfo:
            service.checkout(customer.id, COD)

        assert excinfo.value.isbn == book.isbn
        assert excinfo.value.requested == 10
        assert excinfo.value.available == 2
        assert excinfo.value.phase == CheckoutPhase.STOCK_CHECKING
        assert _stock(book) == 2
        assert CartLine.objects.get(cart__customer=customer).quantity == 10
        assert not Order.objects.exists()

    def test_first_short_line_in_isbn_order_is_reported(self, service, customer, fill_cart, make_book):
        short_b = make_book("9780000000002", stock=0)
        short_a = make_book("9780000000001", stock=0)
        fill_cart(customer, {short_b: 1, short_a: 1})

        with pytest.raises(InsufficientStock) as excinfo:
            service.checkout(customer.id, COD)

        assert excinfo.value.isbn == short_a.isbn

    def test_invalid_card_fails_before_any_query(
        self, service, customer, fill_cart, book_a, django_assert_num_queries
    ):
        fill_cart(customer, {book_a: 1})
        dto = CheckoutDTO(
            payment_method="card",
            card_number=SecretStr("123"),
            card_cvv=SecretStr("123"),
            card_expiry="12/30",
        )

        with django_assert_num_queries(0), pytest.raises(PaymentValidation) as excinfo:
            service.checkout(customer.id, dto)

        assert excinfo.value.phase == CheckoutPhase.VALIDATING
        assert _stock(book_a) == 5

    def test_empty_cart(self, service, customer):
        with pytest.raises(EmptyCart) as excinfo:
            service.checkout(customer.id, COD)
        assert excinfo.value.phase == CheckoutPhase.LOCKING

    def test_removed_book_is_unavailable(self, service, customer, fill_cart, book_a, book_b):
        fill_cart(customer, {book_a: 1, book_b: 1})
        book_b.delete()

        with pytest.raises(BookUnavailable) as excinfo:
            service.checkout(customer.id, COD)

        assert excinfo.value.isbns == [book_b.isbn]
        assert excinfo.value.kind == "not_found"
        assert _stock(book_a) == 5
        assert CartLine.objects.filter(cart__customer=customer).count() == 2

    def test_failure_while_writing_rolls_back_everything(
        self, customer, fill_cart, book_a, book_b
    ):
        """The second decrement fails: the first decrement, the order and
        the replenishment request must all disappear."""
        fill_cart(customer, {book_a: 2, book_b: 1})
        inventory = InventoryDjangoRepository()
        real_decrement = inventory.decrement_stock

        def _decrement(book_id, quantity):
            if book_id == book_b.id:
                raise IntegrityError("CHECK constraint failed: books_stock_non_negative")
            return real_decrement(book_id, quantity)

        inventory.decrement_stock = _decrement
        service = _build_service(inventory)

        with pytest.raises(PersistenceFailure) as excinfo:
            service.checkout(customer.id, COD)

        assert excinfo.value.phase == CheckoutPhase.WRITING
        assert _stock(book_a) == 5
        assert _stock(book_b) == 5
        assert not Order.objects.exists()
        assert not OrderLine.objects.exists()
        assert not ReplenishmentRequest.objects.exists()
        assert not OutboxEvent.objects.exists()
        assert CartLine.objects.filter(cart__customer=customer).count() == 2

    def test_lock_conflict_becomes_lock_timeout(self, customer, fill_cart, book_a):
        fill_cart(customer, {book_a: 1})
        inventory = InventoryDjangoRepository()

        def _locked(isbns):
            raise OperationalError("database is locked")

        inventory.lock_and_fetch = _locked
        service = _build_service(inventory)

        with pytest.raises(LockTimeout) as excinfo:
            service.checkout(customer.id, COD)

        assert excinfo.value.kind == "lock_timeout"
        assert excinfo.value.phase == CheckoutPhase.LOCKING
        assert CartLine.objects.filter(cart__customer=customer).count() == 1

    def test_exhausted_order_numbers_become_persistence_failure(
        self, service, customer, fill_cart, book_a, monkeypatch
    ):
        fill_cart(customer, {book_a: 1})
        monkeypatch.setattr(
            Order, "generate_order_number", staticmethod(lambda: "BK-20250101-000000")
        )
        Order(
            customer=customer,
            total_amount="1.00",
            payment_method=PaymentMethod.CASH_ON_DELIVERY,
        ).save()

        with pytest.raises(PersistenceFailure) as excinfo:
            service.checkout(customer.id, COD)

        assert excinfo.value.kind == "persistence_failure"
        assert excinfo.value.phase == CheckoutPhase.WRITING
        assert _stock(book_a) == 5
        assert Order.objects.count() == 1
        assert CartLine.objects.filter(cart__customer=customer).count() == 1

    def test_abort_is_logged_with_phase(self, service, customer, caplog):
        import logging

        with caplog.at_level(logging.INFO), pytest.raises(EmptyCart):
            service.checkout(customer.id, COD)

        messages = [record.getMessage() for record in caplog.records]
        assert any("checkout.aborted" in m and "LOCKING" in m for m in messages)
