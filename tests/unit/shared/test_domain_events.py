"""Unit tests for domain events, the aggregate mixin and the in-memory bus."""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from modules.core.outbox import serialize_event_payload
from modules.orders.constants import PaymentMethod
from modules.orders.events import OrderPlaced
from modules.orders.models import Order
from modules.replenishment.events import ReplenishmentRequested
from shared.domain.events import DomainEvent, UnknownEventType
from shared.infrastructure.bus import InMemoryEventBus

pytestmark = pytest.mark.unit


def test_order_registers_and_clears_domain_events():
    order = Order(
        customer_id=uuid4(),
        total_amount=Decimal("0.00"),
        payment_method=PaymentMethod.CASH_ON_DELIVERY,
    )

    assert order.domain_events == []

    event = OrderPlaced(aggregate_id=order.id)
    order.add_domain_event(event)

    assert order.domain_events == [event]
    assert event.event_name == "OrderPlaced"

    order.clear_domain_events()
    assert order.domain_events == []


class TestFromPayload:
    def test_rebuilds_subclass_with_its_fields(self):
        event = ReplenishmentRequested(
            aggregate_id=uuid4(),
            book_id=str(uuid4()),
            isbn="9780141439518",
            publisher_id=str(uuid4()),
            quantity=9,
        )

        rebuilt = DomainEvent.from_payload(serialize_event_payload(event))

        assert isinstance(rebuilt, ReplenishmentRequested)
        assert rebuilt == event

    def test_unknown_event_name_raises(self):
        with pytest.raises(UnknownEventType):
            DomainEvent.from_payload({"event_name": "Nope", "aggregate_id": str(uuid4())})


class TestInMemoryEventBus:
    def test_publish_returns_handler_count(self):
        bus = InMemoryEventBus()
        seen = []

        class Recorder:
            def handle(self, event):
                seen.append(event)

        recorder = Recorder()
        bus.subscribe(OrderPlaced, recorder)
        bus.subscribe(OrderPlaced, recorder)
        event = OrderPlaced(aggregate_id=uuid4())

        assert bus.publish(event) == 1
        assert seen == [event]

    def test_publish_without_handlers_is_noop(self):
        assert InMemoryEventBus().publish(OrderPlaced(aggregate_id=uuid4())) == 0

    def test_handler_errors_propagate(self):
        bus = InMemoryEventBus()

        class Exploding:
            def handle(self, event):
                raise RuntimeError("boom")

        bus.subscribe(OrderPlaced, Exploding())
        with pytest.raises(RuntimeError):
            bus.publish(OrderPlaced(aggregate_id=uuid4()))

    def test_rebuilt_event_reaches_handlers_subscribed_by_class(self):
        bus = InMemoryEventBus()
        seen = []

        class Recorder:
            def handle(self, event):
                seen.append(event)

        bus.subscribe(OrderPlaced, Recorder())
        original = OrderPlaced(aggregate_id=uuid4(), order_number="BK-20250101-ABCDEF")
        rebuilt = DomainEvent.from_payload(serialize_event_payload(original))

        assert bus.publish(rebuilt) == 1
        assert seen == [original]

    def test_subscribers_by_name(self):
        bus = InMemoryEventBus()

        class Noop:
            def handle(self, event):
                pass

        handler = Noop()
        bus.subscribe(ReplenishmentRequested, handler)

        assert bus.subscribers("ReplenishmentRequested") == [handler]
        assert bus.subscribers("OrderPlaced") == []
