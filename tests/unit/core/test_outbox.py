"""Unit tests for the OutboxEvent model and ``record_events``."""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.core.models import EventStatus, OutboxEvent
from modules.core.outbox import record_events
from modules.orders.events import OrderPlaced

pytestmark = pytest.mark.unit


class TestRecordEvents:
    def test_rows_are_pending_with_json_payload(self):
        order_id = uuid4()
        event = OrderPlaced(
            aggregate_id=order_id,
            order_number="BK-20250101-ABC123",
            total_amount="20.00",
            line_count=2,
        )

        [row] = record_events([event], topic="orders")

        row.refresh_from_db()
        assert row.status == EventStatus.PENDING
        assert row.event_type == "OrderPlaced"
        assert row.aggregate_id == str(order_id)
        assert row.topic == "orders"
        assert row.payload["order_number"] == "BK-20250101-ABC123"
        assert row.payload["aggregate_id"] == str(order_id)
        assert isinstance(row.payload["occurred_on"], str)

    def test_no_events_writes_nothing(self):
        assert record_events([], topic="orders") == []
        assert OutboxEvent.objects.count() == 0


class TestOutboxTransitions:
    def test_mark_as_published(self):
        [row] = record_events([OrderPlaced(aggregate_id=uuid4())], topic="orders")
        row.mark_as_published()
        row.refresh_from_db()
        assert row.status == EventStatus.PUBLISHED
        assert row.processed_at is not None

    def test_mark_as_failed_increments_retry_count(self):
        [row] = record_events([OrderPlaced(aggregate_id=uuid4())], topic="orders")
        row.mark_as_failed("handler exploded")
        row.mark_as_failed("handler exploded again")
        row.refresh_from_db()
        assert row.status == EventStatus.FAILED
        assert row.retry_count == 2
        assert row.error_message == "handler exploded again"

    def test_str(self):
        [row] = record_events([OrderPlaced(aggregate_id=uuid4())], topic="orders")
        assert str(row).startswith("OrderPlaced [PENDING]")
