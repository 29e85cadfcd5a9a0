"""Unit tests for ReplenishmentTrigger."""

from __future__ import annotations

import pytest
from django.db import transaction

from modules.core.models import OutboxEvent
from modules.replenishment.models import ReplenishmentRequest, ReplenishmentStatus
from modules.replenishment.repositories.django_repository import (
    ReplenishmentDjangoRepository,
)
from modules.replenishment.trigger import ReplenishmentTrigger

pytestmark = pytest.mark.unit


@pytest.fixture()
def trigger():
    return ReplenishmentTrigger(ReplenishmentDjangoRepository(), reorder_factor=3)


def _fire(trigger, book, stock):
    with transaction.atomic():
        return trigger.maybe_request_replenishment(
            book_id=book.id,
            post_sale_stock=stock,
            threshold=book.threshold,
            publisher_id=book.publisher_id,
            isbn=book.isbn,
        )


class TestThreshold:
    def test_above_threshold_is_noop(self, trigger, make_book):
        book = make_book("9780000000001", threshold=3)
        assert _fire(trigger, book, 4) is None
        assert not ReplenishmentRequest.objects.exists()

    def test_at_threshold_requests(self, trigger, make_book):
        book = make_book("9780000000001", threshold=3)
        request = _fire(trigger, book, 3)
        assert request.status == ReplenishmentStatus.PENDING
        assert request.quantity == 9
        assert request.publisher_id == book.publisher_id

    def test_below_threshold_requests(self, trigger, make_book):
        book = make_book("9780000000001", threshold=5)
        assert _fire(trigger, book, 0).quantity == 15

    def test_zero_threshold_disables(self, trigger, make_book):
        book = make_book("9780000000001", threshold=0)
        assert _fire(trigger, book, 0) is None

    def test_reorder_factor_defaults_to_setting(self, settings, make_book):
        settings.REPLENISHMENT_REORDER_FACTOR = 4
        trigger = ReplenishmentTrigger(ReplenishmentDjangoRepository())
        book = make_book("9780000000001", threshold=2)
        assert _fire(trigger, book, 1).quantity == 8


class TestDeduplication:
    def test_second_trigger_returns_existing_request(self, trigger, make_book):
        book = make_book("9780000000001", threshold=3)
        first = _fire(trigger, book, 2)
        second = _fire(trigger, book, 1)
        assert first.id == second.id
        assert ReplenishmentRequest.objects.filter(book=book).count() == 1

    def test_event_written_only_on_create(self, trigger, make_book):
        book = make_book("9780000000001", threshold=3)
        _fire(trigger, book, 2)
        _fire(trigger, book, 1)
        events = OutboxEvent.objects.filter(event_type="ReplenishmentRequested")
        assert events.count() == 1
        assert events.get().payload["isbn"] == book.isbn

    def test_resolved_request_does_not_block_new_one(self, trigger, make_book):
        book = make_book("9780000000001", threshold=3)
        first = _fire(trigger, book, 2)
        ReplenishmentRequest.objects.filter(pk=first.pk).update(
            status=ReplenishmentStatus.FULFILLED
        )
        second = _fire(trigger, book, 2)
        assert second.id != first.id
        assert second.status == ReplenishmentStatus.PENDING
