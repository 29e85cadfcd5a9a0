"""Asynchronous tasks of the core module."""

import structlog
from celery import shared_task
from django.conf import settings
from django.db import transaction

from modules.core.models import EventStatus, OutboxEvent
from shared.domain.events import DomainEvent
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)


@shared_task(name="core.debug_task")
def debug_task():
    """Diagnostic task confirming the Celery worker is operational."""
    logger.info("debug_task.executed", status="ok")
    return {"status": "ok", "message": "Celery is working"}


@shared_task(name="core.publish_outbox_events")
def publish_outbox_events(batch_size=None):
    """Dispatch pending outbox events to the in-process event bus.

    Each batch is claimed with ``SELECT … FOR UPDATE SKIP LOCKED`` so two
    workers never publish the same row.  A failing event is marked
    ``FAILED`` and does not stop the rest of the batch.
    """
    batch_size = batch_size or settings.OUTBOX_PUBLISH_BATCH_SIZE
    published = failed = 0

    with transaction.atomic():
        events = list(
            OutboxEvent.objects.select_for_update(skip_locked=True)
            .filter(status=EventStatus.PENDING)
            .order_by("created_at")[:batch_size]
        )
        for outbox_event in events:
            log = logger.bind(
                outbox_event_id=str(outbox_event.id),
                event_type=outbox_event.event_type,
                aggregate_id=outbox_event.aggregate_id,
            )
            try:
                event = DomainEvent.from_payload(outbox_event.payload)
                handler_count = event_bus.publish(event)
            except Exception as exc:
                log.exception("outbox.publish_failed")
                outbox_event.mark_as_failed(str(exc))
                failed += 1
                continue
            outbox_event.mark_as_published()
            log.info("outbox.published", handler_count=handler_count)
            published += 1

    logger.info("outbox.batch_completed", published=published, failed=failed)
    return {"published": published, "failed": failed}
