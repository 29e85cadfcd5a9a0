"""Helpers for writing domain events to the transactional outbox."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List
from uuid import UUID

import structlog
from django.db import DEFAULT_DB_ALIAS

from modules.core.models import OutboxEvent
from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)


def record_events(
    events: Iterable[DomainEvent],
    topic: str,
    using: str = DEFAULT_DB_ALIAS,
) -> List[OutboxEvent]:
    """Persist *events* as ``PENDING`` outbox rows on the *using* connection.

    Must be called inside the transaction that produced the events.
    """
    rows = []
    for event in events:
        rows.append(
            OutboxEvent.objects.using(using).create(
                event_type=event.event_name,
                aggregate_id=str(event.aggregate_id),
                payload=serialize_event_payload(event),
                topic=topic,
            )
        )
    if rows:
        logger.info(
            "outbox.events_recorded",
            topic=topic,
            event_types=[row.event_type for row in rows],
        )
    return rows


def serialize_event_payload(event: DomainEvent) -> Dict[str, Any]:
    data = asdict(event)
    normalized = _normalize_for_json(data)
    return json.loads(json.dumps(normalized))


def _normalize_for_json(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_for_json(item) for item in value]
    if isinstance(value, dict):
        return {key: _normalize_for_json(val) for key, val in value.items()}
    return value
