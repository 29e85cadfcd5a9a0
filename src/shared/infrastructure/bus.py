"""In-process delivery of domain events drained from the outbox."""

from __future__ import annotations

from typing import Dict, List, Type

import structlog

from shared.domain.events import DomainEvent, IEventHandler

logger = structlog.get_logger(__name__)


class InMemoryEventBus:
    """Routes events to their handlers by ``event_name``.

    Events rebuilt from an outbox payload are matched on the same name they
    were stored under.  Handlers run synchronously in subscription order and
    their exceptions reach the caller; the outbox task marks the row
    ``FAILED``.
    """

    def __init__(self) -> None:
        self._routes: Dict[str, List[IEventHandler]] = {}

    def subscribe(self, event_class: Type[DomainEvent], handler: IEventHandler) -> None:
        """Register *handler*; subscribing the same handler twice is a no-op."""
        route = self._routes.setdefault(event_class.__name__, [])
        if handler not in route:
            route.append(handler)

    def subscribers(self, event_name: str) -> List[IEventHandler]:
        return list(self._routes.get(event_name, ()))

    def publish(self, event: DomainEvent) -> int:
        """Deliver *event* and return how many handlers received it."""
        handlers = self.subscribers(event.event_name)
        if not handlers:
            logger.debug("event_bus.no_subscribers", event_name=event.event_name)
        for handler in handlers:
            handler.handle(event)
            logger.debug(
                "event_bus.delivered",
                event_name=event.event_name,
                event_id=str(event.event_id),
                handler=type(handler).__name__,
            )
        return len(handlers)


event_bus = InMemoryEventBus()
