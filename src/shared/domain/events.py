"""Domain event primitives for the modular monolith."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Generic, Protocol, Type, TypeVar
from uuid import UUID, uuid4


class UnknownEventType(LookupError):
    """An outbox payload names an event class that is not registered."""


@dataclass(frozen=True)
class DomainEvent:
    """Base domain event (immutable).

    Every subclass is registered by name so events written to the outbox can
    be rebuilt with ``DomainEvent.from_payload``.
    """

    aggregate_id: UUID
    event_id: UUID = field(default_factory=uuid4)
    occurred_on: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_name: str = field(init=False)

    _registry: ClassVar[Dict[str, Type[DomainEvent]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        DomainEvent._registry[cls.__name__] = cls

    def __post_init__(self) -> None:
        object.__setattr__(self, "event_name", self.__class__.__name__)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> DomainEvent:
        """Rebuild an event from its JSON outbox payload."""
        name = payload.get("event_name", "")
        event_class = cls._registry.get(name)
        if event_class is None:
            raise UnknownEventType(f"Unknown domain event type {name!r}.")

        kwargs: Dict[str, Any] = {}
        for f in fields(event_class):
            if not f.init or f.name not in payload:
                continue
            kwargs[f.name] = payload[f.name]
        kwargs["aggregate_id"] = UUID(str(payload["aggregate_id"]))
        if "event_id" in payload:
            kwargs["event_id"] = UUID(str(payload["event_id"]))
        if "occurred_on" in payload:
            kwargs["occurred_on"] = datetime.fromisoformat(payload["occurred_on"])
        return event_class(**kwargs)


class DomainEventMixin:
    """Mixin for aggregate roots that collect domain events in memory."""

    _domain_events: list[DomainEvent]

    def add_domain_event(self, event: DomainEvent) -> None:
        if not hasattr(self, "_domain_events"):
            self._domain_events = []
        self._domain_events.append(event)

    def clear_domain_events(self) -> None:
        if hasattr(self, "_domain_events"):
            self._domain_events.clear()

    @property
    def domain_events(self) -> list[DomainEvent]:
        if not hasattr(self, "_domain_events"):
            self._domain_events = []
        return list(self._domain_events)


E = TypeVar("E", bound=DomainEvent, contravariant=True)


class IEventHandler(Protocol, Generic[E]):
    """Receives one kind of domain event after its transaction committed."""

    def handle(self, event: E) -> None: ...
