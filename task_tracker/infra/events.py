from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any, Protocol

from sqlmodel import Session

from task_tracker.domain.models import EventEnvelope, EventRecord
from task_tracker.infra.db import engine

logger = logging.getLogger(__name__)

EventHandler = Callable[[EventEnvelope], None]


class EventPublisher(Protocol):
    def publish(self, event: EventEnvelope) -> None: ...


class EventBus:
    """Records each event in the ``events`` table, then calls its subscribers.

    Subscribers registered for ``"*"`` receive every event type.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        if handler not in self._subscribers[event_type]:
            self._subscribers[event_type].append(handler)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        if event_type in self._subscribers and handler in self._subscribers[event_type]:
            self._subscribers[event_type].remove(handler)

    def publish(self, event: EventEnvelope, session: Session | None = None) -> None:
        should_commit = session is None
        if session is None:
            session = Session(engine)
        try:
            record = EventRecord(
                event_id=event.event_id,
                event_type=event.event_type,
                ts=event.ts,
                payload=event.payload,
            )
            session.add(record)
            if should_commit:
                session.commit()
        finally:
            if should_commit:
                session.close()

        logger.debug("published %s event %s", event.event_type, event.event_id)
        handlers = [*self._subscribers.get(event.event_type, []), *self._subscribers.get("*", [])]
        for handler in handlers:
            handler(event)

    def publish_dict(self, event_type: str, payload: dict[str, Any]) -> EventEnvelope:
        event = EventEnvelope(event_type=event_type, payload=payload)
        self.publish(event)
        return event


event_bus = EventBus()
