from __future__ import annotations

import logging

from task_tracker.domain.models import EVENT_TASK_COMPLETED, EventEnvelope, TaskCompletedEvent
from task_tracker.infra.events import EventBus

logger = logging.getLogger(__name__)


def log_task_completed(event: EventEnvelope) -> TaskCompletedEvent:
    completed = TaskCompletedEvent.model_validate(event.payload)
    logger.info(
        "task completed: %s - %s at %s",
        completed.task_id,
        completed.task_name,
        completed.completed_at.isoformat(),
    )
    return completed


def register_consumers(bus: EventBus) -> None:
    bus.subscribe(EVENT_TASK_COMPLETED, log_task_completed)
