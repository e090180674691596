from __future__ import annotations

import logging
import math

from task_tracker.domain.errors import NotFoundError
from task_tracker.domain.models import (
    Task,
    TaskCompletedEvent,
    TaskPage,
    TaskRead,
    now_utc,
)
from task_tracker.domain.state_machine import TaskStatus
from task_tracker.infra.events import EventPublisher, event_bus
from task_tracker.infra.task_store import SqlTaskStore, TaskStore

logger = logging.getLogger(__name__)


def _to_read(task: Task) -> TaskRead:
    return TaskRead.model_validate(task)


def _total_pages(total_count: int, page_size: int) -> int:
    if page_size == 0:
        return 0
    return math.ceil(total_count / page_size)


class TaskService:
    """Create, read, rename and move tasks through their lifecycle.

    Every call loads what it needs from the store and owns those entities
    until it persists or drops them. Concurrent status updates on one task
    are last-write-wins at the store.
    """

    def __init__(
        self,
        store: TaskStore | None = None,
        publisher: EventPublisher | None = None,
    ) -> None:
        self._store: TaskStore = store if store is not None else SqlTaskStore()
        self._publisher: EventPublisher = publisher if publisher is not None else event_bus

    def _load(self, task_id: int) -> Task:
        task = self._store.get_by_id(task_id)
        if task is None:
            raise NotFoundError(f"Task with ID {task_id} not found.")
        return task

    def create_task(self, name: str, description: str | None = "") -> TaskRead:
        task = self._store.add(Task.create(name, description))
        logger.info("task %s created", task.id)
        return _to_read(task)

    def get_task(self, task_id: int) -> TaskRead:
        return _to_read(self._load(task_id))

    def list_all_tasks(self) -> list[TaskRead]:
        return [_to_read(task) for task in self._store.get_all()]

    def list_tasks(self, page_number: int | None = None, page_size: int | None = None) -> TaskPage:
        # Pagination applies only when both values are given.
        if page_number is not None and page_size is not None:
            page = self._store.get_page(page_number, page_size)
            return TaskPage(
                items=[_to_read(task) for task in page.items],
                total_count=page.total_count,
                page_number=page_number,
                page_size=page_size,
                total_pages=_total_pages(page.total_count, page_size),
            )

        items = self.list_all_tasks()
        total_count = len(items)
        return TaskPage(
            items=items,
            total_count=total_count,
            page_number=1,
            page_size=total_count,
            total_pages=_total_pages(total_count, total_count),
        )

    def update_task_details(self, task_id: int, name: str, description: str | None = "") -> TaskRead:
        task = self._load(task_id)
        task.update_details(name, description)
        stored = self._store.update(task)
        logger.info("task %s details updated", task_id)
        return _to_read(stored)

    def update_task_status(self, task_id: int, new_status: TaskStatus) -> TaskRead:
        task = self._load(task_id)
        previous = task.status
        task.change_status(new_status)
        stored = self._store.update(task)
        logger.info("task %s moved %s -> %s", task_id, previous, stored.status)

        # Persisted before publishing; a publish error surfaces but the status stays.
        if stored.status == TaskStatus.COMPLETED:
            self._notify_completed(task_id, stored)
        return _to_read(stored)

    def _notify_completed(self, task_id: int, task: Task) -> None:
        event = TaskCompletedEvent(task_id=task_id, task_name=task.name, completed_at=now_utc())
        self._publisher.publish(event.to_envelope())
        logger.info("task %s completion published", task_id)
