from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from task_tracker.domain.errors import InvalidArgumentError, InvalidTransitionError, NotFoundError
from task_tracker.domain.models import EVENT_TASK_COMPLETED, EventEnvelope
from task_tracker.domain.state_machine import TaskStatus
from task_tracker.infra.task_store import InMemoryTaskStore
from task_tracker.services.task_service import TaskService


class RecordingPublisher:
    def __init__(self) -> None:
        self.events: list[EventEnvelope] = []

    def publish(self, event: EventEnvelope) -> None:
        self.events.append(event)


class FailingPublisher:
    def publish(self, event: EventEnvelope) -> None:
        raise ConnectionError("message bus unavailable")


@pytest.fixture()
def store() -> InMemoryTaskStore:
    return InMemoryTaskStore()


@pytest.fixture()
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture()
def service(store: InMemoryTaskStore, publisher: RecordingPublisher) -> TaskService:
    return TaskService(store=store, publisher=publisher)


def test_create_task_returns_not_started_view(service: TaskService) -> None:
    view = service.create_task("Test Task", "Test Description")

    assert view.id == 1
    assert view.name == "Test Task"
    assert view.description == "Test Description"
    assert view.status == TaskStatus.NOT_STARTED
    assert view.created_at == view.last_modified_at


def test_create_task_surfaces_invalid_argument(service: TaskService, store: InMemoryTaskStore) -> None:
    with pytest.raises(InvalidArgumentError):
        service.create_task("", "Test Description")
    assert store.get_total_count() == 0


def test_get_task_is_repeatable(service: TaskService) -> None:
    created = service.create_task("Test Task", "Test Description")
    assert service.get_task(created.id) == service.get_task(created.id)


def test_get_task_missing_raises_not_found(service: TaskService) -> None:
    with pytest.raises(NotFoundError):
        service.get_task(42)


def test_update_status_missing_raises_not_found(service: TaskService, publisher: RecordingPublisher) -> None:
    with pytest.raises(NotFoundError):
        service.update_task_status(42, TaskStatus.IN_PROGRESS)
    assert publisher.events == []


def test_start_task_publishes_nothing(service: TaskService, publisher: RecordingPublisher) -> None:
    created = service.create_task("Test Task", "")

    view = service.update_task_status(created.id, TaskStatus.IN_PROGRESS)

    assert view.status == TaskStatus.IN_PROGRESS
    assert view.last_modified_at >= view.created_at
    assert publisher.events == []


def test_repeated_transition_is_rejected_without_persisting(
    service: TaskService,
    store: InMemoryTaskStore,
) -> None:
    created = service.create_task("Test Task", "")
    started = service.update_task_status(created.id, TaskStatus.IN_PROGRESS)

    with pytest.raises(InvalidTransitionError) as exc_info:
        service.update_task_status(created.id, TaskStatus.IN_PROGRESS)

    assert exc_info.value.current == TaskStatus.IN_PROGRESS
    stored = store.get_by_id(created.id)
    assert stored is not None
    assert stored.status == TaskStatus.IN_PROGRESS
    assert stored.last_modified_at == started.last_modified_at


def test_completing_task_publishes_one_event(service: TaskService, publisher: RecordingPublisher) -> None:
    created = service.create_task("Test Task", "")
    service.update_task_status(created.id, TaskStatus.IN_PROGRESS)
    assert publisher.events == []

    view = service.update_task_status(created.id, TaskStatus.COMPLETED)

    assert view.status == TaskStatus.COMPLETED
    assert len(publisher.events) == 1
    event = publisher.events[0]
    assert event.event_type == EVENT_TASK_COMPLETED
    assert set(event.payload) == {"taskId", "taskName", "completedAt"}
    assert event.payload["taskId"] == created.id
    assert event.payload["taskName"] == "Test Task"
    completed_at = datetime.fromisoformat(event.payload["completedAt"])
    assert abs(datetime.now(UTC) - completed_at) < timedelta(seconds=5)


def test_publish_failure_surfaces_and_keeps_persisted_completion(store: InMemoryTaskStore) -> None:
    service = TaskService(store=store, publisher=FailingPublisher())
    created = service.create_task("Test Task", "")
    service.update_task_status(created.id, TaskStatus.IN_PROGRESS)

    with pytest.raises(ConnectionError, match="message bus unavailable"):
        service.update_task_status(created.id, TaskStatus.COMPLETED)

    stored = store.get_by_id(created.id)
    assert stored is not None
    assert stored.is_completed


def test_list_tasks_paged(service: TaskService) -> None:
    for index in range(3):
        service.create_task(f"task-{index}", "")

    page = service.list_tasks(page_number=1, page_size=2)

    assert [item.name for item in page.items] == ["task-0", "task-1"]
    assert page.total_count == 3
    assert page.page_number == 1
    assert page.page_size == 2
    assert page.total_pages == 2


def test_list_tasks_beyond_last_page_is_empty(service: TaskService) -> None:
    for index in range(3):
        service.create_task(f"task-{index}", "")

    page = service.list_tasks(page_number=5, page_size=2)

    assert page.items == []
    assert page.total_count == 3


@pytest.mark.parametrize(
    ("page_number", "page_size"),
    [(None, None), (2, None), (None, 2)],
)
def test_list_tasks_without_full_pagination_returns_everything(
    service: TaskService,
    page_number: int | None,
    page_size: int | None,
) -> None:
    for index in range(3):
        service.create_task(f"task-{index}", "")

    page = service.list_tasks(page_number=page_number, page_size=page_size)

    assert len(page.items) == 3
    assert page.total_count == 3
    assert page.page_number == 1
    assert page.page_size == 3
    assert page.total_pages == 1


def test_list_tasks_empty_store(service: TaskService) -> None:
    page = service.list_tasks()
    assert page.items == []
    assert page.page_size == 0
    assert page.total_pages == 0


def test_update_details_keeps_status(service: TaskService) -> None:
    created = service.create_task("Test Task", "")
    service.update_task_status(created.id, TaskStatus.IN_PROGRESS)

    view = service.update_task_details(created.id, "Renamed", "More detail")

    assert view.name == "Renamed"
    assert view.description == "More detail"
    assert view.status == TaskStatus.IN_PROGRESS


def test_update_details_missing_task(service: TaskService) -> None:
    with pytest.raises(NotFoundError):
        service.update_task_details(7, "Renamed", "")


def test_list_all_tasks(service: TaskService) -> None:
    service.create_task("first", "")
    service.create_task("second", "")
    assert [item.name for item in service.list_all_tasks()] == ["first", "second"]
