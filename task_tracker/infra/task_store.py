from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from typing import Protocol

from sqlalchemy import func
from sqlmodel import Session, select

from task_tracker.domain.errors import InvalidArgumentError, NotFoundError
from task_tracker.domain.models import Task
from task_tracker.infra.db import get_engine


@dataclass(frozen=True)
class PageResult:
    items: list[Task]
    total_count: int


class TaskStore(Protocol):
    """Persistence contract for tasks.

    Pages are slices of the id-ascending ordering. Pages past the end are
    empty, not errors. ``update`` raises NotFoundError when the row is gone.
    """

    def add(self, task: Task) -> Task: ...

    def get_by_id(self, task_id: int) -> Task | None: ...

    def get_all(self) -> list[Task]: ...

    def get_page(self, page_number: int, page_size: int) -> PageResult: ...

    def get_total_count(self) -> int: ...

    def update(self, task: Task) -> Task: ...

    def exists(self, task_id: int) -> bool: ...


def _check_page_args(page_number: int, page_size: int) -> None:
    if page_number < 1:
        raise InvalidArgumentError("page_number", "Page number must be at least 1")
    if page_size < 1:
        raise InvalidArgumentError("page_size", "Page size must be at least 1")


def _not_found(task_id: int | None) -> NotFoundError:
    return NotFoundError(f"Task with ID {task_id} not found.")


class SqlTaskStore:
    def _session(self) -> Session:
        return Session(get_engine(), expire_on_commit=False)

    def add(self, task: Task) -> Task:
        with self._session() as session:
            session.add(task)
            session.commit()
            session.refresh(task)
        return task

    def get_by_id(self, task_id: int) -> Task | None:
        with self._session() as session:
            return session.get(Task, task_id)

    def get_all(self) -> list[Task]:
        with self._session() as session:
            return list(session.exec(select(Task).order_by(Task.id)).all())

    def get_page(self, page_number: int, page_size: int) -> PageResult:
        _check_page_args(page_number, page_size)
        with self._session() as session:
            total_count = int(session.exec(select(func.count()).select_from(Task)).one())
            offset = (page_number - 1) * page_size
            # Pages past the end never reach the OFFSET clause.
            if offset >= total_count:
                return PageResult(items=[], total_count=total_count)
            rows = session.exec(select(Task).order_by(Task.id).offset(offset).limit(page_size)).all()
            return PageResult(items=list(rows), total_count=total_count)

    def get_total_count(self) -> int:
        with self._session() as session:
            return int(session.exec(select(func.count()).select_from(Task)).one())

    def update(self, task: Task) -> Task:
        with self._session() as session:
            stored = session.get(Task, task.id)
            if stored is None:
                raise _not_found(task.id)
            stored.name = task.name
            stored.description = task.description
            stored.status = task.status
            stored.last_modified_at = task.last_modified_at
            session.add(stored)
            session.commit()
            session.refresh(stored)
            return stored

    def exists(self, task_id: int) -> bool:
        with self._session() as session:
            return session.exec(select(Task.id).where(Task.id == task_id)).first() is not None


class InMemoryTaskStore:
    """Dict-backed store. Callers always receive copies of the stored rows."""

    def __init__(self) -> None:
        self._rows: dict[int, Task] = {}
        self._next_id = 1
        self._lock = Lock()

    def add(self, task: Task) -> Task:
        with self._lock:
            task.id = self._next_id
            self._next_id += 1
            self._rows[task.id] = task.clone()
        return task

    def get_by_id(self, task_id: int) -> Task | None:
        with self._lock:
            row = self._rows.get(task_id)
            return row.clone() if row is not None else None

    def get_all(self) -> list[Task]:
        with self._lock:
            return [self._rows[key].clone() for key in sorted(self._rows)]

    def get_page(self, page_number: int, page_size: int) -> PageResult:
        _check_page_args(page_number, page_size)
        ordered = self.get_all()
        start = (page_number - 1) * page_size
        return PageResult(items=ordered[start : start + page_size], total_count=len(ordered))

    def get_total_count(self) -> int:
        with self._lock:
            return len(self._rows)

    def update(self, task: Task) -> Task:
        with self._lock:
            if task.id is None or task.id not in self._rows:
                raise _not_found(task.id)
            self._rows[task.id] = task.clone()
        return task

    def exists(self, task_id: int) -> bool:
        with self._lock:
            return task_id in self._rows
