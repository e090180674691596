from __future__ import annotations

from task_tracker.domain.state_machine import TaskStatus


class TaskError(Exception):
    code = "task_error"


class InvalidArgumentError(TaskError):
    code = "invalid_argument"

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message

    @property
    def errors(self) -> dict[str, list[str]]:
        return {self.field: [self.message]}


class InvalidTransitionError(TaskError):
    code = "invalid_transition"

    def __init__(self, current: TaskStatus, requested: TaskStatus) -> None:
        super().__init__(f"Cannot transition task from {current} to {requested}")
        self.current = current
        self.requested = requested


class NotFoundError(TaskError):
    code = "not_found"
