from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict
from pydantic import Field as PydanticField
from pydantic.alias_generators import to_camel
from sqlalchemy import JSON, Column, DateTime
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, SQLModel

from task_tracker.domain.errors import InvalidArgumentError, InvalidTransitionError
from task_tracker.domain.state_machine import TaskStatus, can_transition

NAME_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000

EVENT_TASK_COMPLETED = "task.completed"


def now_utc() -> datetime:
    return datetime.now(UTC)


def validate_details(name: str | None, description: str | None) -> tuple[str, str]:
    """Return the trimmed name and the description, or raise InvalidArgumentError."""
    trimmed = (name or "").strip()
    if not trimmed:
        raise InvalidArgumentError("name", "Task name cannot be empty")
    if len(trimmed) > NAME_MAX_LENGTH:
        raise InvalidArgumentError("name", f"Task name cannot exceed {NAME_MAX_LENGTH} characters")
    text = description or ""
    if len(text) > DESCRIPTION_MAX_LENGTH:
        raise InvalidArgumentError(
            "description",
            f"Task description cannot exceed {DESCRIPTION_MAX_LENGTH} characters",
        )
    return trimmed, text


class EventRecord(SQLModel, table=True):
    __tablename__ = "events"

    event_id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    event_type: str = Field(index=True)
    ts: datetime = Field(
        default_factory=now_utc,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
    )
    payload: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
    )


class Task(SQLModel, table=True):
    """A tracked task and its NotStarted -> InProgress -> Completed lifecycle.

    New tasks come from ``Task.create``, which validates the details. Rows
    loaded by the ORM, or rebuilt with ``Task.rehydrate``, are trusted as
    stored and skip validation.
    """

    __tablename__ = "tasks"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=NAME_MAX_LENGTH)
    description: str = Field(default="", max_length=DESCRIPTION_MAX_LENGTH)
    status: TaskStatus = Field(
        default=TaskStatus.NOT_STARTED,
        sa_column=Column(
            SAEnum(
                TaskStatus,
                native_enum=False,
                length=32,
                values_callable=lambda enum: [item.value for item in enum],
            ),
            nullable=False,
            index=True,
        ),
    )
    created_at: datetime = Field(
        default_factory=now_utc,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    last_modified_at: datetime = Field(
        default_factory=now_utc,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    @classmethod
    def create(cls, name: str, description: str | None = "") -> Task:
        clean_name, clean_description = validate_details(name, description)
        ts = now_utc()
        return cls(
            name=clean_name,
            description=clean_description,
            status=TaskStatus.NOT_STARTED,
            created_at=ts,
            last_modified_at=ts,
        )

    @classmethod
    def rehydrate(
        cls,
        *,
        id: int | None,
        name: str,
        description: str,
        status: TaskStatus,
        created_at: datetime,
        last_modified_at: datetime,
    ) -> Task:
        return cls(
            id=id,
            name=name,
            description=description,
            status=status,
            created_at=created_at,
            last_modified_at=last_modified_at,
        )

    def clone(self) -> Task:
        return Task.rehydrate(
            id=self.id,
            name=self.name,
            description=self.description,
            status=self.status,
            created_at=self.created_at,
            last_modified_at=self.last_modified_at,
        )

    def update_details(self, name: str, description: str | None = "") -> None:
        self.name, self.description = validate_details(name, description)
        self.last_modified_at = now_utc()

    def can_transition_to(self, new_status: TaskStatus) -> bool:
        return can_transition(self.status, new_status)

    def change_status(self, new_status: TaskStatus) -> None:
        if not self.can_transition_to(new_status):
            raise InvalidTransitionError(self.status, new_status)
        self.status = new_status
        self.last_modified_at = now_utc()

    @property
    def is_not_started(self) -> bool:
        return self.status == TaskStatus.NOT_STARTED

    @property
    def is_in_progress(self) -> bool:
        return self.status == TaskStatus.IN_PROGRESS

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED


class EventEnvelope(BaseModel):
    event_id: str = PydanticField(default_factory=lambda: str(uuid4()))
    event_type: str
    ts: datetime = PydanticField(default_factory=now_utc)
    payload: dict[str, Any]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ORMReadModel(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class TaskCompletedEvent(CamelModel):
    task_id: int
    task_name: str
    completed_at: datetime

    def to_envelope(self) -> EventEnvelope:
        return EventEnvelope(
            event_type=EVENT_TASK_COMPLETED,
            payload=self.model_dump(mode="json", by_alias=True),
        )


class TaskCreate(CamelModel):
    name: str
    description: str = ""


class TaskDetailsUpdate(CamelModel):
    name: str
    description: str = ""


class TaskStatusUpdate(CamelModel):
    status: TaskStatus


class TaskRead(ORMReadModel):
    id: int
    name: str
    description: str
    status: TaskStatus
    created_at: datetime
    last_modified_at: datetime


class TaskPage(CamelModel):
    items: list[TaskRead]
    total_count: int
    page_number: int
    page_size: int
    total_pages: int
