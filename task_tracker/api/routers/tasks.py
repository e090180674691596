from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, HTTPException, Query, status

from task_tracker.api.deps import Service
from task_tracker.domain.errors import (
    InvalidArgumentError,
    InvalidTransitionError,
    NotFoundError,
    TaskError,
)
from task_tracker.domain.models import (
    TaskCreate,
    TaskDetailsUpdate,
    TaskPage,
    TaskRead,
    TaskStatusUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _handle_task_error(exc: TaskError) -> None:
    detail: dict[str, Any] = {"code": exc.code, "message": str(exc)}
    if isinstance(exc, InvalidArgumentError):
        detail["errors"] = exc.errors
    if isinstance(exc, InvalidTransitionError):
        detail["currentStatus"] = exc.current.value
        detail["requestedStatus"] = exc.requested.value
    if isinstance(exc, NotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, (InvalidArgumentError, InvalidTransitionError)):
        status_code = status.HTTP_400_BAD_REQUEST
    else:
        raise exc
    logger.warning("task request rejected (%s): %s", exc.code, exc)
    raise HTTPException(status_code=status_code, detail=detail) from exc


@router.post("/tasks", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
def create_task(payload: TaskCreate, service: Service) -> TaskRead:
    try:
        return service.create_task(payload.name, payload.description)
    except TaskError as exc:
        _handle_task_error(exc)
        raise


@router.get("/tasks", response_model=TaskPage)
def list_tasks(
    service: Service,
    page_number: Annotated[int | None, Query(alias="pageNumber", ge=1)] = None,
    page_size: Annotated[int | None, Query(alias="pageSize", ge=1)] = None,
) -> TaskPage:
    try:
        return service.list_tasks(page_number=page_number, page_size=page_size)
    except TaskError as exc:
        _handle_task_error(exc)
        raise


@router.get("/tasks/{task_id}", response_model=TaskRead)
def get_task(task_id: int, service: Service) -> TaskRead:
    try:
        return service.get_task(task_id)
    except TaskError as exc:
        _handle_task_error(exc)
        raise


@router.put("/tasks/{task_id}", response_model=TaskRead)
def update_task_details(task_id: int, payload: TaskDetailsUpdate, service: Service) -> TaskRead:
    try:
        return service.update_task_details(task_id, payload.name, payload.description)
    except TaskError as exc:
        _handle_task_error(exc)
        raise


@router.patch("/tasks/{task_id}/status", response_model=TaskRead)
@router.put("/tasks/{task_id}/status", response_model=TaskRead, include_in_schema=False)
def update_task_status(task_id: int, payload: TaskStatusUpdate, service: Service) -> TaskRead:
    try:
        return service.update_task_status(task_id, payload.status)
    except TaskError as exc:
        _handle_task_error(exc)
        raise
