from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from task_tracker.services.task_service import TaskService


def get_task_service() -> TaskService:
    return TaskService()


Service = Annotated[TaskService, Depends(get_task_service)]
