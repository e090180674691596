from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from task_tracker.api.routers import tasks
from task_tracker.infra.consumers import register_consumers
from task_tracker.infra.db import check_db_ready
from task_tracker.infra.events import event_bus
from task_tracker.infra.log_config import configure_logging
from task_tracker.infra.redis_state import (
    REDIS_EVENTS_ENABLED,
    RedisEventForwarder,
    check_redis_ready,
)

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="task-tracker",
    description="Task lifecycle tracking with completion notifications.",
    version="1.0.0",
)

app.include_router(tasks.router, prefix="/api/v1", tags=["tasks"])

register_consumers(event_bus)
redis_forwarder = RedisEventForwarder()
if REDIS_EVENTS_ENABLED:
    event_bus.subscribe("*", redis_forwarder)


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled error while processing %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": {"code": "internal_error", "message": "An unexpected error occurred."}},
    )


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/readyz")
def readyz() -> dict[str, object]:
    checks = {"db": "ok" if check_db_ready() else "fail"}
    if REDIS_EVENTS_ENABLED:
        checks["redis"] = "ok" if check_redis_ready() else "fail"
    if any(value == "fail" for value in checks.values()):
        raise HTTPException(
            status_code=503,
            detail={"status": "not_ready", "checks": checks},
        )
    return {"status": "ready", "checks": checks}
