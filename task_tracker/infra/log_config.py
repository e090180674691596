from __future__ import annotations

import logging
import os

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    # basicConfig is a no-op once the root logger has handlers (uvicorn, pytest).
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)
    logging.getLogger("task_tracker").setLevel((level or LOG_LEVEL).upper())
