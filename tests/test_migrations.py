from __future__ import annotations

import json
from pathlib import Path

import pytest
from sqlalchemy import create_engine, inspect

from task_tracker.infra import migrate
from task_tracker.infra.openapi_export import export_openapi

ROOT = Path(__file__).resolve().parents[1]


def test_upgrade_and_downgrade_schema(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(ROOT)
    database_url = f"sqlite:///{tmp_path / 'migrate_test.db'}"

    migrate.upgrade(database_url=database_url)

    engine = create_engine(database_url)
    inspector = inspect(engine)
    assert {"tasks", "events"} <= set(inspector.get_table_names())
    columns = {column["name"] for column in inspector.get_columns("tasks")}
    assert columns == {"id", "name", "description", "status", "created_at", "last_modified_at"}

    migrate.downgrade("base", database_url=database_url)
    assert "tasks" not in inspect(engine).get_table_names()
    engine.dispose()


def test_export_openapi_lists_task_routes(tmp_path: Path) -> None:
    target = export_openapi(tmp_path / "openapi.json")

    schema = json.loads(target.read_text(encoding="utf-8"))
    assert "/api/v1/tasks" in schema["paths"]
    assert "patch" in schema["paths"]["/api/v1/tasks/{task_id}/status"]
