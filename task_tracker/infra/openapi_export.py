from __future__ import annotations

import json
import sys
from pathlib import Path

from task_tracker.main import app


def export_openapi(path: Path = Path("openapi/task-tracker.json")) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    schema = app.openapi()
    path.write_text(json.dumps(schema, ensure_ascii=False, indent=2, sort_keys=True), encoding="utf-8")
    return path


if __name__ == "__main__":
    target = export_openapi(Path(sys.argv[1])) if len(sys.argv) > 1 else export_openapi()
    print(target)
