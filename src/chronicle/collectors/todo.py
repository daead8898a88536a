"""Checklist file reader."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from ..errors import CollectorError


@dataclass(slots=True)
class TodoFile:
    path: str
    content: str
    modified_at: datetime


def read_todo_file(path: Path) -> TodoFile:
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
        modified = path.stat().st_mtime
    except (OSError, UnicodeDecodeError) as exc:
        raise CollectorError(f"Cannot read TODO file '{path}': {exc}") from exc
    return TodoFile(
        path=str(path),
        content=content,
        modified_at=datetime.fromtimestamp(modified, tz=timezone.utc),
    )


__all__ = ["TodoFile", "read_todo_file"]
