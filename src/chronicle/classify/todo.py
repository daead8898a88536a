"""Checklist parsing and status-change detection."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Sequence

from ..models import ChangeKind, Todo, TodoStatus
from ..state import TodoRecord

_PREFIXES: tuple[tuple[str, TodoStatus], ...] = (
    ("- [ ] ", TodoStatus.PENDING),
    ("- [x] ", TodoStatus.DONE),
    ("- [~] ", TodoStatus.IN_PROGRESS),
)


@dataclass(slots=True)
class TodoClassification:
    items: list[Todo]
    record: TodoRecord

    @property
    def changed(self) -> list[Todo]:
        """Items worth reporting; unchanged ones only feed the record."""

        return [item for item in self.items if item.change is not ChangeKind.UNCHANGED]


def parse_todo_line(line: str, file: str, line_number: int) -> Todo | None:
    for prefix, status in _PREFIXES:
        if line.startswith(prefix):
            return Todo(content=line[len(prefix):], status=status, file=file, line=line_number)
    return None


def parse_todos(content: str, file: str) -> list[Todo]:
    """Parse checklist items; line numbers are 1-based."""

    todos: list[Todo] = []
    # Only "\n" and "\r\n" end a line; other control characters stay in the item.
    for index, line in enumerate(content.split("\n"), start=1):
        todo = parse_todo_line(line.rstrip("\r").strip(), file, index)
        if todo is not None:
            todos.append(todo)
    return todos


def todo_key(todo: Todo) -> str:
    return f"{todo.file}:{todo.line}:{todo.content}"


def todo_hash(todo: Todo) -> str:
    return f"{todo.status.value}:{todo_key(todo)}"


def split_hash(value: str) -> tuple[TodoStatus | None, str]:
    """Split a stored hash into its status and its ``file:line:content`` key."""

    prefix, separator, key = value.partition(":")
    if not separator:
        return None, value
    try:
        return TodoStatus(prefix), key
    except ValueError:
        return None, key


def _previous_statuses(hashes: Iterable[str]) -> dict[str, TodoStatus | None]:
    statuses: dict[str, TodoStatus | None] = {}
    for value in hashes:
        status, key = split_hash(value)
        statuses.setdefault(key, status)
    return statuses


def classify_todos(
    todos: Sequence[Todo],
    prior: TodoRecord | None,
    *,
    now: datetime,
    last_modified: datetime | None = None,
) -> TodoClassification:
    """Mark each item New, Modified or Unchanged against the prior hashes.

    An item is Modified when an earlier entry has the same file, line and
    content under another status. Keys are compared for equality, so an
    item whose text happens to be contained in an unrelated entry stays New.
    """

    items = list(todos)
    if prior is None:
        for item in items:
            item.change = ChangeKind.NEW
            item.previous_status = None
    else:
        known = set(prior.item_hashes)
        previous = _previous_statuses(prior.item_hashes)
        for item in items:
            if todo_hash(item) in known:
                item.change = ChangeKind.UNCHANGED
                item.previous_status = None
            elif todo_key(item) in previous:
                item.change = ChangeKind.MODIFIED
                item.previous_status = previous[todo_key(item)]
            else:
                item.change = ChangeKind.NEW
                item.previous_status = None

    record = TodoRecord(
        last_checked=now,
        last_modified=last_modified or now,
        item_hashes=[todo_hash(item) for item in items],
    )
    return TodoClassification(items=items, record=record)


__all__ = [
    "TodoClassification",
    "classify_todos",
    "parse_todo_line",
    "parse_todos",
    "split_hash",
    "todo_hash",
    "todo_key",
]
