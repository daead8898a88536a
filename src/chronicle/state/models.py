"""Persisted state models for incremental runs."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

STATE_VERSION = "1.0"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BranchRecord(BaseModel):
    """Last known position of a branch."""

    last_commit: str = Field(..., description="Short hash of the newest commit reported.")
    last_seen: datetime
    first_seen: datetime | None = Field(
        default=None,
        description="When the branch was first reported as new.",
    )


class GitRecord(BaseModel):
    type: Literal["git"] = "git"
    last_checked: datetime
    default_branch: str
    branches: dict[str, BranchRecord] = Field(default_factory=dict)


class TodoRecord(BaseModel):
    type: Literal["todo"] = "todo"
    last_checked: datetime
    last_modified: datetime
    item_hashes: list[str] = Field(
        default_factory=list,
        description="One '{status}:{file}:{line}:{content}' entry per item, in file order.",
    )


class NotesRecord(BaseModel):
    type: Literal["notes"] = "notes"
    last_checked: datetime
    files: dict[str, datetime] = Field(default_factory=dict)


SourceRecord = Annotated[Union[GitRecord, TodoRecord, NotesRecord], Field(discriminator="type")]


class State(BaseModel):
    """Everything remembered between runs, keyed by source path."""

    version: str = STATE_VERSION
    last_updated: datetime = Field(default_factory=_utcnow)
    sources: dict[str, SourceRecord] = Field(default_factory=dict)

    def get_source(self, key: str) -> GitRecord | TodoRecord | NotesRecord | None:
        return self.sources.get(key)

    def update_source(self, key: str, record: GitRecord | TodoRecord | NotesRecord) -> None:
        self.sources[key] = record


__all__ = [
    "BranchRecord",
    "GitRecord",
    "NotesRecord",
    "STATE_VERSION",
    "SourceRecord",
    "State",
    "TodoRecord",
]
