"""Domain models for observed and classified activity."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class ChangeKind(str, Enum):
    """Classification of an observed item relative to the previous run."""

    NEW = "New"
    MODIFIED = "Modified"
    UNCHANGED = "Unchanged"


class TodoStatus(str, Enum):
    """Checklist item status; the values appear verbatim in stored hashes."""

    PENDING = "Pending"
    DONE = "Done"
    IN_PROGRESS = "InProgress"


@dataclass(slots=True)
class Commit:
    hash: str
    message: str
    author: str
    timestamp: datetime
    files: list[str] = field(default_factory=list)


@dataclass(slots=True)
class ObservedBranch:
    """A local branch as read from the repository, before classification."""

    name: str
    commits: list[Commit] = field(default_factory=list)
    ahead: int = 0
    behind: int = 0


@dataclass(slots=True)
class RepositoryObservation:
    path: str
    name: str
    default_branch: str
    branches: list[ObservedBranch] = field(default_factory=list)


@dataclass(slots=True)
class Branch:
    name: str
    change: ChangeKind
    ahead: int
    behind: int
    commits: list[Commit] = field(default_factory=list)


@dataclass(slots=True)
class Repository:
    path: str
    name: str
    default_branch: str
    branches: list[Branch] = field(default_factory=list)

    def commit_count(self) -> int:
        return sum(len(branch.commits) for branch in self.branches)

    def files_changed(self) -> int:
        """Number of distinct files touched across all reported commits."""

        return len({path for branch in self.branches for commit in branch.commits for path in commit.files})

    def new_branch_count(self) -> int:
        return sum(1 for branch in self.branches if branch.change is ChangeKind.NEW)


@dataclass(slots=True)
class Todo:
    content: str
    status: TodoStatus
    file: str
    line: int
    change: ChangeKind = ChangeKind.NEW
    previous_status: TodoStatus | None = None

    def was_completed(self) -> bool:
        """True when the item moved to Done during this run."""

        return (
            self.status is TodoStatus.DONE
            and self.previous_status is not None
            and self.previous_status is not TodoStatus.DONE
        )


@dataclass(slots=True)
class Note:
    path: str
    modified_at: datetime
    excerpt: str
    change: ChangeKind = ChangeKind.NEW


@dataclass(slots=True)
class ChronicleStats:
    repo_count: int
    commit_count: int
    new_branch_count: int
    todos_new: int
    todos_completed: int
    notes_count: int


@dataclass(slots=True)
class Chronicle:
    """Everything surfaced by one run, ready for rendering."""

    date: date
    since: datetime
    generated_at: datetime
    repositories: list[Repository] = field(default_factory=list)
    todos: list[Todo] = field(default_factory=list)
    notes: list[Note] = field(default_factory=list)

    def stats(self) -> ChronicleStats:
        return ChronicleStats(
            repo_count=len(self.repositories),
            commit_count=sum(repo.commit_count() for repo in self.repositories),
            new_branch_count=sum(repo.new_branch_count() for repo in self.repositories),
            todos_new=sum(1 for todo in self.todos if todo.change is ChangeKind.NEW),
            todos_completed=sum(1 for todo in self.todos if todo.was_completed()),
            notes_count=len(self.notes),
        )

    def has_activity(self) -> bool:
        return bool(self.repositories or self.todos or self.notes)


__all__ = [
    "Branch",
    "ChangeKind",
    "Chronicle",
    "ChronicleStats",
    "Commit",
    "Note",
    "ObservedBranch",
    "Repository",
    "RepositoryObservation",
    "Todo",
    "TodoStatus",
]
