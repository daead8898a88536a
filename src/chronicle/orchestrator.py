"""Run orchestration: observe, classify and merge every configured source."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date as date_type
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable

from .classify import classify_branches, classify_notes, classify_todos, parse_todos, select_recent
from .collectors import GitObserver, read_todo_file, scan_notes
from .config import ChronicleConfig
from .errors import CollectorError, ConfigError
from .models import Chronicle, Note, Repository, Todo
from .state import GitRecord, NotesRecord, State, TodoRecord

logger = logging.getLogger(__name__)

SOURCE_KINDS = ("git", "todos", "notes")


def parse_only(value: str | None) -> frozenset[str]:
    """Parse a comma-separated ``--only`` value into source kinds."""

    if value is None or not value.strip():
        return frozenset(SOURCE_KINDS)
    kinds = {part.strip().lower() for part in value.split(",") if part.strip()}
    unknown = kinds - set(SOURCE_KINDS)
    if unknown:
        raise ConfigError(
            f"Unknown source kind(s): {', '.join(sorted(unknown))}; expected {', '.join(SOURCE_KINDS)}"
        )
    return frozenset(kinds)


@dataclass(slots=True)
class SkippedSource:
    kind: str
    path: str
    reason: str


@dataclass(slots=True)
class RunResult:
    chronicle: Chronicle
    state: State
    skipped: list[SkippedSource] = field(default_factory=list)


class ChronicleRunner:
    """Sequence the git, todo and notes classifiers over configured sources.

    Classifiers only ever read the state passed to :meth:`run`; records they
    produce go into a separate copy, one source at a time, so a failing
    source leaves every other source's record intact.
    """

    def __init__(
        self,
        config: ChronicleConfig,
        *,
        git_observer: GitObserver | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config
        self._git = git_observer or GitObserver(
            max_commits=config.limits.max_commits,
            max_changed_files=config.limits.max_changed_files,
        )
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def run(
        self,
        previous: State,
        *,
        since: datetime,
        date: date_type | None = None,
        only: Iterable[str] | None = None,
    ) -> RunResult:
        kinds = frozenset(only) if only is not None else frozenset(SOURCE_KINDS)
        now = self._clock()
        next_state = previous.model_copy(deep=True)
        skipped: list[SkippedSource] = []

        repositories = (
            self._collect_git(previous, next_state, since, now, skipped) if "git" in kinds else []
        )
        todos = self._collect_todos(previous, next_state, now, skipped) if "todos" in kinds else []
        notes = (
            self._collect_notes(previous, next_state, since, now, skipped) if "notes" in kinds else []
        )

        chronicle = Chronicle(
            date=date or now.astimezone().date(),
            since=since,
            generated_at=now,
            repositories=repositories,
            todos=todos,
            notes=notes,
        )
        return RunResult(chronicle=chronicle, state=next_state, skipped=skipped)

    def _skip(self, skipped: list[SkippedSource], kind: str, path: Path, exc: Exception) -> None:
        logger.warning(
            "Skipping %s source '%s': %s",
            kind,
            path,
            exc,
            extra={"source_kind": kind, "source_path": str(path)},
        )
        skipped.append(SkippedSource(kind=kind, path=str(path), reason=str(exc)))

    def _collect_git(
        self,
        previous: State,
        next_state: State,
        since: datetime,
        now: datetime,
        skipped: list[SkippedSource],
    ) -> list[Repository]:
        repositories: list[Repository] = []
        for repo_path in self._config.repos:
            key = str(repo_path)
            try:
                observation = self._git.observe(Path(repo_path), since)
            except (CollectorError, OSError) as exc:
                self._skip(skipped, "git", repo_path, exc)
                continue

            prior = previous.get_source(key)
            result = classify_branches(
                observation.default_branch,
                observation.branches,
                prior if isinstance(prior, GitRecord) else None,
                now=now,
            )
            next_state.update_source(key, result.record)

            if result.branches:
                repositories.append(
                    Repository(
                        path=observation.path,
                        name=observation.name,
                        default_branch=observation.default_branch,
                        branches=result.branches,
                    )
                )
        return repositories

    def _collect_todos(
        self,
        previous: State,
        next_state: State,
        now: datetime,
        skipped: list[SkippedSource],
    ) -> list[Todo]:
        todos: list[Todo] = []
        for todo_path in self._config.todo_files:
            key = str(todo_path)
            try:
                todo_file = read_todo_file(Path(todo_path))
            except (CollectorError, OSError) as exc:
                self._skip(skipped, "todos", todo_path, exc)
                continue

            prior = previous.get_source(key)
            result = classify_todos(
                parse_todos(todo_file.content, todo_file.path),
                prior if isinstance(prior, TodoRecord) else None,
                now=now,
                last_modified=todo_file.modified_at,
            )
            next_state.update_source(key, result.record)
            todos.extend(result.changed)
        return todos

    def _collect_notes(
        self,
        previous: State,
        next_state: State,
        since: datetime,
        now: datetime,
        skipped: list[SkippedSource],
    ) -> list[Note]:
        notes: list[Note] = []
        for notes_dir in self._config.notes_dirs:
            key = str(notes_dir)
            try:
                observed = scan_notes(
                    Path(notes_dir),
                    since,
                    max_chars=self._config.limits.max_chars_per_item,
                )
            except (CollectorError, OSError) as exc:
                self._skip(skipped, "notes", notes_dir, exc)
                continue

            prior = previous.get_source(key)
            result = classify_notes(
                observed,
                prior if isinstance(prior, NotesRecord) else None,
                now=now,
            )
            next_state.update_source(key, result.record)
            notes.extend(result.notes)

        return select_recent(notes, self._config.limits.max_note_files)


__all__ = ["ChronicleRunner", "RunResult", "SOURCE_KINDS", "SkippedSource", "parse_only"]
