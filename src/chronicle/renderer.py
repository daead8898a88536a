"""Markdown rendering of a chronicle."""

from __future__ import annotations

from datetime import datetime

from .config import ChronicleConfig
from .models import Branch, ChangeKind, Chronicle, Note, Repository, Todo, TodoStatus

_TIME_FORMAT = "%Y-%m-%d %H:%M:%S UTC"

_STATUS_MARKERS = {
    TodoStatus.PENDING: "[ ]",
    TodoStatus.DONE: "[x]",
    TodoStatus.IN_PROGRESS: "[~]",
}


def _utc(value: datetime) -> str:
    return value.strftime(_TIME_FORMAT)


class Renderer:
    """Turn a :class:`Chronicle` into a Markdown document."""

    def __init__(self, config: ChronicleConfig) -> None:
        self._config = config

    def render(self, chronicle: Chronicle) -> str:
        sections = [self.render_header(chronicle), self.render_summary(chronicle)]
        if chronicle.repositories:
            sections.append(self.render_git_activity(chronicle.repositories))
        if chronicle.todos:
            sections.append(self.render_todos(chronicle.todos))
        if chronicle.notes:
            sections.append(self.render_notes(chronicle.notes))
        return "\n\n".join(sections).rstrip()

    def render_header(self, chronicle: Chronicle) -> str:
        return "\n".join(
            [
                f"# Chronicle: {chronicle.date.strftime('%Y-%m-%d')}",
                "",
                f"**Generated:** {_utc(chronicle.generated_at)}",
                f"**Since:** {_utc(chronicle.since)}",
            ]
        )

    def render_summary(self, chronicle: Chronicle) -> str:
        stats = chronicle.stats()
        rows = [
            ("Repositories", stats.repo_count),
            ("Commits", stats.commit_count),
            ("New Branches", stats.new_branch_count),
            ("New TODOs", stats.todos_new),
            ("Completed TODOs", stats.todos_completed),
            ("Note Updates", stats.notes_count),
        ]
        lines = ["## Summary", "", "| Category | Count |", "|----------|-------|"]
        lines.extend(f"| {label} | {count} |" for label, count in rows)
        return "\n".join(lines)

    def render_git_activity(self, repositories: list[Repository]) -> str:
        blocks = ["## Git Activity"]
        blocks.extend(self.render_repository(repo) for repo in repositories)
        return "\n\n".join(blocks)

    def render_repository(self, repo: Repository) -> str:
        # Default branch first, then busiest branches.
        ordered = sorted(
            repo.branches,
            key=lambda branch: (branch.name != repo.default_branch, -len(branch.commits)),
        )
        blocks = [f"### {repo.name}", f"**Path:** `{repo.path}`"]
        blocks.extend(self.render_branch(branch, repo.default_branch) for branch in ordered)
        return "\n\n".join(blocks)

    def render_branch(self, branch: Branch, default_branch: str) -> str:
        heading = f"#### `{branch.name}`"
        if branch.name != default_branch and (branch.ahead or branch.behind):
            heading += f" (ahead {branch.ahead}, behind {branch.behind})"
        if branch.change is ChangeKind.NEW:
            heading += " ← NEW"

        lines = [heading, ""]
        for commit in branch.commits:
            author = f" — *{commit.author}*" if self._config.display.show_authors else ""
            lines.append(f"- `{commit.hash}` {commit.message}{author}  ")

        files: list[str] = []
        for commit in branch.commits:
            for path in commit.files:
                if path not in files:
                    files.append(path)
        if files:
            lines.append("")
            lines.append(self.render_changed_files(files))
        return "\n".join(lines)

    def render_changed_files(self, files: list[str]) -> str:
        limit = self._config.limits.max_changed_files
        lines = ["<details>", f"<summary>Changed files ({len(files)})</summary>", ""]
        lines.extend(f"- `{path}`" for path in files[:limit])
        if len(files) > limit:
            lines.extend(["", f"*... and {len(files) - limit} more files*"])
        lines.extend(["", "</details>"])
        return "\n".join(lines)

    def render_todos(self, todos: list[Todo]) -> str:
        by_file: dict[str, list[Todo]] = {}
        for todo in todos:
            by_file.setdefault(todo.file, []).append(todo)

        blocks = ["## TODOs"]
        for file, items in by_file.items():
            lines = [f"### `{file}`", ""]
            lines.extend(self.render_todo(todo) for todo in items)
            blocks.append("\n".join(lines))
        return "\n\n".join(blocks)

    def render_todo(self, todo: Todo) -> str:
        if todo.change is ChangeKind.NEW:
            marker = " ← NEW"
        elif todo.change is ChangeKind.MODIFIED:
            marker = " ← DONE" if todo.was_completed() else " ← MODIFIED"
        else:
            marker = ""
        return f"- {_STATUS_MARKERS[todo.status]} {todo.content}{marker}  "

    def render_notes(self, notes: list[Note]) -> str:
        blocks = ["## Notes"]
        blocks.extend(self.render_note(note) for note in notes)
        return "\n\n".join(blocks)

    def render_note(self, note: Note) -> str:
        marker = {ChangeKind.NEW: " ← new", ChangeKind.MODIFIED: " ← modified"}.get(note.change, "")
        return "\n".join(
            [
                f"### `{note.path}`{marker}",
                "",
                f"*Modified: {_utc(note.modified_at)}*",
                "",
                note.excerpt,
            ]
        )


__all__ = ["Renderer"]
