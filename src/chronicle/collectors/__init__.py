"""Observation of the three source kinds."""

from .git import GitCommandError, GitNotFoundError, GitObserver, GitResult, GitRunner
from .notes import extract_excerpt, is_markdown_file, scan_notes
from .todo import TodoFile, read_todo_file

__all__ = [
    "GitCommandError",
    "GitNotFoundError",
    "GitObserver",
    "GitResult",
    "GitRunner",
    "TodoFile",
    "extract_excerpt",
    "is_markdown_file",
    "read_todo_file",
    "scan_notes",
]
