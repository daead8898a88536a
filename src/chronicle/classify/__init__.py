"""Change classifiers for the three source kinds."""

from .git import GitClassification, classify_branches
from .notes import NotesClassification, classify_notes, select_recent
from .todo import TodoClassification, classify_todos, parse_todos

__all__ = [
    "GitClassification",
    "NotesClassification",
    "TodoClassification",
    "classify_branches",
    "classify_notes",
    "classify_todos",
    "parse_todos",
    "select_recent",
]
