"""State persistence for incremental runs."""

from .models import (
    STATE_VERSION,
    BranchRecord,
    GitRecord,
    NotesRecord,
    SourceRecord,
    State,
    TodoRecord,
)
from .store import StateStore

__all__ = [
    "BranchRecord",
    "GitRecord",
    "NotesRecord",
    "STATE_VERSION",
    "SourceRecord",
    "State",
    "StateStore",
    "TodoRecord",
]
