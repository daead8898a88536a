"""Note classification and cross-directory selection."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Sequence

from ..models import ChangeKind, Note
from ..state import NotesRecord


@dataclass(slots=True)
class NotesClassification:
    notes: list[Note]
    record: NotesRecord


def classify_notes(
    notes: Sequence[Note],
    prior: NotesRecord | None,
    *,
    now: datetime,
) -> NotesClassification:
    """Mark each note New or Modified by presence in the prior file map.

    Notes reach this point only when modified since the cutoff, so there is
    no Unchanged outcome.
    """

    known = prior.files if prior is not None else {}
    classified = list(notes)
    for note in classified:
        note.change = ChangeKind.MODIFIED if note.path in known else ChangeKind.NEW

    record = NotesRecord(
        last_checked=now,
        files={note.path: note.modified_at for note in classified},
    )
    return NotesClassification(notes=classified, record=record)


def select_recent(notes: Iterable[Note], limit: int) -> list[Note]:
    """Newest first, truncated across every directory at once."""

    ordered = sorted(notes, key=lambda note: note.modified_at, reverse=True)
    return ordered[:limit]


__all__ = ["NotesClassification", "classify_notes", "select_recent"]
