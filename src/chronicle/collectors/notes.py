"""Markdown notes scanner."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from ..errors import CollectorError
from ..models import Note

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = {".md", ".markdown"}


def is_markdown_file(path: Path) -> bool:
    return Path(path).suffix.lower() in MARKDOWN_EXTENSIONS


def extract_excerpt(content: str, max_chars: int) -> str:
    """Cut ``content`` to ``max_chars``, preferring a sentence or line boundary."""

    if len(content) <= max_chars:
        return content.strip()

    truncated = content[:max_chars]
    period = truncated.rfind(".")
    if period != -1:
        excerpt = truncated[: period + 1]
    else:
        newline = truncated.rfind("\n")
        excerpt = truncated[:newline] if newline != -1 else f"{truncated}..."
    return excerpt.strip()


def scan_notes(directory: Path, since: datetime, *, max_chars: int) -> list[Note]:
    """Markdown files directly inside ``directory`` modified at or after ``since``."""

    directory = Path(directory)
    if not directory.exists():
        raise CollectorError(f"Notes directory does not exist: {directory}")
    if not directory.is_dir():
        raise CollectorError(f"Notes path is not a directory: {directory}")

    try:
        entries = sorted(directory.iterdir())
    except OSError as exc:
        raise CollectorError(f"Cannot list notes directory '{directory}': {exc}") from exc

    notes: list[Note] = []
    for path in entries:
        if path.is_dir() or not is_markdown_file(path):
            continue
        try:
            modified = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
        except OSError:
            logger.debug("Skipping unreadable note metadata", extra={"path": str(path)})
            continue
        if modified < since:
            continue

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise CollectorError(f"Cannot read note file '{path}': {exc}") from exc

        notes.append(
            Note(
                path=str(path),
                modified_at=modified,
                excerpt=extract_excerpt(content, max_chars),
            )
        )
    return notes


__all__ = ["MARKDOWN_EXTENSIONS", "extract_excerpt", "is_markdown_file", "scan_notes"]
