"""JSON-file persistence for run state."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from ..errors import StateError
from .models import State

logger = logging.getLogger(__name__)


class StateStore:
    """Load, save and reset the state file of a chronicle installation."""

    def __init__(self, path: Path, *, clock: Callable[[], datetime] | None = None) -> None:
        self._path = Path(path)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def load(self) -> State:
        """Return the stored state, or an empty one when no file exists.

        A file that exists but cannot be parsed is an error; nothing is
        recovered from it.
        """

        if not self._path.exists():
            logger.debug("No state file, starting fresh", extra={"path": str(self._path)})
            return State(last_updated=self._clock())

        try:
            raw = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise StateError(f"Cannot read state file '{self._path}': {exc}") from exc

        try:
            document = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StateError(f"Corrupt state file '{self._path}': {exc}") from exc

        try:
            return State.model_validate(document)
        except ValidationError as exc:
            raise StateError(f"Invalid state file '{self._path}': {exc}") from exc

    def save(self, state: State) -> State:
        """Rewrite the whole file atomically and return the state as saved."""

        saved = state.model_copy(update={"last_updated": self._clock()})
        payload = saved.model_dump(mode="json")

        self._path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2, ensure_ascii=False)
            temp_path.replace(self._path)
        except OSError as exc:
            if temp_path.exists():
                temp_path.unlink()
            raise StateError(f"Cannot write state file '{self._path}': {exc}") from exc

        logger.info(
            "State saved",
            extra={"path": str(self._path), "sources": len(saved.sources)},
        )
        return saved

    def reset(self) -> bool:
        """Delete the state file. Returns False when there was nothing to delete."""

        if not self._path.exists():
            return False
        try:
            self._path.unlink()
        except OSError as exc:
            raise StateError(f"Cannot delete state file '{self._path}': {exc}") from exc
        return True


__all__ = ["StateStore"]
