from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from chronicle.errors import StateError
from chronicle.state import (
    BranchRecord,
    GitRecord,
    NotesRecord,
    State,
    StateStore,
    TodoRecord,
)

T0 = datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc)


def _populated_state() -> State:
    state = State(last_updated=T0)
    state.update_source(
        "/work/repo",
        GitRecord(
            last_checked=T0,
            default_branch="main",
            branches={
                "main": BranchRecord(last_commit="abc1234", last_seen=T0, first_seen=None),
                "feature": BranchRecord(last_commit="def5678", last_seen=T0, first_seen=T0),
            },
        ),
    )
    state.update_source(
        "/work/todo.md",
        TodoRecord(
            last_checked=T0,
            last_modified=T0 - timedelta(hours=1),
            item_hashes=["Pending:/work/todo.md:1:Buy milk", "Done:/work/todo.md:2:Call Bob"],
        ),
    )
    state.update_source(
        "/work/notes",
        NotesRecord(last_checked=T0, files={"/work/notes/a.md": T0 - timedelta(minutes=5)}),
    )
    return state


def test_missing_file_loads_empty_default(tmp_path: Path) -> None:
    store = StateStore(tmp_path / "state.json", clock=lambda: T0)

    state = store.load()

    assert state.version == "1.0"
    assert state.sources == {}
    assert state.last_updated == T0
    assert not store.exists()


def test_save_then_load_reproduces_sources(tmp_path: Path) -> None:
    later = T0 + timedelta(days=1)
    store = StateStore(tmp_path / "nested" / "state.json", clock=lambda: later)
    state = _populated_state()

    saved = store.save(state)
    loaded = store.load()

    assert loaded.sources == state.sources
    assert saved.last_updated == later
    assert loaded.last_updated == later
    assert not (tmp_path / "nested" / "state.json.tmp").exists()


def test_saved_file_uses_type_discriminator(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    StateStore(path).save(_populated_state())

    document = json.loads(path.read_text(encoding="utf-8"))

    assert document["version"] == "1.0"
    assert document["sources"]["/work/repo"]["type"] == "git"
    assert document["sources"]["/work/todo.md"]["type"] == "todo"
    assert document["sources"]["/work/notes"]["type"] == "notes"
    assert document["sources"]["/work/repo"]["branches"]["main"]["first_seen"] is None


def test_loaded_records_keep_their_variant(tmp_path: Path) -> None:
    store = StateStore(tmp_path / "state.json")
    store.save(_populated_state())

    loaded = store.load()

    assert isinstance(loaded.get_source("/work/repo"), GitRecord)
    assert isinstance(loaded.get_source("/work/todo.md"), TodoRecord)
    assert isinstance(loaded.get_source("/work/notes"), NotesRecord)
    assert loaded.get_source("/missing") is None


def test_corrupt_file_is_fatal(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(StateError):
        StateStore(path).load()


def test_unknown_variant_is_fatal(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text(
        json.dumps(
            {
                "version": "1.0",
                "last_updated": T0.isoformat(),
                "sources": {"/x": {"type": "svn", "last_checked": T0.isoformat()}},
            }
        ),
        encoding="utf-8",
    )

    with pytest.raises(StateError):
        StateStore(path).load()


def test_reset_deletes_file(tmp_path: Path) -> None:
    store = StateStore(tmp_path / "state.json")
    store.save(_populated_state())

    assert store.reset() is True
    assert not store.exists()
    assert store.reset() is False
    assert store.load().sources == {}


def test_undecodable_file_is_fatal(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_bytes(b'{"version": "1.0", "sources": {"\xff": 1}}')

    with pytest.raises(StateError, match="Cannot read state file"):
        StateStore(path).load()
