from __future__ import annotations

from pathlib import Path

import pytest

from chronicle.cli import find_latest_chronicle, main, parse_since
from chronicle.config import ChronicleConfig, load_config, save_config
from chronicle.errors import ConfigError
from chronicle.state import StateStore


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    todo = tmp_path / "todo.md"
    todo.write_text("- [ ] Ship release\n", encoding="utf-8")
    config = ChronicleConfig(
        output_dir=tmp_path / "out",
        state_file=tmp_path / "state.json",
        repos=[],
        todo_files=[todo],
    )
    save_config(config, tmp_path / "chronicle.yaml")
    return tmp_path


def test_config_init_creates_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)

    main(["config", "init", "--path", "chronicle.yaml"])

    out = capsys.readouterr().out
    assert "Configuration file created: chronicle.yaml" in out
    assert (tmp_path / "chronicles").is_dir()
    assert load_config(tmp_path / "chronicle.yaml") == ChronicleConfig()


def test_config_init_refuses_to_overwrite(tmp_path: Path, capsys) -> None:
    path = tmp_path / "chronicle.yaml"
    path.write_text("repos: []\n", encoding="utf-8")

    main(["config", "init", "--path", str(path)])

    assert "already exists" in capsys.readouterr().err
    assert path.read_text(encoding="utf-8") == "repos: []\n"


def test_gen_writes_chronicle_and_state(workspace: Path, capsys) -> None:
    main(["gen", "-c", str(workspace / "chronicle.yaml"), "--date", "2024-01-15"])

    output = workspace / "out" / "chronicle-2024-01-15.md"
    assert f"Chronicle written to: {output}" in capsys.readouterr().out
    text = output.read_text(encoding="utf-8")
    assert text.startswith("# Chronicle: 2024-01-15")
    assert "- [ ] Ship release ← NEW" in text
    assert StateStore(workspace / "state.json").exists()


def test_second_gen_reports_no_activity(workspace: Path, capsys) -> None:
    config = str(workspace / "chronicle.yaml")
    main(["gen", "-c", config])
    capsys.readouterr()

    main(["gen", "-c", config])

    assert "No activity to report." in capsys.readouterr().out


def test_dry_run_prints_without_saving(workspace: Path, capsys) -> None:
    main(["gen", "-c", str(workspace / "chronicle.yaml"), "--dry-run"])

    out = capsys.readouterr().out
    assert "# Chronicle:" in out
    assert "Ship release" in out
    assert not (workspace / "state.json").exists()
    assert not (workspace / "out").exists()


def test_show_latest(workspace: Path, capsys) -> None:
    out_dir = workspace / "out"
    out_dir.mkdir()
    (out_dir / "chronicle-2024-01-14.md").write_text("older\n", encoding="utf-8")
    (out_dir / "chronicle-2024-01-15.md").write_text("newer\n", encoding="utf-8")
    (out_dir / "notes.md").write_text("ignored\n", encoding="utf-8")

    main(["show", "latest", "-c", str(workspace / "chronicle.yaml")])

    assert capsys.readouterr().out.startswith("newer")


def test_find_latest_without_chronicles(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="No chronicle files found"):
        find_latest_chronicle(tmp_path)


def test_state_reset(workspace: Path, capsys) -> None:
    config = str(workspace / "chronicle.yaml")
    main(["gen", "-c", config])
    capsys.readouterr()

    main(["state", "reset", "-c", config])
    assert "State file deleted" in capsys.readouterr().out

    main(["state", "reset", "-c", config])
    assert "Nothing to reset." in capsys.readouterr().out


def test_errors_exit_with_status_one(tmp_path: Path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["gen", "-c", str(tmp_path / "missing.yaml")])

    assert excinfo.value.code == 1
    assert capsys.readouterr().err.startswith("Error: ")


def test_unknown_only_kind_is_an_error(workspace: Path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["gen", "-c", str(workspace / "chronicle.yaml"), "--only", "svn"])

    assert excinfo.value.code == 1
    assert "Unknown source kind" in capsys.readouterr().err


def test_parse_since() -> None:
    assert parse_since("2024-01-15T10:00:00Z").isoformat() == "2024-01-15T10:00:00+00:00"
    assert parse_since("2024-01-15T12:00:00+02:00").isoformat() == "2024-01-15T10:00:00+00:00"
    assert parse_since("2024-01-15T10:00:00").isoformat() == "2024-01-15T10:00:00+00:00"
    assert parse_since(None) is None
    with pytest.raises(ConfigError):
        parse_since("yesterday")


def test_invalid_log_level_exits_with_status_one(
    workspace: Path, monkeypatch: pytest.MonkeyPatch, capsys
) -> None:
    monkeypatch.setenv("CHRONICLE_LOG_LEVEL", "chatty")

    with pytest.raises(SystemExit) as excinfo:
        main(["state", "reset", "-c", str(workspace / "chronicle.yaml")])

    assert excinfo.value.code == 1
    assert "Invalid environment settings" in capsys.readouterr().err
