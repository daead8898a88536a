from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Callable

import pytest

from chronicle.config import get_settings


def _git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        [
            "git",
            "-c",
            "user.name=Test User",
            "-c",
            "user.email=test@example.com",
            "-c",
            "commit.gpgsign=false",
            *args,
        ],
        cwd=str(repo),
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def git() -> Callable[..., str]:
    if shutil.which("git") is None:
        pytest.skip("git executable not available")
    return _git


@pytest.fixture
def make_repo(tmp_path: Path, git) -> Callable[..., Path]:
    """Create a repository on ``main`` with the given commit messages."""

    def factory(name: str = "repo", messages: tuple[str, ...] = ("Initial commit",)) -> Path:
        repo = tmp_path / name
        repo.mkdir()
        git(repo, "init", "--quiet")
        git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
        for index, message in enumerate(messages):
            (repo / "test.txt").write_text(f"content {index}\n", encoding="utf-8")
            git(repo, "add", ".")
            git(repo, "commit", "--quiet", "-m", message)
        return repo

    return factory


@pytest.fixture
def commit_file(git) -> Callable[[Path, str, str, str], None]:
    def commit(repo: Path, name: str, content: str, message: str) -> None:
        (repo / name).write_text(content, encoding="utf-8")
        git(repo, "add", name)
        git(repo, "commit", "--quiet", "-m", message)

    return commit
