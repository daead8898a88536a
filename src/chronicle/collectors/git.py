"""Read-only git observation through the git executable."""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from ..errors import CollectorError
from ..models import Commit, ObservedBranch, RepositoryObservation
from .utils import sanitize_environment

logger = logging.getLogger(__name__)

_RECORD_SEP = "\x1e"
_FIELD_SEP = "\x1f"
_LOG_FORMAT = f"{_RECORD_SEP}%H{_FIELD_SEP}%an{_FIELD_SEP}%ct{_FIELD_SEP}%s"
SHORT_HASH_LENGTH = 7
MAX_MESSAGE_LENGTH = 72
FALLBACK_DEFAULT_BRANCH = "main"


class GitCommandError(CollectorError):
    """Raised when a git invocation exits with a failure."""


class GitNotFoundError(CollectorError):
    """Raised when the git executable cannot be located."""


@dataclass(slots=True)
class GitResult:
    """Holds the outcome of a git invocation."""

    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class GitRunner:
    """Execute git commands inside a repository."""

    def __init__(self, executable: Path | None = None) -> None:
        self._executable_path = self._resolve_executable(executable)

    @staticmethod
    def _resolve_executable(explicit: Path | None) -> Path:
        if explicit is not None:
            candidate = Path(explicit)
            if candidate.exists() and candidate.is_file():
                return candidate
            raise GitNotFoundError(f"git executable not found at {candidate}")

        binary = shutil.which("git")
        if binary is None:
            raise GitNotFoundError("git executable not found on PATH")
        return Path(binary)

    @property
    def executable(self) -> Path:
        return self._executable_path

    def run(self, repo: Path, *args: str) -> GitResult:
        cmd = [str(self._executable_path), *args]
        try:
            process = subprocess.run(
                cmd,
                cwd=str(repo),
                capture_output=True,
                env=sanitize_environment(),
                check=False,
            )
        except OSError as exc:
            raise GitCommandError(f"Cannot run git in '{repo}': {exc}") from exc
        return GitResult(
            args=tuple(cmd),
            returncode=process.returncode,
            stdout=process.stdout.decode("utf-8", errors="replace"),
            stderr=process.stderr.decode("utf-8", errors="replace"),
        )

    def check(self, repo: Path, *args: str) -> str:
        """Run git and return stdout, raising on a non-zero exit."""

        result = self.run(repo, *args)
        if not result.ok:
            error_msg = result.stderr.strip() or result.stdout.strip() or f"exit code {result.returncode}"
            raise GitCommandError(f"git {' '.join(args)} failed in '{repo}': {error_msg}")
        return result.stdout


class GitObserver:
    """Observe branches and recent commits of local repositories."""

    def __init__(
        self,
        runner: GitRunner | None = None,
        *,
        max_commits: int = 50,
        max_changed_files: int = 80,
    ) -> None:
        self._runner = runner
        self._max_commits = max_commits
        self._max_changed_files = max_changed_files

    @property
    def runner(self) -> GitRunner:
        if self._runner is None:
            self._runner = GitRunner()
        return self._runner

    def open(self, repo: Path) -> None:
        """Fail early when ``repo`` is not a readable repository."""

        if not repo.is_dir():
            raise CollectorError(f"Cannot open Git repository at '{repo}': not a directory")
        result = self.runner.run(repo, "rev-parse", "--git-dir")
        if not result.ok:
            raise CollectorError(
                f"Cannot open Git repository at '{repo}': {result.stderr.strip() or 'not a git repository'}"
            )

    def default_branch(self, repo: Path) -> str:
        """Name of the branch HEAD points to; ``main`` when HEAD is detached."""

        head = self.runner.run(repo, "rev-parse", "--verify", "--quiet", "HEAD")
        if not head.ok:
            raise CollectorError(f"Failed to get HEAD for {repo}")
        symbolic = self.runner.run(repo, "symbolic-ref", "--quiet", "--short", "HEAD")
        name = symbolic.stdout.strip() if symbolic.ok else ""
        return name or FALLBACK_DEFAULT_BRANCH

    def local_branches(self, repo: Path) -> list[str]:
        output = self.runner.check(repo, "for-each-ref", "--format=%(refname:short)", "refs/heads")
        return [line.strip() for line in output.splitlines() if line.strip()]

    def commits_since(self, repo: Path, branch: str, since: datetime) -> list[Commit]:
        """Walk the branch newest first, stopping at the first commit older than ``since``.

        Files are deduplicated across the branch and capped at
        ``max_changed_files``.
        """

        output = self.runner.check(
            repo,
            "log",
            f"refs/heads/{branch}",
            f"--max-count={self._max_commits}",
            f"--format={_LOG_FORMAT}",
            "--name-only",
            "--no-renames",
            "--diff-merges=first-parent",
            "--",
        )

        commits: list[Commit] = []
        seen_files: set[str] = set()
        for chunk in output.split(_RECORD_SEP):
            if not chunk.strip():
                continue
            header, _, body = chunk.partition("\n")
            fields = header.split(_FIELD_SEP)
            if len(fields) != 4:
                raise GitCommandError(f"Unexpected git log output in '{repo}': {header!r}")
            full_hash, author, epoch, subject = fields
            try:
                timestamp = datetime.fromtimestamp(int(epoch), tz=timezone.utc)
            except ValueError as exc:
                raise GitCommandError(f"Invalid commit timestamp {epoch!r} in '{repo}'") from exc
            if timestamp < since:
                break

            files: list[str] = []
            for path in body.splitlines():
                path = path.strip()
                if not path or len(seen_files) >= self._max_changed_files:
                    continue
                if path not in seen_files:
                    seen_files.add(path)
                    files.append(path)

            commits.append(
                Commit(
                    hash=full_hash[:SHORT_HASH_LENGTH],
                    message=subject[:MAX_MESSAGE_LENGTH],
                    author=author or "Unknown",
                    timestamp=timestamp,
                    files=files,
                )
            )
        return commits

    def ahead_behind(self, repo: Path, base: str, branch: str) -> tuple[int, int]:
        """Commits reachable only from ``branch`` and only from ``base``."""

        output = self.runner.check(
            repo,
            "rev-list",
            "--left-right",
            "--count",
            f"refs/heads/{branch}...refs/heads/{base}",
        )
        parts = output.split()
        if len(parts) != 2:
            raise GitCommandError(f"Unexpected rev-list output in '{repo}': {output!r}")
        return int(parts[0]), int(parts[1])

    def observe(self, repo: Path, since: datetime) -> RepositoryObservation:
        repo = Path(repo)
        self.open(repo)
        default_branch = self.default_branch(repo)

        branches: list[ObservedBranch] = []
        for name in self.local_branches(repo):
            commits = self.commits_since(repo, name, since)
            # Quiet branches are still listed so their records survive the run.
            if name == default_branch or not commits:
                ahead, behind = 0, 0
            else:
                ahead, behind = self.ahead_behind(repo, default_branch, name)
            branches.append(ObservedBranch(name=name, commits=commits, ahead=ahead, behind=behind))

        logger.debug(
            "Observed repository",
            extra={"repo": str(repo), "default_branch": default_branch, "branches": len(branches)},
        )
        return RepositoryObservation(
            path=str(repo),
            name=repo.resolve().name or "unknown",
            default_branch=default_branch,
            branches=branches,
        )


__all__ = [
    "GitCommandError",
    "GitNotFoundError",
    "GitObserver",
    "GitResult",
    "GitRunner",
]
