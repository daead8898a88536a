"""Branch classification against the previous run's record."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from ..models import Branch, ChangeKind, Commit, ObservedBranch
from ..state import BranchRecord, GitRecord


@dataclass(slots=True)
class GitClassification:
    """Branches to report plus the record that replaces the previous one."""

    branches: list[Branch]
    record: GitRecord


def unseen_commits(commits: Sequence[Commit], previous: BranchRecord | None) -> list[Commit]:
    """Return the commits newer than the last one already reported.

    ``commits`` is newest first. When the previously reported commit is not
    part of the window every commit is kept.
    """

    if previous is None:
        return list(commits)
    for index, commit in enumerate(commits):
        if commit.hash == previous.last_commit:
            return list(commits[:index])
    return list(commits)


def classify_branch_change(name: str, prior: GitRecord | None) -> ChangeKind:
    if prior is None or name not in prior.branches:
        return ChangeKind.NEW
    return ChangeKind.MODIFIED


def classify_branches(
    default_branch: str,
    observed: Sequence[ObservedBranch],
    prior: GitRecord | None,
    *,
    now: datetime,
) -> GitClassification:
    """Classify the observed branches of one repository.

    Non-default branches without unseen commits are left out of the report
    but keep their previous record. The default branch is always evaluated
    and recorded; it is reported only when it has unseen commits. Branches
    that no longer exist locally drop out of the record.
    """

    reported: list[Branch] = []
    records: dict[str, BranchRecord] = {}

    for candidate in observed:
        previous = prior.branches.get(candidate.name) if prior is not None else None
        is_default = candidate.name == default_branch
        commits = unseen_commits(candidate.commits, previous)

        if not commits and not is_default:
            if previous is not None:
                records[candidate.name] = previous
            continue

        change = classify_branch_change(candidate.name, prior)
        ahead, behind = (0, 0) if is_default else (candidate.ahead, candidate.behind)
        branch = Branch(
            name=candidate.name,
            change=change,
            ahead=ahead,
            behind=behind,
            commits=commits,
        )
        if commits:
            reported.append(branch)

        if candidate.commits:
            last_commit = candidate.commits[0].hash
        else:
            last_commit = previous.last_commit if previous is not None else ""

        records[candidate.name] = BranchRecord(
            last_commit=last_commit,
            last_seen=now,
            first_seen=now if previous is None else previous.first_seen,
        )

    record = GitRecord(last_checked=now, default_branch=default_branch, branches=records)
    return GitClassification(branches=reported, record=record)


__all__ = ["GitClassification", "classify_branch_change", "classify_branches", "unseen_commits"]
