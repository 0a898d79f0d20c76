"""Read-only git queries used by ``status`` and ``review``."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Final

_GIT_TIMEOUT_SECONDS: Final[float] = 5.0
NOT_AVAILABLE: Final[str] = "N/A"


@dataclass(frozen=True, slots=True)
class GitSnapshot:
    branch: str
    last_commit: str
    modified_files: tuple[str, ...]


def run_git(root: Path, *args: str) -> str | None:
    """Return stdout of ``git <args>`` in ``root``, or ``None`` when git fails."""

    try:
        completed = subprocess.run(
            ["git", *args],
            cwd=root,
            capture_output=True,
            text=True,
            timeout=_GIT_TIMEOUT_SECONDS,
            check=False,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired, OSError):
        return None
    if completed.returncode != 0:
        return None
    return completed.stdout


def git_snapshot(root: Path) -> GitSnapshot:
    branch = run_git(root, "branch", "--show-current")
    last_commit = run_git(root, "log", "-1", "--oneline")
    porcelain = run_git(root, "status", "--porcelain")
    if branch is None or last_commit is None or porcelain is None:
        return GitSnapshot(branch=NOT_AVAILABLE, last_commit=NOT_AVAILABLE, modified_files=())
    return GitSnapshot(
        branch=branch.strip() or NOT_AVAILABLE,
        last_commit=last_commit.strip() or NOT_AVAILABLE,
        modified_files=tuple(line for line in porcelain.splitlines() if line.strip()),
    )


def staged_files(root: Path) -> list[str] | None:
    """Files staged for commit; ``None`` outside a git repository."""

    output = run_git(root, "diff", "--cached", "--name-only")
    if output is None:
        return None
    return [line for line in output.splitlines() if line.strip()]


__all__ = ["GitSnapshot", "NOT_AVAILABLE", "git_snapshot", "run_git", "staged_files"]
