"""
ai-dev-workflow - placeholder code review.

File: src/ai_dev_workflow/guidance/review.py

Purpose
- Select the files to review and produce deterministic review notes per
  review type, plus the project review checklist.

Functional requirements
- Files come from a root-relative glob or, by default, from the git index.
- ``all`` expands to security, performance and style in that order.
- The review checklist lives in ``.ai/templates/review-checklist.md`` and is
  created from the packaged template when missing.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

from ai_dev_workflow.constants import AI_DIR, REVIEW_TYPES
from ai_dev_workflow.context.models import utc_timestamp
from ai_dev_workflow.guidance.templating import render_template
from ai_dev_workflow.utils.fs import atomic_write, ensure_parent, is_within
from ai_dev_workflow.utils.git import staged_files

REVIEW_CHECKLIST_PATH: Final = AI_DIR / "templates" / "review-checklist.md"
REVIEW_CHECKLIST_TEMPLATE: Final[str] = "review-checklist.md.j2"

_FOCUS: Final[dict[str, tuple[str, ...]]] = {
    "security": (
        "exposed secrets",
        "input validation",
        "authentication and authorization paths",
    ),
    "performance": (
        "hot loops and repeated I/O",
        "resource usage",
        "caching opportunities",
    ),
    "style": (
        "project conventions",
        "naming",
        "documentation",
    ),
}


@dataclass(frozen=True, slots=True)
class FileSelection:
    files: tuple[str, ...]
    source: str
    git_available: bool = True


def expand_review_types(review_type: str) -> tuple[str, ...]:
    if review_type == "all":
        return REVIEW_TYPES
    if review_type not in REVIEW_TYPES:
        expected = ", ".join((*REVIEW_TYPES, "all"))
        raise ValueError(f"unknown review type {review_type!r}; expected one of: {expected}")
    return (review_type,)


def select_files(root: Path, pattern: str | None = None) -> FileSelection:
    if pattern:
        matches = sorted(
            path.relative_to(root).as_posix()
            for path in root.glob(pattern)
            if path.is_file() and is_within(path, root)
        )
        return FileSelection(files=tuple(matches), source=f"pattern {pattern}")

    staged = staged_files(root)
    if staged is None:
        return FileSelection(files=(), source="staged changes", git_available=False)
    return FileSelection(files=tuple(staged), source="staged changes")


def review_notes(root: Path, relative: str, review_type: str) -> list[str]:
    """Deterministic notes for one file; the assistant fills in real findings."""

    path = root / relative
    if not path.is_file():
        return [f"Reviewing {relative}... skipped (file no longer exists)"]
    line_count = len(path.read_text(encoding="utf-8", errors="replace").splitlines())
    notes = [f"Reviewing {relative}... {line_count} lines"]
    notes.extend(f"  check {focus}" for focus in _FOCUS[review_type])
    return notes


def ensure_review_checklist(root: Path) -> tuple[Path, bool]:
    """Return the checklist path and whether it was created now."""

    target = root / REVIEW_CHECKLIST_PATH
    if target.is_file():
        return target, False
    ensure_parent(target)
    atomic_write(target, render_template(REVIEW_CHECKLIST_TEMPLATE, created=utc_timestamp()))
    return target, True


__all__ = [
    "FileSelection",
    "REVIEW_CHECKLIST_PATH",
    "REVIEW_CHECKLIST_TEMPLATE",
    "ensure_review_checklist",
    "expand_review_types",
    "review_notes",
    "select_files",
]
