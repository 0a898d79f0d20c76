"""
ai-dev-workflow - per-feature development checklists.

File: src/ai_dev_workflow/guidance/checklist.py

Purpose
- Create, list, show and update markdown checklists in ``.ai/checklists``.

Functional requirements
- ``Status:``, ``Last Updated:`` and the ``## Notes`` body are the editable
  fields; the rest of the document belongs to the user.
- Every update refreshes ``Last Updated:``.
"""

from __future__ import annotations

import datetime as dt
import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from ai_dev_workflow.constants import CHECKLISTS_DIR, DEFAULT_COVERAGE_THRESHOLD
from ai_dev_workflow.context.models import utc_timestamp
from ai_dev_workflow.guidance.story import sanitize_filename
from ai_dev_workflow.guidance.templating import render_template
from ai_dev_workflow.utils.fs import atomic_write, ensure_parent

CHECKLIST_TEMPLATE: Final[str] = "checklist.md.j2"
DEFAULT_STATUS: Final[str] = "In Progress"

_STATUS_LINE = re.compile(r"^Status: .*$", re.MULTILINE)
_UPDATED_LINE = re.compile(r"^Last Updated: .*$", re.MULTILINE)
_NOTES_BLOCK = re.compile(r"^## Notes\n.*$", re.MULTILINE)


class ChecklistNotFoundError(FileNotFoundError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No checklist found for {name}")


@dataclass(frozen=True, slots=True)
class ChecklistSummary:
    name: str
    status: str
    path: Path


class ChecklistManager:
    """File-backed checklists for one project root."""

    def __init__(
        self,
        root: Path,
        *,
        clock: Callable[[], dt.datetime] | None = None,
    ) -> None:
        self._directory = root / CHECKLISTS_DIR
        self._clock = clock if clock is not None else (lambda: dt.datetime.now(dt.timezone.utc))

    def path_for(self, feature: str) -> Path:
        return self._directory / f"{sanitize_filename(feature)}.md"

    def create(
        self,
        feature: str,
        *,
        branch_type: str = "feature",
        coverage_target: float = DEFAULT_COVERAGE_THRESHOLD,
        status: str = DEFAULT_STATUS,
        force: bool = False,
    ) -> Path:
        target = self.path_for(feature)
        if target.exists() and not force:
            raise FileExistsError(f"checklist already exists: {target}")
        now = utc_timestamp(self._clock())
        content = render_template(
            CHECKLIST_TEMPLATE,
            feature_name=feature,
            branch_type=branch_type,
            coverage_target=f"{coverage_target:g}",
            status=status,
            start_date=now,
            last_updated=now,
            notes="",
        )
        ensure_parent(target)
        atomic_write(target, content)
        return target

    def summaries(self) -> list[ChecklistSummary]:
        if not self._directory.is_dir():
            return []
        summaries: list[ChecklistSummary] = []
        for path in sorted(self._directory.glob("*.md")):
            match = _STATUS_LINE.search(path.read_text(encoding="utf-8"))
            status = match.group(0).removeprefix("Status: ").strip() if match else "Unknown"
            summaries.append(ChecklistSummary(name=path.stem, status=status, path=path))
        return summaries

    def show(self, feature: str) -> str:
        return self._read(feature).read_text(encoding="utf-8")

    def update(
        self,
        feature: str,
        *,
        status: str | None = None,
        notes: str | None = None,
    ) -> Path:
        target = self._read(feature)
        content = target.read_text(encoding="utf-8")
        if status is not None:
            content = _STATUS_LINE.sub(lambda _m: f"Status: {status}", content, count=1)
        if notes is not None:
            content = _NOTES_BLOCK.sub(lambda _m: f"## Notes\n{notes}", content, count=1)
        stamp = utc_timestamp(self._clock())
        content = _UPDATED_LINE.sub(lambda _m: f"Last Updated: {stamp}", content, count=1)
        atomic_write(target, content)
        return target

    def _read(self, feature: str) -> Path:
        target = self.path_for(feature)
        if not target.is_file():
            raise ChecklistNotFoundError(feature)
        return target


__all__ = [
    "CHECKLIST_TEMPLATE",
    "ChecklistManager",
    "ChecklistNotFoundError",
    "ChecklistSummary",
    "DEFAULT_STATUS",
]
