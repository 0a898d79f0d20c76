"""
ai-dev-workflow - project file explorer.

File: src/ai_dev_workflow/guidance/explorer.py

Purpose
- Point an assistant at the files that matter first for a project type, or at
  files matching a user pattern.

Functional requirements
- Priority patterns are the common set followed by the type-specific set.
- Patterns with a ``/`` match the root-relative POSIX path; other patterns
  match the file name.
- Results keep pattern order, are de-duplicated and are sorted within a pattern.
"""

from __future__ import annotations

import fnmatch
import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from ai_dev_workflow.utils.fs import format_size

COMMON_PATTERNS: Final[tuple[str, ...]] = (
    "README.md",
    "package.json",
    "composer.json",
    "requirements.txt",
    ".gitignore",
)
TYPE_PATTERNS: Final[dict[str, tuple[str, ...]]] = {
    "webapp": (
        "src/index.*",
        "src/app.*",
        "public/index.html",
        "src/routes/*",
        "src/components/*",
    ),
    "library": ("src/index.*", "src/lib/*", "tests/*"),
    "cli": ("src/cli.*", "src/commands/*", "bin/*"),
}
_SKIPPED_DIRS: Final[frozenset[str]] = frozenset({".git", "node_modules", "__pycache__"})


@dataclass(frozen=True, slots=True)
class FileMetadata:
    path: str
    size: int
    file_type: str

    def describe(self) -> str:
        return f"{self.path} ({self.file_type}, {format_size(self.size)})"


def priority_patterns(project_type: str | None) -> tuple[str, ...]:
    if not project_type:
        return ()
    return COMMON_PATTERNS + TYPE_PATTERNS.get(project_type, ())


class ProjectExplorer:
    def __init__(self, root: Path) -> None:
        self._root = root

    def find_files(self, pattern: str) -> list[str]:
        match_path = "/" in pattern
        found: list[str] = []
        for relative in self._walk():
            candidate = relative if match_path else relative.rsplit("/", 1)[-1]
            if fnmatch.fnmatchcase(candidate, pattern):
                found.append(relative)
        return sorted(found)

    def find_priority_files(self, project_type: str | None) -> list[str]:
        seen: dict[str, None] = {}
        for pattern in priority_patterns(project_type):
            for relative in self.find_files(pattern):
                seen.setdefault(relative, None)
        return list(seen)

    def metadata(self, relative: str) -> FileMetadata | None:
        path = self._root / relative
        if not path.is_file():
            return None
        suffix = path.suffix.removeprefix(".")
        return FileMetadata(path=relative, size=path.stat().st_size, file_type=suffix or "unknown")

    def _walk(self) -> Iterator[str]:
        for current, dirnames, filenames in os.walk(self._root):
            dirnames[:] = sorted(name for name in dirnames if name not in _SKIPPED_DIRS)
            base = Path(current)
            for filename in sorted(filenames):
                yield (base / filename).relative_to(self._root).as_posix()


__all__ = [
    "COMMON_PATTERNS",
    "FileMetadata",
    "ProjectExplorer",
    "TYPE_PATTERNS",
    "priority_patterns",
]
