"""Output rendering for the ai-dev CLI.

File: src/ai_dev_workflow/ui/render.py

Purpose
- Provide a thin rendering layer for CLI output.
- Keep every command's output plain, line-oriented and deterministic.

Functional requirements
- Plain-text rendering must always work without external dependencies.
- All public methods must be safe to call in any environment.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from collections.abc import Sequence


class CLIRenderer:
    """Thin CLI output renderer writing to stdout (or an injected stream)."""

    def __init__(self, *, verbose: bool = False, stream: TextIO | None = None) -> None:
        self.verbose = verbose
        self._stream = stream

    def _emit(self, line: str = "") -> None:
        print(line, file=self._stream if self._stream is not None else sys.stdout)

    def kv(self, key: str, value: object) -> None:
        """Print a key: value pair."""

        self._emit(f"{key}: {value}")

    def text(self, line: str) -> None:
        self._emit(line)

    def section(self, title: str) -> None:
        """Print a section header with a preceding blank line."""

        self._emit(f"\n{title}")

    def warning(self, text: str) -> None:
        self._emit(f"  Warning: {text}")

    def items(self, entries: Sequence[str], *, prefix: str = "- ") -> None:
        """Print a bulleted list."""

        for entry in entries:
            self._emit(f"  {prefix}{entry}")

    def numbered(self, entries: Sequence[str]) -> None:
        for index, entry in enumerate(entries, start=1):
            self._emit(f"  {index}. {entry}")

    def table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[str]],
        *,
        title: str | None = None,
    ) -> None:
        """Print a formatted ASCII table."""

        if not rows:
            return

        col_count = len(headers)
        widths = [len(h) for h in headers]
        for row in rows:
            for i in range(min(len(row), col_count)):
                widths[i] = max(widths[i], len(str(row[i])))

        def _pad(cells: Sequence[str]) -> str:
            parts: list[str] = []
            for i in range(col_count):
                cell = str(cells[i]) if i < len(cells) else ""
                parts.append(cell.ljust(widths[i]))
            return "  ".join(parts).rstrip()

        if title:
            self.section(title)
        self._emit(f"  {_pad(list(headers))}")
        self._emit(f"  {'  '.join('-' * w for w in widths)}")
        for row in rows:
            self._emit(f"  {_pad(list(row))}")

    def next_steps(self, steps: Sequence[str]) -> None:
        """Print actionable next-step hints."""

        if not steps:
            return
        self.section("Next steps:")
        for step in steps:
            self._emit(f"  $ {step}")

    def ok(self, label: str) -> None:
        self._emit(f"  OK  {label}")

    def fail(self, label: str) -> None:
        self._emit(f"  FAIL  {label}")


def create_renderer(*, verbose: bool = False, stream: TextIO | None = None) -> CLIRenderer:
    """Create a CLI renderer with the given settings."""

    return CLIRenderer(verbose=verbose, stream=stream)


__all__ = ["CLIRenderer", "create_renderer"]
