"""
ai-dev-workflow - context/history log.

File: src/ai_dev_workflow/context/store.py

Purpose
- Persist the current-step pointer, the bounded command history and
  free-form ``data`` in ``.ai/context.yaml``.
- Render the context for ``ai-dev context``.

Functional requirements
- First load of a missing file writes and returns the empty context.
- History holds at most ``HISTORY_LIMIT`` entries after every write; overflow
  drops the oldest entries.
- OS failures are reported as ``ContextStoreError`` with a load/save prefix;
  YAML parse errors propagate unchanged.

Non-functional requirements
- No locking: concurrent writers race and the last ``os.replace`` wins.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, Final, Protocol

from ai_dev_workflow.constants import CONTEXT_PATH, HISTORY_LIMIT, HISTORY_PREVIEW
from ai_dev_workflow.context.models import (
    ContextData,
    ContextFormatError,
    EntryStatus,
    HistoryEntry,
    utc_timestamp,
)
from ai_dev_workflow.observability import get_logger
from ai_dev_workflow.persistence import load_yaml_file, save_yaml_file

_STATUS_MARKS: Final[dict[EntryStatus, str]] = {
    EntryStatus.SUCCESS: "OK",
    EntryStatus.ERROR: "ERR",
}
_HISTORY_TIP: Final[str] = "Tip: use --verbose to see the full history and stored data."

Clock = Callable[[], dt.datetime]


class ContextStoreError(OSError):
    """Raised when the context file cannot be read or written."""


class LineSink(Protocol):
    def text(self, line: str) -> None: ...


class ContextStore:
    """Read-modify-write access to ``.ai/context.yaml`` under ``root``."""

    def __init__(
        self,
        root: Path | str,
        *,
        path: Path | str | None = None,
        logger: Any | None = None,
        clock: Clock | None = None,
        history_limit: int = HISTORY_LIMIT,
    ) -> None:
        if history_limit < 1:
            raise ValueError("history_limit must be >= 1")
        self._root = Path(root)
        self._path = Path(path) if path is not None else self._root / CONTEXT_PATH
        self._logger = logger if logger is not None else get_logger(__name__)
        self._clock = clock if clock is not None else _utc_now
        self._history_limit = history_limit

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> ContextData:
        try:
            document = load_yaml_file(self._path, ContextData.empty().to_document())
        except OSError as exc:
            raise ContextStoreError(f"Failed to load context: {exc}") from exc
        return ContextData.from_document(document)

    def save(self, ctx: ContextData) -> None:
        try:
            save_yaml_file(self._path, ctx.to_document())
        except OSError as exc:
            raise ContextStoreError(f"Failed to save context: {exc}") from exc

    def clear(self) -> None:
        self.save(ContextData.empty())
        self._logger.info("context_cleared", path=self._path.as_posix())

    def append_entry(
        self,
        command: str,
        status: EntryStatus | str,
        message: str | None = None,
        args: Sequence[str] | None = None,
    ) -> HistoryEntry:
        """Record one command invocation and return the stored entry."""

        entry = HistoryEntry(
            timestamp=utc_timestamp(self._clock()),
            command=command,
            status=EntryStatus(status),
            message=message,
            args=tuple(args) if args is not None else None,
        )
        ctx = self.load()
        ctx.history.append(entry)
        dropped = max(0, len(ctx.history) - self._history_limit)
        if dropped:
            del ctx.history[:dropped]
        self.save(ctx)
        self._logger.debug(
            "context_entry_appended",
            command=command,
            status=entry.status.value,
            dropped=dropped,
        )
        return entry

    def set_current_step(self, step: str | None) -> ContextData:
        ctx = self.load()
        ctx.current_step = step
        self.save(ctx)
        return ctx

    def set_data(self, key: str, value: Any) -> ContextData:
        ctx = self.load()
        if value is None:
            ctx.data.pop(key, None)
        else:
            ctx.data[key] = value
        self.save(ctx)
        return ctx


def format_context(
    ctx: ContextData,
    *,
    verbose: bool = False,
    preview: int = HISTORY_PREVIEW,
) -> list[str]:
    """Render ``ctx`` as display lines."""

    lines: list[str] = []
    if ctx.current_step:
        lines.append(f"Current step: {ctx.current_step}")

    lines.append("Command history:")
    if not ctx.history:
        lines.append("No command history yet.")
    else:
        shown = ctx.history if verbose else ctx.history[-preview:]
        for entry in shown:
            lines.extend(_format_entry(entry))
        hidden = len(ctx.history) - len(shown)
        if hidden > 0:
            lines.append(f"... and {hidden} more entries")
        if not verbose:
            lines.append(_HISTORY_TIP)

    if verbose:
        lines.append("Context data:")
        if not ctx.data:
            lines.append("  (empty)")
        for key, value in ctx.data.items():
            lines.append(f"  {key}: {value}")
    return lines


def display_context(ctx: ContextData, *, verbose: bool = False, renderer: LineSink) -> None:
    for line in format_context(ctx, verbose=verbose):
        renderer.text(line)


def _format_entry(entry: HistoryEntry) -> list[str]:
    parts = [_STATUS_MARKS[entry.status], entry.command, *(entry.args or ())]
    lines = [f"  {' '.join(parts)} ({entry.timestamp})"]
    if entry.message:
        lines.append(f"    {entry.message}")
    return lines


def _utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


__all__ = [
    "ContextFormatError",
    "ContextStore",
    "ContextStoreError",
    "LineSink",
    "display_context",
    "format_context",
]
