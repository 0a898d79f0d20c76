"""
ai-dev-workflow - context and history value types.

File: src/ai_dev_workflow/context/models.py

Purpose
- Typed views of ``.ai/context.yaml``: the current-step pointer, the
  bounded command history and the free-form ``data`` mapping.

Functional requirements
- Decode from and encode to plain YAML documents.
- Optional history fields are omitted from the document when unset.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ai_dev_workflow.persistence import to_plain


class EntryStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class ContextFormatError(ValueError):
    """Raised when the context document does not have the expected shape."""


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """One recorded command invocation."""

    timestamp: str
    command: str
    status: EntryStatus
    message: str | None = None
    args: tuple[str, ...] | None = None

    def to_document(self) -> dict[str, Any]:
        document: dict[str, Any] = {
            "timestamp": self.timestamp,
            "command": self.command,
            "status": self.status.value,
        }
        if self.message is not None:
            document["message"] = self.message
        if self.args is not None:
            document["args"] = list(self.args)
        return document

    @classmethod
    def from_document(cls, document: object, *, index: int) -> HistoryEntry:
        path = f"history[{index}]"
        if not isinstance(document, Mapping):
            raise ContextFormatError(f"{path}: expected mapping, got {type(document).__name__}")

        command = document.get("command")
        if not isinstance(command, str):
            raise ContextFormatError(f"{path}.command: expected string")

        raw_status = document.get("status")
        try:
            status = EntryStatus(raw_status)
        except ValueError as exc:
            raise ContextFormatError(
                f"{path}.status: expected 'success' or 'error', got {raw_status!r}"
            ) from exc

        message = document.get("message")
        if message is not None and not isinstance(message, str):
            message = str(message)

        raw_args = document.get("args")
        args: tuple[str, ...] | None = None
        if raw_args is not None:
            if not isinstance(raw_args, Sequence) or isinstance(raw_args, str):
                raise ContextFormatError(f"{path}.args: expected list of strings")
            args = tuple(str(item) for item in raw_args)

        return cls(
            timestamp=_timestamp_text(document.get("timestamp")),
            command=command,
            status=status,
            message=message,
            args=args,
        )


@dataclass(slots=True)
class ContextData:
    """Mutable working copy of the persisted context."""

    history: list[HistoryEntry] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)
    current_step: str | None = None

    @classmethod
    def empty(cls) -> ContextData:
        return cls()

    def to_document(self) -> dict[str, Any]:
        document: dict[str, Any] = {
            "history": [entry.to_document() for entry in self.history],
            "data": to_plain(self.data),
        }
        if self.current_step is not None:
            document["currentStep"] = self.current_step
        return document

    @classmethod
    def from_document(cls, document: object) -> ContextData:
        if not isinstance(document, Mapping):
            raise ContextFormatError(
                f"context root must be a mapping, got {type(document).__name__}"
            )

        raw_history = document.get("history") or []
        if not isinstance(raw_history, list):
            raise ContextFormatError("history: expected list")
        history = [
            HistoryEntry.from_document(item, index=index) for index, item in enumerate(raw_history)
        ]

        raw_data = document.get("data") or {}
        if not isinstance(raw_data, Mapping):
            raise ContextFormatError("data: expected mapping")

        current_step = document.get("currentStep")
        if current_step is not None and not isinstance(current_step, str):
            current_step = str(current_step)

        return cls(
            history=history,
            data={str(key): value for key, value in raw_data.items()},
            current_step=current_step,
        )


def utc_timestamp(now: dt.datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""

    moment = now if now is not None else dt.datetime.now(dt.timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=dt.timezone.utc)
    moment = moment.astimezone(dt.timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _timestamp_text(value: object) -> str:
    # Hand-edited files may hold unquoted timestamps that YAML parses to datetimes.
    if isinstance(value, dt.datetime):
        return utc_timestamp(value)
    if value is None:
        return ""
    return str(value)


__all__ = [
    "ContextData",
    "ContextFormatError",
    "EntryStatus",
    "HistoryEntry",
    "utc_timestamp",
]
