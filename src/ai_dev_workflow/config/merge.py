"""
ai-dev-workflow - deep merge engine for YAML documents.

File: src/ai_dev_workflow/config/merge.py

Purpose
- Layer one document onto another for config sync, ``init`` answers and
  workflow module composition.

Functional requirements
- ``None`` in the overlay deletes the key (tombstone).
- Lists concatenate base-then-overlay when both sides are lists.
- Mappings recurse; any other overlay value replaces the base value.
- A non-mapping base yields the overlay; a non-mapping overlay yields the base.

Non-functional requirements
- Pure: inputs are never mutated and the result shares no containers with them.
- Overlay key order is preserved; keys only present in the base keep their place.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any


def merge_documents(base: object, overlay: object) -> Any:
    """Deep-merge ``overlay`` onto ``base`` and return a fresh document."""

    if not isinstance(base, Mapping):
        return _deep_copy_value(overlay)
    if not isinstance(overlay, Mapping):
        return _deep_copy_value(base)

    merged = {key: _deep_copy_value(value) for key, value in base.items()}
    _merge_into(merged, base, overlay)
    return merged


def merge_all(documents: Iterable[object]) -> Any:
    """Fold ``documents`` left to right through :func:`merge_documents`."""

    result: Any = None
    first = True
    for document in documents:
        if first:
            result = _deep_copy_value(document)
            first = False
            continue
        result = merge_documents(result, document)
    return result


def _merge_into(
    target: dict[str, Any],
    base: Mapping[str, object],
    overlay: Mapping[str, object],
) -> None:
    for key, value in overlay.items():
        if value is None:
            target.pop(key, None)
            continue
        existing = base.get(key)
        if isinstance(value, list):
            if isinstance(existing, list):
                target[key] = _deep_copy_value(existing) + _deep_copy_value(value)
            else:
                target[key] = _deep_copy_value(value)
        elif isinstance(value, Mapping):
            target[key] = merge_documents(existing, value)
        else:
            target[key] = _deep_copy_value(value)


def _deep_copy_value(value: object) -> Any:
    if isinstance(value, Mapping):
        return {key: _deep_copy_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_deep_copy_value(item) for item in value]
    return value


__all__ = ["merge_all", "merge_documents"]
