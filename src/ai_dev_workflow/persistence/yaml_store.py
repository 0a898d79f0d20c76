"""
ai-dev-workflow - YAML document store

File: src/ai_dev_workflow/persistence/yaml_store.py

Purpose
- Load and save semantic documents (maps, sequences, scalars) as YAML.
- Recover from a missing file by persisting a caller-supplied default.

Functional requirements
- Output is deterministic: sorted keys, stable indentation, no anchors/aliases.
- Writes create parent directories and replace the target atomically.
- Parse failures propagate unchanged (``yaml.YAMLError``).

Non-functional requirements
- No caching; every call touches the filesystem.
"""

from __future__ import annotations

import copy
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, TypeAlias

import yaml

from ai_dev_workflow.utils.fs import PathLike, atomic_write, ensure_parent

Scalar: TypeAlias = str | int | float | bool | None
Document: TypeAlias = Scalar | list["Document"] | dict[str, "Document"]

_UNLIMITED_WIDTH: Final[int] = sys.maxsize
# Loaders normalize these when written raw, so they are always escaped.
_UNICODE_LINE_BREAKS: Final[frozenset[str]] = frozenset({"\x85", "\u2028", "\u2029"})


@dataclass(frozen=True, slots=True)
class DumpOptions:
    """Serialization knobs for :func:`dump_yaml`."""

    indent: int = 2
    sort_keys: bool = True


DEFAULT_DUMP_OPTIONS: Final[DumpOptions] = DumpOptions()


class _NoAliasDumper(yaml.SafeDumper):
    """Safe dumper that never emits anchors or aliases."""

    def ignore_aliases(self, data: Any) -> bool:
        return True


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    if any(ch in _UNICODE_LINE_BREAKS for ch in data):
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style='"')
    return dumper.represent_str(data)


_NoAliasDumper.add_representer(str, _represent_str)


def load_yaml_file(path: PathLike, default: Document = None) -> Document:
    """Load a YAML document from ``path``.

    When the file does not exist and ``default`` is given, the default is
    written to ``path`` and returned. An empty file yields ``default``.
    Without a default a missing file raises ``FileNotFoundError``.
    """

    target = Path(path)
    try:
        content = target.read_text(encoding="utf-8")
    except FileNotFoundError:
        if default is None:
            raise
        save_yaml_file(target, default)
        return copy.deepcopy(default)

    parsed = yaml.safe_load(content)
    if parsed is None and default is not None:
        return copy.deepcopy(default)
    return parsed


def save_yaml_file(
    path: PathLike,
    document: Document,
    options: DumpOptions | None = None,
) -> None:
    """Serialize ``document`` deterministically and write it atomically."""

    rendered = dump_yaml(document, options)
    target = ensure_parent(path)
    atomic_write(target, rendered)


def dump_yaml(document: object, options: DumpOptions | None = None) -> str:
    """Render ``document`` as block-style YAML text."""

    effective = options if options is not None else DEFAULT_DUMP_OPTIONS
    return yaml.dump(
        to_plain(document),
        Dumper=_NoAliasDumper,
        indent=effective.indent,
        width=_UNLIMITED_WIDTH,
        sort_keys=effective.sort_keys,
        default_flow_style=False,
        allow_unicode=True,
    )


def to_plain(value: object) -> Document:
    """Convert mappings/tuples into plain ``dict``/``list`` documents."""

    if isinstance(value, Mapping):
        return {str(key): to_plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(item) for item in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    raise TypeError(f"unsupported document value of type {type(value).__name__}")


__all__ = [
    "DEFAULT_DUMP_OPTIONS",
    "Document",
    "DumpOptions",
    "Scalar",
    "dump_yaml",
    "load_yaml_file",
    "save_yaml_file",
    "to_plain",
]
