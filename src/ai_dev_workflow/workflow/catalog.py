"""
ai-dev-workflow - workflow discovery and composition.

File: src/ai_dev_workflow/workflow/catalog.py

Purpose
- Find workflow documents shipped with the package, stored in the project and
  declared in the project config, under one key space.
- Compose workflow modules into a single configuration document.

Functional requirements
- Discovery is recursive; the key is the relative POSIX path minus the
  ``.yaml``/``.yml`` suffix.
- Shadowing order: packaged < project directory < config ``development_workflow``.
- Raw documents are validated lazily so that one malformed file does not hide
  the rest of the catalog.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Final

from ai_dev_workflow.config.merge import merge_documents
from ai_dev_workflow.persistence import load_yaml_file
from ai_dev_workflow.workflow.model import WorkflowDefinition

_WORKFLOW_SUFFIXES: Final[tuple[str, ...]] = (".yaml", ".yml")


class WorkflowNotFoundError(LookupError):
    """Raised when no catalog source provides the requested workflow."""

    def __init__(self, key: str, available: Sequence[str] = ()) -> None:
        self.key = key
        self.available = tuple(available)
        message = f"Workflow '{key}' not found"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message)


class WorkflowOrigin(str, Enum):
    PACKAGED = "packaged"
    PROJECT = "project"
    CONFIG = "config"


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    key: str
    origin: WorkflowOrigin
    document: Any
    path: Path | None = None

    @property
    def description(self) -> str:
        if isinstance(self.document, Mapping):
            description = self.document.get("description")
            if isinstance(description, str):
                return description
        return ""

    @property
    def tags(self) -> tuple[str, ...]:
        return _string_list(self.document, "tags")

    @property
    def dependencies(self) -> tuple[str, ...]:
        return _string_list(self.document, "dependencies")

    @property
    def configuration(self) -> Mapping[str, Any] | None:
        if isinstance(self.document, Mapping):
            raw = self.document.get("configuration")
            if isinstance(raw, Mapping):
                return raw
        return None

    def definition(self) -> WorkflowDefinition:
        """Validate and return the typed workflow definition."""

        return WorkflowDefinition.from_document(self.document, name=self.key)


class WorkflowCatalog:
    """Merged view over the workflow sources of one project."""

    def __init__(
        self,
        *,
        packaged_dir: Path | None = None,
        project_dir: Path | None = None,
        config_workflows: Mapping[str, Any] | None = None,
    ) -> None:
        self._packaged_dir = packaged_dir
        self._project_dir = project_dir
        self._config_workflows = dict(config_workflows or {})

    def entries(self) -> dict[str, CatalogEntry]:
        """Return every entry keyed by workflow key, sorted by key."""

        merged: dict[str, CatalogEntry] = {}
        if self._packaged_dir is not None:
            for entry in discover_workflows(self._packaged_dir, WorkflowOrigin.PACKAGED):
                merged[entry.key] = entry
        if self._project_dir is not None:
            for entry in discover_workflows(self._project_dir, WorkflowOrigin.PROJECT):
                merged[entry.key] = entry
        for key, document in self._config_workflows.items():
            merged[str(key)] = CatalogEntry(
                key=str(key), origin=WorkflowOrigin.CONFIG, document=document
            )
        return {key: merged[key] for key in sorted(merged)}

    def keys(self) -> tuple[str, ...]:
        return tuple(self.entries())

    def select(self, *, tag: str | None = None) -> list[CatalogEntry]:
        entries = list(self.entries().values())
        if tag is None:
            return entries
        return [entry for entry in entries if tag in entry.tags]

    def get(self, key: str) -> CatalogEntry:
        entries = self.entries()
        normalized = _normalize_key(key)
        if normalized not in entries:
            raise WorkflowNotFoundError(normalized, tuple(entries))
        return entries[normalized]

    def load(self, key: str) -> WorkflowDefinition:
        return self.get(key).definition()

    def compose(self, module_keys: Sequence[str]) -> dict[str, Any]:
        return compose_modules(self.get(key) for key in module_keys)


def discover_workflows(directory: Path, origin: WorkflowOrigin) -> list[CatalogEntry]:
    """Load every workflow document below ``directory`` (recursive, sorted)."""

    if not directory.is_dir():
        return []
    entries: list[CatalogEntry] = []
    for path in sorted(directory.rglob("*")):
        if not path.is_file() or path.suffix not in _WORKFLOW_SUFFIXES:
            continue
        key = path.relative_to(directory).with_suffix("").as_posix()
        entries.append(
            CatalogEntry(key=key, origin=origin, document=load_yaml_file(path), path=path)
        )
    return entries


def compose_modules(entries: Iterable[CatalogEntry]) -> dict[str, Any]:
    """Layer each module's ``configuration`` onto ``{workflows: {include: [...]}}``."""

    selected = list(entries)
    composed: Any = {"workflows": {"include": [entry.key for entry in selected]}}
    for entry in selected:
        configuration = entry.configuration
        if configuration is not None:
            composed = merge_documents(composed, configuration)
    return composed


def _normalize_key(key: str) -> str:
    cleaned = key.strip().replace("\\", "/")
    for suffix in _WORKFLOW_SUFFIXES:
        if cleaned.endswith(suffix):
            return cleaned[: -len(suffix)]
    return cleaned


def _string_list(document: object, field_name: str) -> tuple[str, ...]:
    if not isinstance(document, Mapping):
        return ()
    raw = document.get(field_name)
    if not isinstance(raw, list):
        return ()
    return tuple(str(item) for item in raw)


__all__ = [
    "CatalogEntry",
    "WorkflowCatalog",
    "WorkflowNotFoundError",
    "WorkflowOrigin",
    "compose_modules",
    "discover_workflows",
]
