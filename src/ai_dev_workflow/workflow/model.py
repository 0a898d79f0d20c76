"""
ai-dev-workflow - workflow definitions.

File: src/ai_dev_workflow/workflow/model.py

Purpose
- Validate raw workflow documents and expose them as ordered, typed steps.

Functional requirements
- A workflow is a mapping with a string ``description`` and a mapping ``steps``.
- A step is a mapping with a string ``description``; ``command``,
  ``guidelines``, ``files`` and ``steps`` are optional.
- Step order is declaration order. Unknown keys survive a decode/encode cycle.
- Step labels are positional by default; key-prefix numbering is opt-in.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Final

from ai_dev_workflow.persistence import to_plain

_PLACEHOLDER_PATTERN: Final[re.Pattern[str]] = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_.-]*)\}")
_KEY_PREFIX_PATTERN: Final[re.Pattern[str]] = re.compile(r"^(\d+)_")
_STEP_LIST_FIELDS: Final[tuple[str, ...]] = ("guidelines", "files", "steps")
_STEP_KNOWN_FIELDS: Final[frozenset[str]] = frozenset(
    {"description", "command", *_STEP_LIST_FIELDS}
)
_WORKFLOW_KNOWN_FIELDS: Final[frozenset[str]] = frozenset({"description", "steps"})


class WorkflowValidationError(ValueError):
    """Raised when a workflow document is malformed."""

    def __init__(self, workflow: str, message: str, *, step: str | None = None) -> None:
        self.workflow = workflow
        self.step = step
        location = f"workflow {workflow!r}"
        if step is not None:
            location += f", step {step!r}"
        super().__init__(f"invalid {location}: {message}")


class StepNumbering(str, Enum):
    POSITIONAL = "positional"
    KEY_PREFIX = "key_prefix"


def is_workflow_step(document: object) -> bool:
    return isinstance(document, Mapping) and isinstance(document.get("description"), str)


def is_workflow_definition(document: object) -> bool:
    """Structural check: string ``description`` plus a mapping ``steps``."""

    return (
        isinstance(document, Mapping)
        and isinstance(document.get("description"), str)
        and isinstance(document.get("steps"), Mapping)
    )


@dataclass(frozen=True, slots=True)
class WorkflowStep:
    description: str
    command: str | None = None
    guidelines: tuple[str, ...] = ()
    files: tuple[str, ...] = ()
    steps: tuple[str, ...] = ()
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_document(cls, document: object, *, workflow: str, key: str) -> WorkflowStep:
        if not isinstance(document, Mapping):
            raise WorkflowValidationError(
                workflow, f"expected mapping, got {type(document).__name__}", step=key
            )
        description = document.get("description")
        if not isinstance(description, str):
            raise WorkflowValidationError(workflow, "description must be a string", step=key)

        command = document.get("command")
        if command is not None and not isinstance(command, str):
            raise WorkflowValidationError(workflow, "command must be a string", step=key)

        lists: dict[str, tuple[str, ...]] = {}
        for name in _STEP_LIST_FIELDS:
            raw = document.get(name)
            if raw is None:
                lists[name] = ()
                continue
            if not isinstance(raw, list):
                raise WorkflowValidationError(workflow, f"{name} must be a list", step=key)
            lists[name] = tuple(str(item) for item in raw)

        extra = {k: v for k, v in document.items() if k not in _STEP_KNOWN_FIELDS}
        return cls(
            description=description,
            command=command,
            guidelines=lists["guidelines"],
            files=lists["files"],
            steps=lists["steps"],
            extra=extra,
        )

    def to_document(self) -> dict[str, Any]:
        document: dict[str, Any] = {"description": self.description}
        if self.command is not None:
            document["command"] = self.command
        for name in _STEP_LIST_FIELDS:
            values = getattr(self, name)
            if values:
                document[name] = list(values)
        document.update(to_plain(self.extra))
        return document


@dataclass(frozen=True, slots=True)
class WorkflowDefinition:
    name: str
    description: str
    steps: tuple[tuple[str, WorkflowStep], ...]
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_document(cls, document: object, *, name: str) -> WorkflowDefinition:
        if not isinstance(document, Mapping):
            raise WorkflowValidationError(name, f"expected mapping, got {type(document).__name__}")
        description = document.get("description")
        if not isinstance(description, str):
            raise WorkflowValidationError(name, "description must be a string")
        raw_steps = document.get("steps")
        if not isinstance(raw_steps, Mapping):
            raise WorkflowValidationError(name, "steps must be a mapping")

        steps = tuple(
            (str(key), WorkflowStep.from_document(value, workflow=name, key=str(key)))
            for key, value in raw_steps.items()
        )
        extra = {k: v for k, v in document.items() if k not in _WORKFLOW_KNOWN_FIELDS}
        return cls(name=name, description=description, steps=steps, extra=extra)

    @property
    def tags(self) -> tuple[str, ...]:
        raw = self.extra.get("tags")
        if not isinstance(raw, list):
            return ()
        return tuple(str(item) for item in raw)

    @property
    def dependencies(self) -> tuple[str, ...]:
        raw = self.extra.get("dependencies")
        if not isinstance(raw, list):
            return ()
        return tuple(str(item) for item in raw)

    @property
    def configuration(self) -> Mapping[str, Any] | None:
        raw = self.extra.get("configuration")
        return raw if isinstance(raw, Mapping) else None

    def step(self, key: str) -> WorkflowStep:
        for step_key, step in self.steps:
            if step_key == key:
                return step
        raise KeyError(key)

    def to_document(self) -> dict[str, Any]:
        document: dict[str, Any] = {
            "description": self.description,
            "steps": {key: step.to_document() for key, step in self.steps},
        }
        document.update(to_plain(self.extra))
        return document


def step_labels(
    definition: WorkflowDefinition,
    numbering: StepNumbering = StepNumbering.POSITIONAL,
) -> Iterator[tuple[str, str, WorkflowStep]]:
    """Yield ``(label, key, step)`` in declaration order."""

    for position, (key, step) in enumerate(definition.steps, start=1):
        label = str(position)
        if numbering is StepNumbering.KEY_PREFIX:
            match = _KEY_PREFIX_PATTERN.match(key)
            if match is not None:
                label = match.group(1)
        yield label, key, step


def placeholder_names(template: str) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for match in _PLACEHOLDER_PATTERN.finditer(template):
        seen.setdefault(match.group(1), None)
    return tuple(seen)


def substitute_placeholders(template: str, values: Mapping[str, str]) -> str:
    """Replace ``${name}`` with ``values[name]``; unknown names stay verbatim."""

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in values:
            return str(values[name])
        return match.group(0)

    return _PLACEHOLDER_PATTERN.sub(_replace, template)


__all__ = [
    "StepNumbering",
    "WorkflowDefinition",
    "WorkflowStep",
    "WorkflowValidationError",
    "is_workflow_definition",
    "is_workflow_step",
    "placeholder_names",
    "step_labels",
    "substitute_placeholders",
]
