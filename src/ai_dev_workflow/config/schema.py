"""
ai-dev-workflow - project configuration schema and validation.

File: src/ai_dev_workflow/config/schema.py

Purpose
- Typed view of ``.ai/config.yaml`` and structural validation of its fields.

Functional requirements
- Required: ``project.name``, ``project.type``, ``project.description``, ``name``
  and a ``development_workflow`` mapping whose entries are workflow definitions.
- Optional: ``test.command`` (string) and a ``settings`` mapping whose
  values must load as runtime settings.
- Validation returns structured issues (dotted path + message) instead of
  failing on the first problem.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final

from ai_dev_workflow.config.settings import SettingsError, load_settings
from ai_dev_workflow.constants import DEFAULT_TEST_COMMAND
from ai_dev_workflow.workflow.model import (
    WorkflowDefinition,
    WorkflowValidationError,
    is_workflow_definition,
)

_REQUIRED_PROJECT_FIELDS: Final[tuple[str, ...]] = ("name", "type", "description")


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid config:\n{rendered}")


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ConfigValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ConfigValidationIssue(path=path, message=message))

    def items(self) -> tuple[ConfigValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


@dataclass(frozen=True, slots=True)
class ProjectConfig:
    """Read-only wrapper over a loaded ``.ai/config.yaml`` document.

    Accessors never raise on missing optional sections; use
    :func:`validate_config` for strict checks.
    """

    document: Mapping[str, Any]

    @property
    def name(self) -> str | None:
        return _optional_str(self.document.get("name"))

    @property
    def project(self) -> Mapping[str, Any]:
        raw = self.document.get("project")
        return raw if isinstance(raw, Mapping) else {}

    @property
    def project_name(self) -> str | None:
        return _optional_str(self.project.get("name"))

    @property
    def project_type(self) -> str | None:
        return _optional_str(self.project.get("type"))

    @property
    def description(self) -> str | None:
        return _optional_str(self.project.get("description"))

    @property
    def test_command(self) -> str:
        test = self.document.get("test")
        if isinstance(test, Mapping):
            command = test.get("command")
            if isinstance(command, str) and command.strip():
                return command.strip()
        return DEFAULT_TEST_COMMAND

    @property
    def settings(self) -> Mapping[str, Any]:
        raw = self.document.get("settings")
        return raw if isinstance(raw, Mapping) else {}

    @property
    def workflows(self) -> Mapping[str, Any]:
        raw = self.document.get("development_workflow")
        return raw if isinstance(raw, Mapping) else {}

    def to_document(self) -> dict[str, Any]:
        return copy.deepcopy(dict(self.document))


def validate_config(config: Mapping[str, object] | object) -> ConfigValidationResult:
    """Validate a project config document and return all issues found."""

    issues = _IssueCollector()
    if not isinstance(config, Mapping):
        issues.add("<root>", f"expected object, got {type(config).__name__}")
        return ConfigValidationResult(config=None, issues=issues.items())

    project = config.get("project")
    if not isinstance(project, Mapping):
        issues.add("project", _missing_or_type(project, "object"))
    else:
        for field_name in _REQUIRED_PROJECT_FIELDS:
            _require_str(
                project.get(field_name),
                f"project.{field_name}",
                issues,
                allow_empty=field_name == "description",
            )

    _require_str(config.get("name"), "name", issues)
    _validate_workflows(config.get("development_workflow"), issues)

    test = config.get("test")
    if test is not None:
        if not isinstance(test, Mapping):
            issues.add("test", f"expected object, got {type(test).__name__}")
        elif "command" in test and not isinstance(test["command"], str):
            issues.add("test.command", f"expected string, got {type(test['command']).__name__}")

    settings = config.get("settings")
    if settings is not None:
        if not isinstance(settings, Mapping):
            issues.add("settings", f"expected object, got {type(settings).__name__}")
        else:
            try:
                load_settings(settings, environ={})
            except SettingsError as exc:
                issues.add("settings", str(exc))

    if issues.has_issues:
        return ConfigValidationResult(config=None, issues=issues.items())
    return ConfigValidationResult(config=copy.deepcopy(dict(config)), issues=())


def assert_valid_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Validate config and raise ``ConfigValidationError`` on failure."""

    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def _validate_workflows(value: object, issues: _IssueCollector) -> None:
    if not isinstance(value, Mapping):
        issues.add("development_workflow", _missing_or_type(value, "object"))
        return
    for name, definition in value.items():
        path = f"development_workflow.{name}"
        if not is_workflow_definition(definition):
            issues.add(path, "expected a workflow with a string description and a steps mapping")
            continue
        try:
            WorkflowDefinition.from_document(definition, name=str(name))
        except WorkflowValidationError as exc:
            step_path = f"{path}.steps.{exc.step}" if exc.step is not None else path
            issues.add(step_path, str(exc))


def _require_str(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    allow_empty: bool = False,
) -> None:
    if not isinstance(value, str):
        issues.add(path, _missing_or_type(value, "string"))
    elif not allow_empty and not value.strip():
        issues.add(path, "must not be empty")


def _missing_or_type(value: object, expected: str) -> str:
    if value is None:
        return "missing required field"
    return f"expected {expected}, got {type(value).__name__}"


def _optional_str(value: object) -> str | None:
    return value if isinstance(value, str) else None


__all__ = [
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "ProjectConfig",
    "assert_valid_config",
    "validate_config",
]
