"""
ai-dev-workflow - runtime settings loader.

File: src/ai_dev_workflow/config/settings.py

Purpose
- Resolve tool settings from defaults, the ``settings:`` section of
  ``.ai/config.yaml``, ``AI_DEV_*`` environment variables and CLI flags.

Functional requirements
- Precedence: CLI > env (AI_DEV_) > file > defaults.
- Environment values are coerced to the type of the default.
- Unknown keys and invalid values raise ``SettingsError``.
"""

from __future__ import annotations

import math
import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any, Final, Literal

from ai_dev_workflow.config.merge import merge_all
from ai_dev_workflow.constants import DEFAULT_COVERAGE_THRESHOLD, PROJECT_WORKFLOWS_DIR
from ai_dev_workflow.workflow.model import StepNumbering

ENV_PREFIX: Final[str] = "AI_DEV_"

_BOOLEAN_TRUE: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_BOOLEAN_FALSE: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})
_LOG_LEVELS: Final[frozenset[str]] = frozenset(
    {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
)

_ValueKind = Literal["str", "float", "bool", "numbering"]


class SettingsError(ValueError):
    """Raised when settings cannot be coerced or validated."""


@dataclass(frozen=True, slots=True)
class Settings:
    log_level: str = "WARNING"
    log_to_file: bool = True
    step_numbering: StepNumbering = StepNumbering.POSITIONAL
    workflows_dir: str = PROJECT_WORKFLOWS_DIR.as_posix()
    coverage_threshold: float = DEFAULT_COVERAGE_THRESHOLD

    def with_overrides(self, **overrides: object) -> Settings:
        return load_settings(base=self, cli_overrides=overrides, environ={})


_KINDS: Final[dict[str, _ValueKind]] = {
    "log_level": "str",
    "log_to_file": "bool",
    "step_numbering": "numbering",
    "workflows_dir": "str",
    "coverage_threshold": "float",
}


def load_settings(
    file_settings: Mapping[str, object] | None = None,
    *,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
    base: Settings | None = None,
) -> Settings:
    """Load effective settings with precedence CLI > env > file > defaults."""

    defaults = base if base is not None else Settings()
    env_map = dict(os.environ if environ is None else environ)

    file_payload = dict(file_settings or {})
    _reject_unknown_keys(file_payload, "settings")
    env_payload = _collect_env_overrides(env_map)
    cli_payload = {key: value for key, value in (cli_overrides or {}).items() if value is not None}
    _reject_unknown_keys(cli_payload, "cli override")

    merged = merge_all(({}, file_payload, env_payload, cli_payload))
    values: dict[str, Any] = {}
    for key, raw in merged.items():
        values[key] = _coerce(raw, _KINDS[key], key)
    return replace(defaults, **values)


def _collect_env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for key in sorted(_KINDS):
        env_name = _env_name_for_key(key)
        raw = environ.get(env_name)
        if raw is None:
            continue
        overrides[key] = _coerce_env(raw, _KINDS[key], env_name)
    return overrides


def _coerce_env(raw: str, kind: _ValueKind, env_name: str) -> object:
    value = raw.strip()
    if kind == "bool":
        lowered = value.lower()
        if lowered in _BOOLEAN_TRUE:
            return True
        if lowered in _BOOLEAN_FALSE:
            return False
        raise SettingsError(f"{env_name} must be a boolean (true/false/1/0/yes/no/on/off)")
    if kind == "float":
        try:
            return float(value)
        except ValueError as exc:
            raise SettingsError(f"{env_name} must be a number") from exc
    return value


def _coerce(value: object, kind: _ValueKind, key: str) -> object:
    if kind == "bool":
        if not isinstance(value, bool):
            raise SettingsError(f"{key} must be a boolean, got {type(value).__name__}")
        return value
    if kind == "float":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise SettingsError(f"{key} must be a number, got {type(value).__name__}")
        parsed = float(value)
        if not math.isfinite(parsed) or not 0.0 <= parsed <= 100.0:
            raise SettingsError(f"{key} must be between 0 and 100")
        return parsed
    if kind == "numbering":
        try:
            return StepNumbering(value)
        except ValueError as exc:
            expected = ", ".join(item.value for item in StepNumbering)
            raise SettingsError(f"{key} must be one of: {expected}") from exc

    if not isinstance(value, str) or not value.strip():
        raise SettingsError(f"{key} must be a non-empty string")
    parsed_text = value.strip()
    if key == "log_level":
        parsed_text = parsed_text.upper()
        if parsed_text not in _LOG_LEVELS:
            expected = ", ".join(sorted(_LOG_LEVELS))
            raise SettingsError(f"log_level must be one of: {expected}")
    return parsed_text


def _reject_unknown_keys(payload: Mapping[str, object], source: str) -> None:
    unknown = sorted(key for key in payload if key not in _KINDS)
    if unknown:
        raise SettingsError(f"unknown {source} key(s): {', '.join(unknown)}")


def _env_name_for_key(key: str) -> str:
    return ENV_PREFIX + key.upper()


__all__ = ["ENV_PREFIX", "Settings", "SettingsError", "load_settings"]
