"""Executable CLI entrypoint for ``ai_dev_workflow``."""

from __future__ import annotations

import sys
import traceback
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ai_dev_workflow.ui.cli import Prompter
    from ai_dev_workflow.verification.test_runner import CommandRunner


class ExitCode(IntEnum):
    """Deterministic process exit-code contract."""

    SUCCESS = 0
    COMMAND_FAILED = 1
    CONFIG_ERROR = 2
    INTERNAL_ERROR = 4


def cli_entrypoint(
    argv: Sequence[str] | None = None,
    *,
    prompter: Prompter | None = None,
    command_runner: CommandRunner | None = None,
) -> int:
    """Entrypoint used by ``python -m ai_dev_workflow`` and the ``ai-dev`` script."""

    try:
        from ai_dev_workflow.ui.cli import run_cli

        return _normalize_exit_code(
            run_cli(argv, prompter=prompter, command_runner=command_runner)
        )
    except SystemExit as exc:
        return _normalize_exit_code(exc.code)
    except KeyboardInterrupt:
        _write_stderr("interrupted")
        return int(ExitCode.COMMAND_FAILED)
    except Exception as exc:  # noqa: BLE001 - CLI boundary normalization.
        exit_code = _route_exception(exc)
        _emit_failure(exc, exit_code)
        return int(exit_code)


def _normalize_exit_code(raw_code: object) -> int:
    if isinstance(raw_code, int) and raw_code in {0, 1, 2, 4}:
        return raw_code
    if raw_code is None:
        return int(ExitCode.SUCCESS)
    if isinstance(raw_code, str) and raw_code.strip():
        _write_stderr(raw_code.strip())
    return int(ExitCode.INTERNAL_ERROR)


def _route_exception(exc: BaseException) -> ExitCode:
    command_error_types = _load_command_error_types()
    config_error_types = _load_config_error_types()

    for item in _iter_exception_chain(exc):
        if isinstance(item, command_error_types):
            return ExitCode.COMMAND_FAILED
        if isinstance(item, config_error_types):
            return ExitCode.CONFIG_ERROR
        if isinstance(
            item,
            (
                FileNotFoundError,
                FileExistsError,
                NotADirectoryError,
                PermissionError,
                ValueError,
                LookupError,
            ),
        ):
            return ExitCode.CONFIG_ERROR
    return ExitCode.INTERNAL_ERROR


def _load_command_error_types() -> tuple[type[BaseException], ...]:
    from ai_dev_workflow.context.store import ContextStoreError
    from ai_dev_workflow.verification.test_runner import RunnerFailure

    return (RunnerFailure, ContextStoreError)


def _load_config_error_types() -> tuple[type[BaseException], ...]:
    import yaml

    from ai_dev_workflow.config.schema import ConfigValidationError
    from ai_dev_workflow.config.settings import SettingsError
    from ai_dev_workflow.context.models import ContextFormatError
    from ai_dev_workflow.workflow.model import WorkflowValidationError

    return (
        yaml.YAMLError,
        ConfigValidationError,
        SettingsError,
        ContextFormatError,
        WorkflowValidationError,
    )


def _iter_exception_chain(exc: BaseException) -> list[BaseException]:
    seen: set[int] = set()
    items: list[BaseException] = []
    current: BaseException | None = exc
    while current is not None:
        marker = id(current)
        if marker in seen:
            break
        seen.add(marker)
        items.append(current)
        if current.__cause__ is not None:
            current = current.__cause__
            continue
        if current.__context__ is not None and not current.__suppress_context__:
            current = current.__context__
            continue
        break
    return items


def _emit_failure(exc: BaseException, exit_code: ExitCode) -> None:
    if exit_code is ExitCode.INTERNAL_ERROR:
        traceback.print_exception(type(exc), exc, exc.__traceback__, file=sys.stderr)
        return
    _write_stderr(f"error: {str(exc).strip() or exc.__class__.__name__}")


def _write_stderr(message: str) -> None:
    sys.stderr.write(message.rstrip("\n") + "\n")


__all__ = ["ExitCode", "cli_entrypoint"]
