"""
ai-dev-workflow - external test runner invocation.

File: src/ai_dev_workflow/verification/test_runner.py

Purpose
- Translate ``ai-dev test`` flags into arguments for the project's test
  command (jest by default) and run it with inherited stdio.

Functional requirements
- Flag mapping: ``--updateSnapshot``, ``--watch``,
  ``--coverage --coverageDirectory=.ai/coverage`` and
  ``--json --outputFile=.ai/test-results.json``.
- A non-zero exit raises ``RunnerFailure`` carrying the exit code.

Non-functional requirements
- One blocking subprocess per invocation; the command runner is injectable.
"""

from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from ai_dev_workflow.constants import COVERAGE_DIR, TEST_RESULTS_PATH
from ai_dev_workflow.observability import get_logger


class RunnerFailure(RuntimeError):
    """Raised when the test command exits non-zero."""

    def __init__(self, exit_code: int, command_line: str = "") -> None:
        self.exit_code = exit_code
        self.command_line = command_line
        super().__init__(f"Tests failed with exit code {exit_code}")


@dataclass(frozen=True, slots=True)
class RunnerOptions:
    files: str | None = None
    update: bool = False
    watch: bool = False
    coverage: bool = False
    analyze: bool = False


@dataclass(frozen=True, slots=True)
class RunOutcome:
    command_line: str
    exit_code: int


class CommandRunner(Protocol):
    def run(self, command_line: str, *, cwd: Path) -> int: ...


class ShellCommandRunner:
    """Default runner: the command line goes through the shell, stdio is inherited."""

    def run(self, command_line: str, *, cwd: Path) -> int:
        completed = subprocess.run(command_line, shell=True, cwd=cwd, check=False)
        return completed.returncode


def build_runner_args(options: RunnerOptions) -> list[str]:
    args: list[str] = []
    if options.files:
        args.append(options.files)
    if options.update:
        args.append("--updateSnapshot")
    if options.watch:
        args.append("--watch")
    if options.coverage:
        args.extend(["--coverage", f"--coverageDirectory={COVERAGE_DIR.as_posix()}"])
    if options.analyze:
        args.extend(["--json", f"--outputFile={TEST_RESULTS_PATH.as_posix()}"])
    return args


def build_command_line(test_command: str, options: RunnerOptions) -> str:
    args = build_runner_args(options)
    if not args:
        return test_command
    return f"{test_command} {shlex.join(args)}"


def run_tests(
    root: Path,
    test_command: str,
    options: RunnerOptions | None = None,
    *,
    runner: CommandRunner | None = None,
    logger: Any | None = None,
) -> RunOutcome:
    """Run ``test_command`` in ``root``; raise ``RunnerFailure`` on a non-zero exit."""

    effective = options if options is not None else RunnerOptions()
    active_runner = runner if runner is not None else ShellCommandRunner()
    log = logger if logger is not None else get_logger(__name__)

    command_line = build_command_line(test_command, effective)
    log.info("test_runner_started", command_line=command_line)
    exit_code = active_runner.run(command_line, cwd=root)
    log.info("test_runner_finished", command_line=command_line, exit_code=exit_code)
    if exit_code != 0:
        raise RunnerFailure(exit_code, command_line)
    return RunOutcome(command_line=command_line, exit_code=exit_code)


__all__ = [
    "CommandRunner",
    "RunOutcome",
    "RunnerFailure",
    "RunnerOptions",
    "ShellCommandRunner",
    "build_command_line",
    "build_runner_args",
    "run_tests",
]
