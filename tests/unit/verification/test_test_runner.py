"""
ai-dev-workflow - unit tests for test runner invocation

File: tests/unit/verification/test_test_runner.py

Purpose
- Validate flag mapping and failure reporting without spawning a real test runner.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from ai_dev_workflow.verification import (
    RunnerFailure,
    RunnerOptions,
    build_command_line,
    build_runner_args,
    run_tests,
)


class FakeCommandRunner:
    def __init__(self, exit_code: int = 0) -> None:
        self.exit_code = exit_code
        self.calls: list[tuple[str, Path]] = []

    def run(self, command_line: str, *, cwd: Path) -> int:
        self.calls.append((command_line, cwd))
        return self.exit_code


def test_default_options_add_no_arguments() -> None:
    assert build_runner_args(RunnerOptions()) == []
    assert build_command_line("mocha", RunnerOptions()) == "mocha"


def test_all_flags_map_to_jest_arguments() -> None:
    options = RunnerOptions(files="test.ts", update=True, watch=True, coverage=True, analyze=True)

    assert build_runner_args(options) == [
        "test.ts",
        "--updateSnapshot",
        "--watch",
        "--coverage",
        "--coverageDirectory=.ai/coverage",
        "--json",
        "--outputFile=.ai/test-results.json",
    ]


def test_command_line_quotes_arguments() -> None:
    line = build_command_line("npx jest", RunnerOptions(files="tests/my file.ts"))

    assert line == "npx jest 'tests/my file.ts'"


def test_run_tests_uses_injected_runner(tmp_path: Path) -> None:
    runner = FakeCommandRunner()

    outcome = run_tests(tmp_path, "jest", RunnerOptions(coverage=True), runner=runner)

    assert outcome.exit_code == 0
    assert runner.calls == [("jest --coverage --coverageDirectory=.ai/coverage", tmp_path)]


def test_non_zero_exit_raises_runner_failure(tmp_path: Path) -> None:
    runner = FakeCommandRunner(exit_code=3)

    with pytest.raises(RunnerFailure, match="Tests failed with exit code 3") as excinfo:
        run_tests(tmp_path, "jest", runner=runner)

    assert excinfo.value.exit_code == 3
    assert excinfo.value.command_line == "jest"
