"""Test runner invocation and result analysis."""

from ai_dev_workflow.verification.results import (
    ResultsSummary,
    coverage_warnings,
    format_summary,
    load_results,
)
from ai_dev_workflow.verification.test_runner import (
    RunnerFailure,
    RunnerOptions,
    RunOutcome,
    build_command_line,
    build_runner_args,
    run_tests,
)

__all__ = [
    "ResultsSummary",
    "RunOutcome",
    "RunnerFailure",
    "RunnerOptions",
    "build_command_line",
    "build_runner_args",
    "coverage_warnings",
    "format_summary",
    "load_results",
    "run_tests",
]
