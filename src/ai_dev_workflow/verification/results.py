"""Summaries of jest ``--json`` output written to ``.ai/test-results.json``."""

from __future__ import annotations

import json
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from ai_dev_workflow.constants import DEFAULT_COVERAGE_THRESHOLD

COVERAGE_METRICS: Final[tuple[tuple[str, str], ...]] = (
    ("statements", "Statement"),
    ("branches", "Branch"),
    ("functions", "Function"),
    ("lines", "Line"),
)


@dataclass(frozen=True, slots=True)
class ResultsSummary:
    total_suites: int
    total_tests: int
    failed_tests: int
    start_time_ms: int | None = None
    coverage: Mapping[str, float] | None = field(default=None)

    def duration_ms(self, now_ms: int | None = None) -> int | None:
        if self.start_time_ms is None:
            return None
        current = now_ms if now_ms is not None else int(time.time() * 1000)
        return max(0, current - self.start_time_ms)


def load_results(path: Path) -> ResultsSummary | None:
    """Parse the results file; ``None`` when it does not exist.

    Malformed JSON raises ``json.JSONDecodeError``.
    """

    if not path.is_file():
        return None
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, Mapping):
        raise ValueError(f"test results must be a JSON object: {path}")
    return summarize(payload)


def summarize(payload: Mapping[str, object]) -> ResultsSummary:
    coverage_raw = payload.get("coverage")
    coverage: dict[str, float] | None = None
    if isinstance(coverage_raw, Mapping):
        coverage = {}
        for metric, _label in COVERAGE_METRICS:
            entry = coverage_raw.get(metric)
            pct = entry.get("pct") if isinstance(entry, Mapping) else None
            coverage[metric] = _as_float(pct)

    start = payload.get("startTime")
    return ResultsSummary(
        total_suites=_as_int(payload.get("numTotalTestSuites")),
        total_tests=_as_int(payload.get("numTotalTests")),
        failed_tests=_as_int(payload.get("numFailedTests")),
        start_time_ms=start if isinstance(start, int) and not isinstance(start, bool) else None,
        coverage=coverage,
    )


def coverage_warnings(
    summary: ResultsSummary,
    threshold: float = DEFAULT_COVERAGE_THRESHOLD,
) -> list[str]:
    if summary.coverage is None:
        return []
    warnings: list[str] = []
    for metric, label in COVERAGE_METRICS:
        if summary.coverage.get(metric, 0.0) < threshold:
            warnings.append(f"{label} coverage is below {threshold:g}%")
    return warnings


def format_summary(summary: ResultsSummary, *, now_ms: int | None = None) -> list[str]:
    duration = summary.duration_ms(now_ms)
    lines = [
        "Test Overview:",
        f"- Total Suites: {summary.total_suites}",
        f"- Total Tests: {summary.total_tests}",
        f"- Failures: {summary.failed_tests}",
        f"- Duration: {duration}ms" if duration is not None else "- Duration: unknown",
    ]
    if summary.coverage is not None:
        lines.append("Coverage Analysis:")
        for metric, _label in COVERAGE_METRICS:
            lines.append(f"- {metric.capitalize()}: {summary.coverage.get(metric, 0.0):g}%")
    return lines


def _as_int(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return value


def _as_float(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


__all__ = [
    "COVERAGE_METRICS",
    "ResultsSummary",
    "coverage_warnings",
    "format_summary",
    "load_results",
    "summarize",
]
