"""Stable constants shared across the workflow tool."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Final

# Project-relative layout of the ``.ai`` directory.
AI_DIR: Final[PurePosixPath] = PurePosixPath(".ai")
CONFIG_PATH: Final[PurePosixPath] = AI_DIR / "config.yaml"
CONFIG_BACKUP_PATH: Final[PurePosixPath] = AI_DIR / "config.yaml.bak"
CONTEXT_PATH: Final[PurePosixPath] = AI_DIR / "context.yaml"
DEFAULT_TEMPLATE_PATH: Final[PurePosixPath] = AI_DIR / "template.yaml"
TEST_RESULTS_PATH: Final[PurePosixPath] = AI_DIR / "test-results.json"
COVERAGE_DIR: Final[PurePosixPath] = AI_DIR / "coverage"
PROJECT_WORKFLOWS_DIR: Final[PurePosixPath] = AI_DIR / "workflows"
STORIES_DIR: Final[PurePosixPath] = AI_DIR / "stories"
CHECKLISTS_DIR: Final[PurePosixPath] = AI_DIR / "checklists"
LOG_DIR: Final[PurePosixPath] = AI_DIR / "logs"
SCAFFOLD_SUBDIRS: Final[tuple[str, ...]] = ("patterns", "templates")

WORKFLOW_GUIDE_PATH: Final[PurePosixPath] = PurePosixPath("docs/guides/ai-workflow.md")
TODO_PATH: Final[PurePosixPath] = PurePosixPath("TODO.md")

# History log bounds.
HISTORY_LIMIT: Final[int] = 100
HISTORY_PREVIEW: Final[int] = 5

PROJECT_TYPES: Final[tuple[str, ...]] = ("webapp", "library", "cli")
IMPLEMENTATION_TYPES: Final[tuple[str, ...]] = ("feature", "bugfix", "refactor")
REVIEW_TYPES: Final[tuple[str, ...]] = ("security", "performance", "style")

DEFAULT_TEST_COMMAND: Final[str] = "jest"
DEFAULT_COVERAGE_THRESHOLD: Final[float] = 80.0

__all__ = [
    "AI_DIR",
    "CHECKLISTS_DIR",
    "CONFIG_BACKUP_PATH",
    "CONFIG_PATH",
    "CONTEXT_PATH",
    "COVERAGE_DIR",
    "DEFAULT_COVERAGE_THRESHOLD",
    "DEFAULT_TEMPLATE_PATH",
    "DEFAULT_TEST_COMMAND",
    "HISTORY_LIMIT",
    "HISTORY_PREVIEW",
    "IMPLEMENTATION_TYPES",
    "LOG_DIR",
    "PROJECT_TYPES",
    "PROJECT_WORKFLOWS_DIR",
    "REVIEW_TYPES",
    "SCAFFOLD_SUBDIRS",
    "STORIES_DIR",
    "TEST_RESULTS_PATH",
    "TODO_PATH",
    "WORKFLOW_GUIDE_PATH",
]
