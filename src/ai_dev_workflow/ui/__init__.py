"""UI package exports for the CLI, rendering and prompts."""

from ai_dev_workflow.ui.cli import CLIError, build_parser, run_cli
from ai_dev_workflow.ui.prompts import ConsolePrompter
from ai_dev_workflow.ui.render import CLIRenderer, create_renderer

__all__ = [
    "CLIError",
    "CLIRenderer",
    "ConsolePrompter",
    "build_parser",
    "create_renderer",
    "run_cli",
]
