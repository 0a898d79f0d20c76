"""
ai-dev-workflow - interactive workflow walkthrough.

File: src/ai_dev_workflow/workflow/runner.py

Purpose
- Walk a workflow step by step, collecting command placeholder values and
  recording progress in the project context.

Functional requirements
- Steps run in declaration order.
- After each step (except the last) the user confirms before continuing;
  declining pauses the walkthrough without raising.
- Each completed step updates ``currentStep`` and appends a history entry.
"""

from __future__ import annotations

import shlex
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from ai_dev_workflow.context.models import EntryStatus
from ai_dev_workflow.observability import get_logger
from ai_dev_workflow.workflow.model import (
    StepNumbering,
    WorkflowDefinition,
    WorkflowStep,
    step_labels,
    substitute_placeholders,
)

if TYPE_CHECKING:
    from ai_dev_workflow.context.store import ContextStore

CommandHandler = Callable[[str, Mapping[str, str]], None]


class Prompter(Protocol):
    def ask(self, message: str) -> str: ...

    def confirm(self, message: str, *, default: bool = True) -> bool: ...


class Renderer(Protocol):
    def text(self, line: str) -> None: ...

    def section(self, title: str) -> None: ...

    def items(self, entries: list[str], *, prefix: str = "- ") -> None: ...

    def warning(self, text: str) -> None: ...


@dataclass(frozen=True, slots=True)
class FollowResult:
    workflow: str
    completed: tuple[str, ...]
    paused: bool

    @property
    def finished(self) -> bool:
        return not self.paused


def parse_assignments(raw: str) -> tuple[dict[str, str], tuple[str, ...]]:
    """Split ``name=value`` tokens; return the assignments and the rejected tokens.

    An answer that cannot be tokenized (an unbalanced quote) is rejected whole.
    """

    try:
        tokens = shlex.split(raw)
    except ValueError:
        return {}, (raw.strip(),)

    values: dict[str, str] = {}
    rejected: list[str] = []
    for token in tokens:
        name, sep, value = token.partition("=")
        if not sep or not name:
            rejected.append(token)
            continue
        values[name] = value
    return values, tuple(rejected)


class WorkflowRunner:
    """Drive one interactive walkthrough of ``definition``."""

    def __init__(
        self,
        definition: WorkflowDefinition,
        *,
        renderer: Renderer,
        prompter: Prompter,
        context_store: ContextStore | None = None,
        numbering: StepNumbering = StepNumbering.POSITIONAL,
        on_command: CommandHandler | None = None,
        logger: Any | None = None,
    ) -> None:
        self._definition = definition
        self._renderer = renderer
        self._prompter = prompter
        self._context_store = context_store
        self._numbering = numbering
        self._on_command = on_command
        self._logger = logger if logger is not None else get_logger(__name__)

    def follow(self, *, feature: str | None = None) -> FollowResult:
        definition = self._definition
        self._renderer.text(f"Starting {definition.name} workflow: {definition.description}")
        if feature:
            self._renderer.text(f"Feature: {feature}")

        labelled = list(step_labels(definition, self._numbering))
        completed: list[str] = []
        for index, (label, key, step) in enumerate(labelled):
            self._run_step(label, key, step, feature=feature)
            completed.append(key)
            self._record(label, key, step)

            is_last = index == len(labelled) - 1
            if not is_last and not self._prompter.confirm("Continue to next step?", default=True):
                self._renderer.text("Workflow paused. Resume when ready.")
                self._logger.info(
                    "workflow_paused", workflow=definition.name, completed_steps=len(completed)
                )
                return FollowResult(definition.name, tuple(completed), paused=True)

        self._renderer.text("Workflow completed!")
        return FollowResult(definition.name, tuple(completed), paused=False)

    def _run_step(self, label: str, key: str, step: WorkflowStep, *, feature: str | None) -> None:
        self._renderer.section(f"Step {label} ({key}): {step.description}")

        if step.command:
            answer = self._prompter.ask(
                f"Enter values for command: {step.command}\n"
                "(name=value pairs, press Enter to skip)"
            ).strip()
            values: dict[str, str] = {"feature": feature} if feature else {}
            if answer:
                parsed, rejected = parse_assignments(answer)
                for token in rejected:
                    self._renderer.warning(f"ignored {token!r}; expected name=value")
                values.update(parsed)
            if answer or values:
                resolved = substitute_placeholders(step.command, values)
                self._renderer.text(f"  Command: {resolved}")
                if self._on_command is not None:
                    self._on_command(resolved, values)

        if step.guidelines:
            self._renderer.text("  Guidelines:")
            self._renderer.items(list(step.guidelines))
        if step.files:
            self._renderer.text("  Files to review:")
            self._renderer.items(list(step.files))
        if step.steps:
            self._renderer.text("  Sub-steps:")
            self._renderer.items(list(step.steps))

    def _record(self, label: str, key: str, step: WorkflowStep) -> None:
        name = self._definition.name
        self._logger.info("workflow_step_completed", workflow=name, step=key)
        if self._context_store is None:
            return
        self._context_store.set_current_step(f"{name}:{key}")
        self._context_store.append_entry(
            "workflow follow",
            EntryStatus.SUCCESS,
            message=f"Completed step {label}: {step.description}",
            args=[name, key],
        )


__all__ = [
    "CommandHandler",
    "FollowResult",
    "Prompter",
    "WorkflowRunner",
    "parse_assignments",
]
