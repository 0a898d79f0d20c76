"""
ai-dev-workflow - placeholder assistant commands.

File: src/ai_dev_workflow/guidance/assistant.py

Purpose
- Dispatch ``story:create``, ``implement`` and ``review`` requests to
  deterministic stand-ins for an AI backend.

Functional requirements
- Unknown command names raise ``UnknownAssistantCommandError``.
- Handlers return display lines; only ``story:create`` touches the filesystem.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final

from ai_dev_workflow.constants import IMPLEMENTATION_TYPES
from ai_dev_workflow.guidance.story import create_story


class UnknownAssistantCommandError(ValueError):
    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__(f"Unknown AI command: {command}")


@dataclass(frozen=True, slots=True)
class AssistantRequest:
    command: str
    root: Path
    options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class AssistantResponse:
    lines: tuple[str, ...]
    artifact: Path | None = None


def _story_create(request: AssistantRequest) -> AssistantResponse:
    title = str(request.options.get("title") or "").strip()
    if not title:
        raise ValueError("story title must not be empty")
    description = str(request.options.get("description") or "")
    story_path = create_story(request.root, title, description)
    relative = story_path.relative_to(request.root).as_posix()
    return AssistantResponse(
        lines=(
            f"Story created at {relative}",
            "Next steps:",
            "1. Review and refine the acceptance criteria",
            f"2. Start implementation with: ai-dev implement feature --story {relative}",
        ),
        artifact=story_path,
    )


def _implement(request: AssistantRequest) -> AssistantResponse:
    kind = str(request.options.get("type") or "feature")
    if kind not in IMPLEMENTATION_TYPES:
        raise ValueError(
            f"unknown implementation type {kind!r}; expected one of: "
            + ", ".join(IMPLEMENTATION_TYPES)
        )
    lines = [
        "AI Implementation Guide",
        f"Analyzing project structure for a {kind}...",
    ]
    story = request.options.get("story")
    if story:
        lines.append(f"Using story: {story}")
    lines.append(f"Run 'ai-dev workflow follow {kind}' for the step-by-step plan.")
    return AssistantResponse(lines=tuple(lines))


def _review(request: AssistantRequest) -> AssistantResponse:
    target = request.options.get("file") or "staged changes"
    review_type = request.options.get("type") or "all"
    return AssistantResponse(lines=(f"AI Code Review ({review_type}): {target}",))


_HANDLERS: Final[dict[str, Callable[[AssistantRequest], AssistantResponse]]] = {
    "story:create": _story_create,
    "implement": _implement,
    "review": _review,
}


def execute_ai_command(
    command: str,
    options: Mapping[str, Any] | None = None,
    *,
    root: Path,
) -> AssistantResponse:
    handler = _HANDLERS.get(command)
    if handler is None:
        raise UnknownAssistantCommandError(command)
    return handler(AssistantRequest(command=command, root=root, options=dict(options or {})))


__all__ = [
    "AssistantRequest",
    "AssistantResponse",
    "UnknownAssistantCommandError",
    "execute_ai_command",
]
