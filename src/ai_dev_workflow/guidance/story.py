"""User story scaffolding under ``.ai/stories``."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Final

from ai_dev_workflow.constants import STORIES_DIR
from ai_dev_workflow.guidance.templating import render_template
from ai_dev_workflow.utils.fs import atomic_write, ensure_parent

_NON_SLUG = re.compile(r"[^a-z0-9]+")
STORY_TEMPLATE: Final[str] = "story.md.j2"


def sanitize_filename(title: str) -> str:
    """Lower-case slug: runs of non-alphanumerics become ``-``, edges trimmed."""

    slug = _NON_SLUG.sub("-", title.lower()).strip("-")
    if not slug:
        raise ValueError(f"cannot derive a file name from {title!r}")
    return slug


def render_story(title: str, description: str) -> str:
    return render_template(STORY_TEMPLATE, title=title, description=description)


def create_story(root: Path, title: str, description: str) -> Path:
    """Write ``.ai/stories/<slug>.md`` and return its path (overwrites)."""

    target = ensure_parent(root / STORIES_DIR / f"{sanitize_filename(title)}.md")
    atomic_write(target, render_story(title, description))
    return target


__all__ = ["STORY_TEMPLATE", "create_story", "render_story", "sanitize_filename"]
