"""
ai-dev-workflow - jinja2 rendering for generated guidance documents.

File: src/ai_dev_workflow/guidance/templating.py

Purpose
- Render the markdown templates shipped in ``ai_dev_workflow/templates``.

Functional requirements
- Undefined variables are errors, not empty strings.
- Output is deterministic for the same inputs and always uses ``\\n`` newlines.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ai_dev_workflow.resources import packaged_templates_dir


@lru_cache(maxsize=4)
def template_environment(template_root: Path | None = None) -> Environment:
    root = template_root if template_root is not None else packaged_templates_dir()
    return Environment(
        loader=FileSystemLoader(str(root)),
        undefined=StrictUndefined,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        newline_sequence="\n",
        keep_trailing_newline=True,
    )


def render_template(name: str, /, **variables: Any) -> str:
    """Render packaged template ``name`` with ``variables``."""

    return template_environment().get_template(name).render(**variables)


__all__ = ["render_template", "template_environment"]
