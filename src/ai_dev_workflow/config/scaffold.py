"""
ai-dev-workflow - project initialization.

File: src/ai_dev_workflow/config/scaffold.py

Purpose
- Create the ``.ai`` directory layout and write the first ``config.yaml`` from
  the packaged template layered with the user's answers.

Functional requirements
- An existing config is never replaced unless ``force`` is set.
- Answers are merged onto the template's ``project`` section so template keys
  the user did not answer survive.
- The written config passes schema validation; an invalid template writes nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ai_dev_workflow.config.merge import merge_documents
from ai_dev_workflow.config.schema import assert_valid_config
from ai_dev_workflow.constants import AI_DIR, CONFIG_PATH, PROJECT_TYPES, SCAFFOLD_SUBDIRS
from ai_dev_workflow.persistence import load_yaml_file, save_yaml_file
from ai_dev_workflow.resources import packaged_config_template


class ConfigExistsError(FileExistsError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"{path} already exists; pass --force to overwrite it")


@dataclass(frozen=True, slots=True)
class ProjectAnswers:
    name: str
    type: str
    description: str

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("project name must not be empty")
        if self.type not in PROJECT_TYPES:
            raise ValueError(
                f"unknown project type {self.type!r}; expected one of: {', '.join(PROJECT_TYPES)}"
            )

    def to_overlay(self) -> dict[str, Any]:
        return {
            "project": {"name": self.name, "type": self.type, "description": self.description},
        }


def initialize_project(
    root: Path,
    answers: ProjectAnswers,
    *,
    force: bool = False,
    template_path: Path | None = None,
) -> Path:
    """Scaffold ``.ai`` under ``root`` and return the written config path."""

    config_path = root / CONFIG_PATH
    if config_path.exists() and not force:
        raise ConfigExistsError(config_path)

    template = load_yaml_file(template_path or packaged_config_template())
    document = assert_valid_config(merge_documents(template, answers.to_overlay()))

    ai_dir = root / AI_DIR
    for subdir in SCAFFOLD_SUBDIRS:
        (ai_dir / subdir).mkdir(parents=True, exist_ok=True)
    save_yaml_file(config_path, document)
    return config_path


__all__ = ["ConfigExistsError", "ProjectAnswers", "initialize_project"]
