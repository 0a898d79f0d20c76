"""Locations of data files shipped inside the package."""

from __future__ import annotations

from pathlib import Path


def packaged_templates_dir() -> Path:
    return Path(__file__).resolve().parent / "templates"


def packaged_workflows_dir() -> Path:
    return packaged_templates_dir() / "workflows"


def packaged_config_template() -> Path:
    return packaged_templates_dir() / "config.yaml"


__all__ = ["packaged_config_template", "packaged_templates_dir", "packaged_workflows_dir"]
