"""
ai-dev-workflow - unit tests for workflow discovery and composition

File: tests/unit/workflow/test_catalog.py

Purpose
- Validate discovery keys, source shadowing, tag filtering and module composition.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from ai_dev_workflow.persistence import save_yaml_file
from ai_dev_workflow.resources import packaged_workflows_dir
from ai_dev_workflow.workflow import (
    WorkflowCatalog,
    WorkflowNotFoundError,
    WorkflowOrigin,
    WorkflowValidationError,
    discover_workflows,
)


def _workflow(description: str, **extra: object) -> dict[str, object]:
    return {"description": description, "steps": {"1_a": {"description": "A"}}, **extra}


def test_packaged_workflows_are_discovered_recursively() -> None:
    keys = [entry.key for entry in discover_workflows(packaged_workflows_dir(), WorkflowOrigin.PACKAGED)]

    assert {"feature", "bugfix", "refactor", "modules/core/testing", "modules/docs"} <= set(keys)


def test_every_packaged_workflow_is_valid() -> None:
    catalog = WorkflowCatalog(packaged_dir=packaged_workflows_dir())

    for key in catalog.keys():
        assert catalog.load(key).name == key


def test_missing_directory_yields_no_entries(tmp_path: Path) -> None:
    assert discover_workflows(tmp_path / "absent", WorkflowOrigin.PROJECT) == []


def test_shadowing_packaged_then_project_then_config(tmp_path: Path) -> None:
    packaged = tmp_path / "packaged"
    project = tmp_path / "project"
    save_yaml_file(packaged / "feature.yaml", _workflow("packaged feature"))
    save_yaml_file(packaged / "bugfix.yaml", _workflow("packaged bugfix"))
    save_yaml_file(project / "feature.yml", _workflow("project feature"))
    save_yaml_file(project / "bugfix.yaml", _workflow("project bugfix"))
    catalog = WorkflowCatalog(
        packaged_dir=packaged,
        project_dir=project,
        config_workflows={"bugfix": _workflow("config bugfix")},
    )

    entries = catalog.entries()

    assert list(entries) == ["bugfix", "feature"]
    assert entries["feature"].origin is WorkflowOrigin.PROJECT
    assert entries["feature"].description == "project feature"
    assert entries["bugfix"].origin is WorkflowOrigin.CONFIG
    assert entries["bugfix"].description == "config bugfix"


def test_get_normalizes_suffix_and_reports_available(tmp_path: Path) -> None:
    save_yaml_file(tmp_path / "feature.yaml", _workflow("f"))
    catalog = WorkflowCatalog(project_dir=tmp_path)

    assert catalog.get("feature.yaml").key == "feature"
    with pytest.raises(WorkflowNotFoundError, match=r"Workflow 'hotfix' not found \(available: feature\)"):
        catalog.get("hotfix")


def test_malformed_entry_only_fails_when_loaded(tmp_path: Path) -> None:
    save_yaml_file(tmp_path / "good.yaml", _workflow("good"))
    save_yaml_file(tmp_path / "bad.yaml", {"description": "bad", "steps": {"1_x": {}}})
    catalog = WorkflowCatalog(project_dir=tmp_path)

    assert catalog.keys() == ("bad", "good")
    with pytest.raises(WorkflowValidationError, match="workflow 'bad', step '1_x'"):
        catalog.load("bad")


def test_select_filters_by_tag(tmp_path: Path) -> None:
    save_yaml_file(tmp_path / "a.yaml", _workflow("a", tags=["core", "quality"]))
    save_yaml_file(tmp_path / "b.yaml", _workflow("b", tags=["docs"]))
    save_yaml_file(tmp_path / "c.yaml", _workflow("c"))
    catalog = WorkflowCatalog(project_dir=tmp_path)

    assert [entry.key for entry in catalog.select(tag="core")] == ["a"]
    assert [entry.key for entry in catalog.select()] == ["a", "b", "c"]


def test_compose_merges_module_configuration(tmp_path: Path) -> None:
    save_yaml_file(
        tmp_path / "testing.yaml",
        _workflow(
            "testing",
            configuration={"quality": {"gates": ["tests"], "threshold": 80}},
        ),
    )
    save_yaml_file(
        tmp_path / "review.yaml",
        _workflow(
            "review",
            dependencies=["testing"],
            configuration={"quality": {"gates": ["review"], "threshold": 90}},
        ),
    )
    save_yaml_file(tmp_path / "plain.yaml", _workflow("plain"))
    catalog = WorkflowCatalog(project_dir=tmp_path)

    composed = catalog.compose(["testing", "review", "plain"])

    assert composed == {
        "workflows": {"include": ["testing", "review", "plain"]},
        "quality": {"gates": ["tests", "review"], "threshold": 90},
    }
    assert catalog.get("review").dependencies == ("testing",)


def test_compose_unknown_module_raises(tmp_path: Path) -> None:
    with pytest.raises(WorkflowNotFoundError):
        WorkflowCatalog(project_dir=tmp_path).compose(["missing"])
