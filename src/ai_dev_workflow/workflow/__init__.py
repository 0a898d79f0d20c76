"""Workflow definitions, discovery and the interactive walkthrough."""

from ai_dev_workflow.workflow.model import (
    StepNumbering,
    WorkflowDefinition,
    WorkflowStep,
    WorkflowValidationError,
    is_workflow_definition,
    is_workflow_step,
    placeholder_names,
    step_labels,
    substitute_placeholders,
)
from ai_dev_workflow.workflow.catalog import (
    CatalogEntry,
    WorkflowCatalog,
    WorkflowNotFoundError,
    WorkflowOrigin,
    compose_modules,
    discover_workflows,
)
from ai_dev_workflow.workflow.runner import FollowResult, Prompter, WorkflowRunner

__all__ = [
    "CatalogEntry",
    "FollowResult",
    "Prompter",
    "StepNumbering",
    "WorkflowCatalog",
    "WorkflowDefinition",
    "WorkflowNotFoundError",
    "WorkflowOrigin",
    "WorkflowRunner",
    "WorkflowStep",
    "WorkflowValidationError",
    "compose_modules",
    "discover_workflows",
    "is_workflow_definition",
    "is_workflow_step",
    "placeholder_names",
    "step_labels",
    "substitute_placeholders",
]
