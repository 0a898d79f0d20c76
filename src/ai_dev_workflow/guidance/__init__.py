"""Placeholder assistant features: stories, checklists, reviews, exploration."""

from ai_dev_workflow.guidance.assistant import (
    AssistantResponse,
    UnknownAssistantCommandError,
    execute_ai_command,
)
from ai_dev_workflow.guidance.checklist import (
    ChecklistManager,
    ChecklistNotFoundError,
    ChecklistSummary,
)
from ai_dev_workflow.guidance.explorer import FileMetadata, ProjectExplorer, priority_patterns
from ai_dev_workflow.guidance.review import (
    FileSelection,
    ensure_review_checklist,
    expand_review_types,
    review_notes,
    select_files,
)
from ai_dev_workflow.guidance.story import create_story, render_story, sanitize_filename
from ai_dev_workflow.guidance.todo import section_items

__all__ = [
    "AssistantResponse",
    "ChecklistManager",
    "ChecklistNotFoundError",
    "ChecklistSummary",
    "FileMetadata",
    "FileSelection",
    "ProjectExplorer",
    "UnknownAssistantCommandError",
    "create_story",
    "ensure_review_checklist",
    "execute_ai_command",
    "expand_review_types",
    "priority_patterns",
    "render_story",
    "review_notes",
    "sanitize_filename",
    "section_items",
    "select_files",
]
