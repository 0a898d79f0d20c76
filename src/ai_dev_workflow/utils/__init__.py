"""Utility exports for filesystem helpers."""

from ai_dev_workflow.utils.fs import atomic_write, ensure_parent, format_size, is_within

__all__ = [
    "atomic_write",
    "ensure_parent",
    "format_size",
    "is_within",
]
