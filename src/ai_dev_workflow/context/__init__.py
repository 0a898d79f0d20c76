"""Context state and bounded command history."""

from ai_dev_workflow.context.models import (
    ContextData,
    ContextFormatError,
    EntryStatus,
    HistoryEntry,
    utc_timestamp,
)
from ai_dev_workflow.context.store import (
    ContextStore,
    ContextStoreError,
    display_context,
    format_context,
)

__all__ = [
    "ContextData",
    "ContextFormatError",
    "ContextStore",
    "ContextStoreError",
    "EntryStatus",
    "HistoryEntry",
    "display_context",
    "format_context",
    "utc_timestamp",
]
