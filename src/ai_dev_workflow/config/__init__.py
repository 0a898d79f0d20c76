"""Project configuration: schema, resolver, merge engine and runtime settings."""

from ai_dev_workflow.config.merge import merge_all, merge_documents
from ai_dev_workflow.config.resolver import (
    BackupNotFoundError,
    ConfigResolver,
    SyncResult,
    SyncStrategy,
    TemplateNotFoundError,
)
from ai_dev_workflow.config.schema import (
    ConfigValidationError,
    ConfigValidationIssue,
    ConfigValidationResult,
    ProjectConfig,
    assert_valid_config,
    validate_config,
)
from ai_dev_workflow.config.settings import ENV_PREFIX, Settings, SettingsError, load_settings

__all__ = [
    "BackupNotFoundError",
    "ConfigResolver",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "ENV_PREFIX",
    "ProjectConfig",
    "Settings",
    "SettingsError",
    "SyncResult",
    "SyncStrategy",
    "TemplateNotFoundError",
    "assert_valid_config",
    "load_settings",
    "merge_all",
    "merge_documents",
    "validate_config",
]
