"""
ai-dev-workflow - project config resolution and template sync.

File: src/ai_dev_workflow/config/resolver.py

Purpose
- Read ``.ai/config.yaml`` for a project root and refresh it from a template.

Functional requirements
- A missing config is a value (``None``), never a synthesized default.
- Parse errors propagate unchanged.
- Sync overwrites by default; the merge strategy layers the template onto the
  existing config through the deep merge engine.
- An optional backup is taken before sync and can be restored.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from ai_dev_workflow.config.merge import merge_documents
from ai_dev_workflow.config.schema import (
    ConfigValidationError,
    ConfigValidationIssue,
    ProjectConfig,
)
from ai_dev_workflow.constants import AI_DIR, CONFIG_BACKUP_PATH, CONFIG_PATH
from ai_dev_workflow.observability import get_logger
from ai_dev_workflow.persistence import load_yaml_file, save_yaml_file
from ai_dev_workflow.utils.fs import atomic_write


class TemplateNotFoundError(FileNotFoundError):
    """Raised when the sync template does not exist."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Template not found: {path}")


class BackupNotFoundError(FileNotFoundError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Config backup not found: {path}")


class SyncStrategy(str, Enum):
    OVERWRITE = "overwrite"
    MERGE = "merge"


@dataclass(frozen=True, slots=True)
class SyncResult:
    config_path: Path
    template_path: Path
    strategy: SyncStrategy
    backup_path: Path | None


class ConfigResolver:
    """Locate and maintain the project config under ``root``."""

    def __init__(self, root: Path | str, *, logger: Any | None = None) -> None:
        self._root = Path(root)
        self._logger = logger if logger is not None else get_logger(__name__)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def config_path(self) -> Path:
        return self._root / CONFIG_PATH

    @property
    def backup_path(self) -> Path:
        return self._root / CONFIG_BACKUP_PATH

    def load_document(self) -> Any:
        """Return the raw parsed config document, or ``None`` when absent."""

        if not self.config_path.is_file():
            return None
        return load_yaml_file(self.config_path)

    def load_config(self) -> ProjectConfig | None:
        document = self.load_document()
        if document is None and not self.config_path.is_file():
            return None
        if not isinstance(document, Mapping):
            raise ConfigValidationError(
                (
                    ConfigValidationIssue(
                        "<root>",
                        f"{CONFIG_PATH.as_posix()} must contain a mapping, "
                        f"got {type(document).__name__}",
                    ),
                )
            )
        return ProjectConfig(document=document)

    def save_config(self, document: Mapping[str, Any]) -> Path:
        save_yaml_file(self.config_path, dict(document))
        return self.config_path

    def sync_config_with_template(
        self,
        template_path: Path | str,
        *,
        strategy: SyncStrategy | str = SyncStrategy.OVERWRITE,
        backup: bool = False,
    ) -> SyncResult:
        """Refresh the project config from ``template_path``."""

        selected = SyncStrategy(strategy)
        template = Path(template_path)
        if not template.is_absolute():
            template = self._root / template
        if not template.is_file():
            raise TemplateNotFoundError(template)

        template_document = load_yaml_file(template)
        (self._root / AI_DIR).mkdir(parents=True, exist_ok=True)

        backup_written: Path | None = None
        if backup and self.config_path.is_file():
            atomic_write(self.backup_path, self.config_path.read_bytes())
            backup_written = self.backup_path

        if selected is SyncStrategy.MERGE:
            current = self.load_document()
            document = merge_documents(current, template_document)
        else:
            document = template_document

        save_yaml_file(self.config_path, document)
        self._logger.info(
            "config_synced",
            template=template.as_posix(),
            strategy=selected.value,
            backup=backup_written is not None,
        )
        return SyncResult(
            config_path=self.config_path,
            template_path=template,
            strategy=selected,
            backup_path=backup_written,
        )

    def restore_backup(self) -> Path:
        if not self.backup_path.is_file():
            raise BackupNotFoundError(self.backup_path)
        atomic_write(self.config_path, self.backup_path.read_bytes())
        self._logger.info("config_restored", backup=self.backup_path.as_posix())
        return self.config_path


__all__ = [
    "BackupNotFoundError",
    "ConfigResolver",
    "SyncResult",
    "SyncStrategy",
    "TemplateNotFoundError",
]
