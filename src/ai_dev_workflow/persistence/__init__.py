"""Document persistence for ``.ai`` project files."""

from ai_dev_workflow.persistence.yaml_store import (
    DEFAULT_DUMP_OPTIONS,
    Document,
    DumpOptions,
    Scalar,
    dump_yaml,
    load_yaml_file,
    save_yaml_file,
    to_plain,
)

__all__ = [
    "DEFAULT_DUMP_OPTIONS",
    "Document",
    "DumpOptions",
    "Scalar",
    "dump_yaml",
    "load_yaml_file",
    "save_yaml_file",
    "to_plain",
]
