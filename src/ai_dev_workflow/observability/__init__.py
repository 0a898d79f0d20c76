"""Public observability primitives: structured logging."""

from ai_dev_workflow.observability.logging import (
    LoggingConfig,
    LoggingHandle,
    configure_structlog,
    get_active_logging_handle,
    get_logger,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "LoggingConfig",
    "LoggingHandle",
    "configure_structlog",
    "get_active_logging_handle",
    "get_logger",
    "setup_logging",
    "shutdown_logging",
]
