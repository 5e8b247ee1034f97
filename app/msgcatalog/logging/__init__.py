"""Structured logging infrastructure.

Centralized logging configuration and utilities for msgcatalog using
structlog.

Public API:
    - configure_logging(): Initialize logging for the process
    - get_module_logger(): Get a logger for the calling module
    - bind_run_context(): Context manager for run-scoped logging
    - get_run_id(): Get current run id from context
    - clear_run_context(): Clear all run context
"""

from msgcatalog.logging.context import (
    bind_run_context,
    clear_run_context,
    get_run_id,
)
from msgcatalog.logging.setup import configure_logging, get_module_logger

__all__ = [
    "configure_logging",
    "get_module_logger",
    "bind_run_context",
    "get_run_id",
    "clear_run_context",
]
