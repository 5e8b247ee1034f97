"""Run context binding for structured logging.

Binds run-scoped context to logs so every entry emitted while a batch
pipeline run (or one of its per-locale merges) is in progress carries the
same run id, domain and locale.

Usage:
    from msgcatalog.logging import bind_run_context

    with bind_run_context(domain="messages", locale="fr"):
        logger.info("merge_started")

Dependencies:
    - structlog.contextvars
"""

import uuid
from contextlib import contextmanager
from typing import Any, Generator, Optional

import structlog


@contextmanager
def bind_run_context(
    run_id: Optional[str] = None,
    domain: Optional[str] = None,
    locale: Optional[str] = None,
    **extra_context: Any,
) -> Generator[None, None, None]:
    """Bind run-scoped context to all logs within the context manager.

    An enclosing run id is reused when present, so nested blocks (one per
    domain or locale) stay correlated with the outer pipeline run.

    Args:
        run_id: Unique run identifier. Inherited or auto-generated if not provided.
        domain: Text domain being processed.
        locale: Locale being processed.
        **extra_context: Additional key-value pairs to include in logs.

    Yields:
        None - context is bound to structlog's context vars.
    """
    previous = structlog.contextvars.get_contextvars()
    context: dict[str, Any] = {
        "run_id": run_id or previous.get("run_id") or str(uuid.uuid4())
    }

    if domain is not None:
        context["domain"] = domain

    if locale is not None:
        context["locale"] = locale

    context.update(extra_context)

    structlog.contextvars.bind_contextvars(**context)
    try:
        yield
    finally:
        structlog.contextvars.unbind_contextvars(*context.keys())
        restore = {k: previous[k] for k in context if k in previous}
        if restore:
            structlog.contextvars.bind_contextvars(**restore)


def get_run_id() -> Optional[str]:
    """Get the current run id from the logging context.

    Returns:
        The run id if set, None otherwise.
    """
    return structlog.contextvars.get_contextvars().get("run_id")


def clear_run_context() -> None:
    """Clear all run-scoped context from the logging context."""
    structlog.contextvars.clear_contextvars()
