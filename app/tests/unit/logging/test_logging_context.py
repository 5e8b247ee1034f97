"""Unit tests for msgcatalog.logging.context module."""

import uuid

import pytest
import structlog

from msgcatalog.logging.context import (
    bind_run_context,
    clear_run_context,
    get_run_id,
)


@pytest.mark.unit
class TestBindRunContext:
    """Test suite for bind_run_context context manager."""

    def test_auto_generates_run_id(self):
        """Run id is auto-generated if not provided."""
        with bind_run_context():
            run_id = get_run_id()
            assert run_id is not None
            uuid.UUID(run_id)

    def test_uses_provided_run_id(self):
        """Provided run id is used instead of generating one."""
        with bind_run_context(run_id="run-123"):
            assert get_run_id() == "run-123"

    def test_binds_domain_locale_and_extra(self):
        """Domain, locale and extra keys are bound to context."""
        with bind_run_context(domain="messages", locale="fr", source_root="src"):
            ctx = structlog.contextvars.get_contextvars()
            assert ctx["domain"] == "messages"
            assert ctx["locale"] == "fr"
            assert ctx["source_root"] == "src"

    def test_context_removed_on_exit(self):
        """Bound keys are removed when the block ends."""
        with bind_run_context(domain="messages"):
            pass
        assert structlog.contextvars.get_contextvars() == {}

    def test_context_removed_on_exception(self):
        """Bound keys are removed even when the block raises."""
        with pytest.raises(RuntimeError):
            with bind_run_context(locale="fr"):
                raise RuntimeError("boom")
        assert get_run_id() is None

    def test_nested_blocks_share_run_id(self):
        """Inner blocks reuse the outer run id and restore outer values."""
        with bind_run_context(domain="messages"):
            outer = get_run_id()
            with bind_run_context(domain="admin", locale="fr"):
                ctx = structlog.contextvars.get_contextvars()
                assert ctx["run_id"] == outer
                assert ctx["domain"] == "admin"
            ctx = structlog.contextvars.get_contextvars()
            assert ctx["domain"] == "messages"
            assert "locale" not in ctx
            assert get_run_id() == outer


@pytest.mark.unit
class TestRunContextHelpers:
    """Tests for get_run_id and clear_run_context."""

    def test_get_run_id_outside_context(self):
        """No run id is set outside a run."""
        assert get_run_id() is None

    def test_clear_run_context(self):
        """clear_run_context removes everything bound."""
        structlog.contextvars.bind_contextvars(run_id="x", domain="messages")
        clear_run_context()
        assert structlog.contextvars.get_contextvars() == {}
