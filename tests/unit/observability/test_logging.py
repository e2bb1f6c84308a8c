"""Tests for observability/logging.py."""

from __future__ import annotations

import io
import json
import logging

import pytest
import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, get_contextvars

from neckar_client.observability.logging import (
    _resolve_level,
    bind_identity_context,
    clear_identity_context,
    configure_logging,
)
from tests.mocks.mock_settings import make_settings


@pytest.fixture(autouse=True)
def _clean_context() -> None:
    """Start each test with no bound context."""
    clear_contextvars()


@pytest.mark.unit
class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_lines_written_to_stream(self) -> None:
        """JSON mode writes one JSON object per stdlib record, with identity context."""
        stream = io.StringIO()
        configure_logging(make_settings(log_format="json", log_level="INFO"), stream=stream)
        bind_identity_context("acme", "user-7")

        logging.getLogger("neckar.test").info("token_issued")

        entry = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert entry["event"] == "token_issued"
        assert entry["level"] == "info"
        assert entry["cluster"] == "acme"
        assert entry["subject"] == "user-7"

    def test_console_mode_without_tty(self) -> None:
        """Console mode writes plain text when the stream is not a terminal."""
        stream = io.StringIO()
        configure_logging(make_settings(log_format="console"), stream=stream)
        logging.getLogger("neckar.test").warning("cache_flushed")
        output = stream.getvalue()
        assert "cache_flushed" in output
        assert "\x1b[" not in output

    def test_default_stream_is_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Nothing is logged to stdout."""
        configure_logging(make_settings())
        logging.getLogger("neckar.test").warning("vault_call_failed")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "vault_call_failed" in captured.err
        configure_logging(make_settings(), stream=io.StringIO())

    def test_configure_logging_sets_level(self) -> None:
        """Log level is applied to root logger."""
        configure_logging(make_settings(log_level="WARNING"), stream=io.StringIO())
        assert logging.getLogger().level == logging.WARNING

    def test_third_party_loggers_quieted(self) -> None:
        """httpx and hvac stay at WARNING even when debugging."""
        configure_logging(make_settings(log_level="DEBUG"), stream=io.StringIO())
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("hvac").level == logging.WARNING
        assert structlog.is_configured()


@pytest.mark.unit
class TestIdentityContext:
    """Tests for bind/clear identity context."""

    def test_bind_and_clear(self) -> None:
        """Cluster and subject are bound and cleared."""
        bind_identity_context("suprematic", "user-7")
        assert get_contextvars() == {"cluster": "suprematic", "subject": "user-7"}
        clear_identity_context()
        assert get_contextvars() == {}

    def test_unset_fields_not_bound(self) -> None:
        """None values are skipped."""
        bind_identity_context(None, None)
        assert get_contextvars() == {}

    def test_clear_keeps_unrelated_context(self) -> None:
        """Only the identity keys are dropped."""
        bind_contextvars(request_id="r-1")
        bind_identity_context("acme")
        clear_identity_context()
        assert get_contextvars() == {"request_id": "r-1"}


@pytest.mark.unit
class TestResolveLevel:
    """Tests for _resolve_level."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("DEBUG", logging.DEBUG),
            ("warning", logging.WARNING),
            ("unknown", logging.INFO),
        ],
    )
    def test_resolve_level(self, name: str, expected: int) -> None:
        """Level names resolve to logging constants, unknown names to INFO."""
        assert _resolve_level(name) == expected
