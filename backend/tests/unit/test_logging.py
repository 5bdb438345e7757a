"""Tests for structured logging setup."""

from __future__ import annotations

import json
import logging

import pytest

from tradeflow.utils.logging import (
    correlation_scope,
    get_correlation_id,
    get_logger,
    set_correlation_id,
    setup_logging,
)


def _emit(capsys: pytest.CaptureFixture[str], log_format: str, **kw: object) -> str:
    setup_logging(level="INFO", log_format=log_format)
    get_logger("test").info("test message", **kw)
    return capsys.readouterr().err.strip()


class TestSetupLogging:
    """Test logging configuration."""

    def test_setup_logging_returns_none(self) -> None:
        assert setup_logging(level="INFO", log_format="json") is None

    def test_sets_root_level(self) -> None:
        setup_logging(level="WARNING", log_format="json")
        assert logging.getLogger().level == logging.WARNING

    def test_replaces_handlers(self) -> None:
        setup_logging(level="INFO", log_format="json")
        setup_logging(level="INFO", log_format="json")
        assert len(logging.getLogger().handlers) == 1


class TestRenderers:
    """JSON and console output."""

    def test_json_output_is_valid(self, capsys: pytest.CaptureFixture[str]) -> None:
        output = _emit(capsys, "json", extra_key="extra_value")
        if output:
            parsed = json.loads(output.splitlines()[-1])
            assert parsed["event"] == "test message"
            assert parsed["extra_key"] == "extra_value"
            assert "timestamp" in parsed
            assert "level" in parsed

    def test_console_output_is_not_json(
        self,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        output = _emit(capsys, "console")
        if output:
            with pytest.raises(json.JSONDecodeError):
                json.loads(output)


class TestCorrelationId:
    """Correlation ID context variable."""

    def test_set_and_get_correlation_id(self) -> None:
        set_correlation_id("corr-123")
        assert get_correlation_id() == "corr-123"

    def test_default_correlation_id(self) -> None:
        assert get_correlation_id() == ""

    def test_scope_restores_previous(self) -> None:
        set_correlation_id("outer")
        with correlation_scope("ord-1"):
            assert get_correlation_id() == "ord-1"
        assert get_correlation_id() == "outer"

    def test_correlation_id_in_log(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(level="INFO", log_format="json")
        with correlation_scope("ord-456"):
            get_logger("test_corr").info("correlated event")
        output = capsys.readouterr().err.strip()
        if output:
            parsed = json.loads(output.splitlines()[-1])
            assert parsed.get("correlation_id") == "ord-456"


class TestDeskName:
    """Desk name stamping."""

    def test_desk_name_on_every_entry(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(level="INFO", log_format="json", desk_name="DESK.A")
        get_logger("test_desk").info("order_created", order_id="ord-1")
        output = capsys.readouterr().err.strip()
        if output:
            parsed = json.loads(output.splitlines()[-1])
            assert parsed["desk"] == "DESK.A"
            assert parsed["order_id"] == "ord-1"

    def test_no_desk_key_without_name(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(level="INFO", log_format="json")
        get_logger("test_desk").info("order_created")
        output = capsys.readouterr().err.strip()
        if output:
            assert "desk" not in json.loads(output.splitlines()[-1])
