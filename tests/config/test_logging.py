"""Tests for structlog configuration."""

from __future__ import annotations

import io
import json
import logging
from collections.abc import Generator
from decimal import Decimal

import pytest
import structlog

from astrocart.config.logging import HANDLER_NAME, configure_logging


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root logger state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    shop = logging.getLogger("astrocart")
    shop_level = shop.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    shop.setLevel(shop_level)


class TestConfigureLogging:
    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True)
        assert logging.getLogger("astrocart").level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_non_verbose_sets_warning(self) -> None:
        configure_logging(verbose=False)
        assert logging.getLogger("astrocart").level == logging.WARNING

    def test_json_mode_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        structlog.get_logger("astrocart.test").warning("json test", answer=42)
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "json test"
        assert parsed["answer"] == 42
        assert parsed["level"] == "warning"
        assert parsed["logger"] == "astrocart.test"
        assert "timestamp" in parsed

    def test_stdlib_service_logger_gets_structured_fields(
        self, capfd: pytest.CaptureFixture[str]
    ) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("astrocart.services.orders").debug("Placed order ORD-0123456789")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "Placed order ORD-0123456789"
        assert parsed["level"] == "debug"
        assert parsed["logger"] == "astrocart.services.orders"

    def test_third_party_debug_is_suppressed(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("pluggy").debug("hook noise")
        assert capfd.readouterr().err == ""

    def test_reconfiguring_replaces_only_own_handler(self) -> None:
        other = logging.NullHandler()
        logging.getLogger().addHandler(other)
        configure_logging(verbose=True, log_json=False)
        configure_logging(verbose=True, log_json=True)
        handlers = logging.getLogger().handlers
        assert len([h for h in handlers if h.get_name() == HANDLER_NAME]) == 1
        assert other in handlers

    def test_money_logged_as_text(self) -> None:
        stream = io.StringIO()
        configure_logging(log_json=True, stream=stream)
        structlog.get_logger("astrocart.cart").warning("priced", total=Decimal("1280.00"))
        parsed = json.loads(stream.getvalue().strip())
        assert parsed["total"] == "1280.00"

    def test_console_mode_to_custom_stream(self) -> None:
        stream = io.StringIO()
        configure_logging(stream=stream)
        logging.getLogger("astrocart.infrastructure.orders").warning("Unreadable order file")
        logging.getLogger("astrocart.services.cart").debug("hidden")
        output = stream.getvalue()
        assert "Unreadable order file" in output
        assert "hidden" not in output
