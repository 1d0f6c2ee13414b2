"""Tests for the quote command."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from astrocart.cli import cli


@pytest.mark.usefixtures("_isolated_shop")
class TestQuoteCommand:
    def test_quote_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "quote", "gemstone-ring:500:2"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["ok"] is True
        assert payload["op"] == "quote"
        assert payload["data"]["item_count"] == 2
        assert payload["data"]["breakdown"] == {
            "subtotal": "1000.00",
            "discount": "0.00",
            "shipping": "100.00",
            "tax": "180.00",
            "total": "1280.00",
        }

    def test_quote_with_promo(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli, ["--json", "quote", "gemstone-ring:500:2", "--promo", "WELCOME10"]
        )
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["data"]["promo_code"] == "WELCOME10"
        assert payload["data"]["breakdown"]["discount"] == "100.00"
        assert payload["data"]["breakdown"]["total"] == "1162.00"

    def test_same_product_merges(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli, ["--json", "quote", "rudraksha:349", "rudraksha:349:2"]
        )
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert len(payload["data"]["items"]) == 1
        assert payload["data"]["item_count"] == 3

    def test_quote_human(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["quote", "gemstone-ring:500:2"])
        assert result.exit_code == 0, result.output
        assert "gemstone-ring" in result.output
        assert "Total" in result.output
        assert "1280.00" in result.output

    def test_quote_quiet_prints_total(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "quote", "gemstone-ring:500:2"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "1280.00"

    def test_expired_promo_fails(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli, ["--json", "quote", "gemstone-ring:500:2", "--promo", "OLDIE"]
        )
        assert result.exit_code == 1
        assert "PROMO_REJECTED" in result.output
        assert "expired" in result.output

    def test_bad_item_is_usage_error(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["quote", "gemstone-ring"])
        assert result.exit_code == 2
        assert "PRODUCT_ID:PRICE" in result.output

    def test_non_numeric_price(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["quote", "gemstone-ring:lots"])
        assert result.exit_code == 2

    @pytest.mark.parametrize(
        "item", ["gemstone-ring:nan", "gemstone-ring:Infinity", "gemstone-ring:sNaN:2"]
    )
    def test_non_finite_price(self, cli_runner: CliRunner, item: str) -> None:
        result = cli_runner.invoke(cli, ["quote", item])
        assert result.exit_code == 2
        assert "non-finite" in result.output

    def test_items_required(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["quote"])
        assert result.exit_code == 2

    def test_examples(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["quote", "--examples"])
        assert result.exit_code == 0
        assert "astrocart quote gemstone-ring:500:2" in result.output
