"""Shared pytest fixtures and test helpers for astrocart tests."""

from __future__ import annotations

from collections.abc import Generator
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from astrocart.config.settings import ShopSettings
from astrocart.infrastructure.shop import Shop
from astrocart.services.cart import CartStore
from astrocart.services.telemetry import disable_telemetry

START = datetime(2026, 3, 1, 10, 0, tzinfo=UTC)

PROMO_CODES: dict[str, dict[str, Any]] = {
    "WELCOME10": {"kind": "percentage", "amount": "10"},
    "FLAT200": {"kind": "fixed", "amount": "200"},
    "OLDIE": {"kind": "percentage", "amount": "50", "expires_at": "2026-01-01T00:00:00Z"},
    "BIG500": {"kind": "fixed", "amount": "500", "min_subtotal": "2000"},
    "RETIRED": {"kind": "fixed", "amount": "100", "active": False},
}

PROMO_TOML = """\
[promos.codes.WELCOME10]
kind = "percentage"
amount = 10

[promos.codes.FLAT200]
kind = "fixed"
amount = 200

[promos.codes.OLDIE]
kind = "percentage"
amount = 50
expires_at = 2026-01-01T00:00:00Z
"""


class FakeClock:
    """Deterministic clock; call it for the time, ``advance`` to move it."""

    def __init__(self, start: datetime = START) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **delta: float) -> datetime:
        self.current += timedelta(**delta)
        return self.current


@pytest.fixture(autouse=True)
def _reset_telemetry_state() -> Generator[None]:
    """``-v`` CLI invocations enable telemetry; never leak it across tests."""
    yield
    disable_telemetry()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ASTROCART_CONFIG", raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings(tmp_path: Path) -> ShopSettings:
    """Settings rooted at a temp directory with the test promo catalog."""
    return ShopSettings.from_cli(data_root=tmp_path, promos={"codes": PROMO_CODES})


@pytest.fixture
def shop(settings: ShopSettings, clock: FakeClock) -> Generator[Shop]:
    """Shop on the fixed clock, without an event bus."""
    s = Shop(settings, clock=clock)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def cart(shop: Shop) -> CartStore:
    return CartStore(shop)


@pytest.fixture
def address() -> dict[str, Any]:
    return {
        "full_name": "Asha Rao",
        "address_line1": "12 MG Road",
        "city": "Bengaluru",
        "state": "Karnataka",
        "pincode": "560001",
        "phone": "9876543210",
    }


@pytest.fixture
def _isolated_shop(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp shop root holding an ``astrocart.toml``.

    Use via ``@pytest.mark.usefixtures("_isolated_shop")`` on command test
    classes.
    """
    (tmp_path / "astrocart.toml").write_text(PROMO_TOML, encoding="utf-8")
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def place_order(shop: Shop, address: dict[str, Any], *lines: tuple[str, str, int]) -> str:
    """Fill a fresh cart with *lines*, place it, and return the order id."""
    from astrocart.services.orders import OrderService

    cart = CartStore(shop)
    for product_id, price, qty in lines or (("gemstone-ring", "500", 2),):
        assert cart.add_or_increment(product_id, price, qty).ok
    result = OrderService(shop).place_order(cart, address, "upi")
    assert result.ok, result.error
    return result.data["order"]["id"]
