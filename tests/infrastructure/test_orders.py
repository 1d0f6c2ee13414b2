"""Tests for OrderRepository persistence."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from pathlib import Path

import pytest

from astrocart.domain.lifecycle import OrderStatus
from astrocart.domain.models import (
    CartLineItem,
    Order,
    PriceBreakdown,
    ShippingAddress,
    StatusChange,
)
from astrocart.infrastructure.orders import OrderReadError, OrderRepository

T0 = datetime(2026, 3, 1, 10, 0, tzinfo=UTC)


def _order(order_id: str, placed_at: datetime = T0) -> Order:
    return Order(
        id=order_id,
        placed_at=placed_at,
        items=(CartLineItem(product_id="ring", unit_price=Decimal("500"), quantity=2),),
        breakdown=PriceBreakdown(
            subtotal=Decimal("1000.00"),
            shipping=Decimal("100.00"),
            tax=Decimal("180.00"),
            total=Decimal("1280.00"),
        ),
        shipping_address=ShippingAddress(
            full_name="Asha Rao",
            address_line1="12 MG Road",
            city="Bengaluru",
            state="Karnataka",
            pincode="560001",
            phone="9876543210",
        ),
        payment_method_ref="cod",
        status_history=[StatusChange(status=OrderStatus.PENDING, at=placed_at)],
    )


@pytest.fixture
def repo(tmp_path: Path) -> OrderRepository:
    return OrderRepository(tmp_path / "orders")


class TestOrderRepository:
    def test_save_and_get(self, repo: OrderRepository) -> None:
        order = _order("ORD-00000000A1")
        path = repo.save(order)
        assert path.name == "ORD-00000000A1.json"
        loaded = repo.get("ORD-00000000A1")
        assert loaded is not None
        assert loaded.model_dump() == order.model_dump()
        assert loaded.breakdown.total == Decimal("1280.00")

    def test_save_overwrites(self, repo: OrderRepository) -> None:
        order = _order("ORD-00000000A1")
        repo.save(order)
        order.status = OrderStatus.CONFIRMED
        repo.save(order)
        loaded = repo.get(order.id)
        assert loaded is not None
        assert loaded.status == OrderStatus.CONFIRMED
        assert not list(repo.root.glob(".tmp-*"))

    def test_get_missing(self, repo: OrderRepository) -> None:
        assert repo.get("ORD-FFFFFFFFFF") is None

    def test_get_rejects_bad_ids(self, repo: OrderRepository) -> None:
        assert repo.get("../secrets") is None

    def test_list_newest_first(self, repo: OrderRepository) -> None:
        repo.save(_order("ORD-00000000A1", T0))
        repo.save(_order("ORD-00000000A2", T0 + timedelta(days=1)))
        repo.save(_order("ORD-00000000A0", T0 - timedelta(days=1)))
        assert [o.id for o in repo.list()] == [
            "ORD-00000000A2",
            "ORD-00000000A1",
            "ORD-00000000A0",
        ]

    def test_list_skips_unreadable(
        self, repo: OrderRepository, caplog: pytest.LogCaptureFixture
    ) -> None:
        repo.save(_order("ORD-00000000A1"))
        (repo.root / "ORD-00000000ZZ.json").write_text("{not json", encoding="utf-8")
        orders = repo.list()
        assert [o.id for o in orders] == ["ORD-00000000A1"]
        assert "Skipping unreadable order file" in caplog.text

    def test_get_corrupt_file_raises_read_error(self, repo: OrderRepository) -> None:
        repo.root.mkdir(parents=True, exist_ok=True)
        repo.path_for("ORD-00000000A1").write_text("{not json", encoding="utf-8")
        with pytest.raises(OrderReadError) as excinfo:
            repo.get("ORD-00000000A1")
        assert excinfo.value.order_id == "ORD-00000000A1"
        assert excinfo.value.path == repo.path_for("ORD-00000000A1")

    def test_list_without_directory(self, repo: OrderRepository) -> None:
        assert repo.list() == []
