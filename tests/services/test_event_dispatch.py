"""Event dispatch from services to plugins."""

from __future__ import annotations

from typing import Any

import pluggy
import pytest

from astrocart.infrastructure.shop import Shop
from astrocart.services.cart import CartStore
from astrocart.services.orders import OrderService

hookimpl = pluggy.HookimplMarker("astrocart")


class RecordingPlugin:
    """Plugin that records all hook calls for verification."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []

    @hookimpl
    def post_cart_change(
        self,
        op: str,
        item_count: int,
        promo_code: str | None,
        breakdown: dict[str, Any],
    ) -> None:
        self.calls.append(
            (
                "post_cart_change",
                {
                    "op": op,
                    "item_count": item_count,
                    "promo_code": promo_code,
                    "breakdown": breakdown,
                },
            )
        )

    @hookimpl
    def post_order_placed(
        self, order_id: str, item_count: int, total: str, payment_method: str
    ) -> None:
        self.calls.append(
            (
                "post_order_placed",
                {
                    "order_id": order_id,
                    "item_count": item_count,
                    "total": total,
                    "payment_method": payment_method,
                },
            )
        )

    @hookimpl
    def post_order_transition(
        self,
        order_id: str,
        from_status: str,
        to_status: str,
        at: str,
        step: dict[str, Any],
    ) -> None:
        self.calls.append(
            (
                "post_order_transition",
                {"order_id": order_id, "from_status": from_status, "to_status": to_status},
            )
        )

    def named(self, hook: str) -> list[dict[str, Any]]:
        return [payload for name, payload in self.calls if name == hook]


class FailingPlugin:
    @hookimpl
    def post_cart_change(self, op: str) -> None:
        raise RuntimeError("analytics down")


@pytest.fixture
def recorder(shop: Shop) -> RecordingPlugin:
    plugin = RecordingPlugin()
    shop.init_event_bus(sync=True, discover=False)
    assert shop.plugin_manager is not None
    shop.plugin_manager.register_plugin(plugin, name="recorder")
    return plugin


class TestCartEvents:
    def test_mutation_dispatches(self, recorder: RecordingPlugin, cart: CartStore) -> None:
        cart.add_or_increment("ring", "500", 2)
        cart.apply_promo("WELCOME10")
        events = recorder.named("post_cart_change")
        assert [e["op"] for e in events] == ["add_or_increment", "apply_promo"]
        assert events[-1]["promo_code"] == "WELCOME10"
        assert events[-1]["breakdown"]["total"] == "1162.00"

    def test_failed_mutation_does_not_dispatch(
        self, recorder: RecordingPlugin, cart: CartStore
    ) -> None:
        cart.apply_promo("WELCOME10")
        assert recorder.calls == []

    def test_plugin_failure_is_not_an_error(self, shop: Shop, cart: CartStore) -> None:
        shop.init_event_bus(sync=True, discover=False)
        assert shop.plugin_manager is not None and shop.event_bus is not None
        shop.plugin_manager.register_plugin(FailingPlugin())
        result = cart.add_or_increment("ring", "500")
        assert result.ok
        assert len(shop.event_bus.failures) == 1
        assert shop.event_bus.failures[0].error == "analytics down"


class TestOrderEvents:
    def test_place_and_transition(
        self,
        recorder: RecordingPlugin,
        shop: Shop,
        cart: CartStore,
        address: dict[str, Any],
    ) -> None:
        service = OrderService(shop)
        cart.add_or_increment("ring", "500", 2)
        order_id = service.place_order(cart, address, "upi:asha@okbank").data["order"]["id"]
        service.advance(order_id, "confirmed")

        placed = recorder.named("post_order_placed")
        assert placed == [
            {"order_id": order_id, "item_count": 2, "total": "1280.00", "payment_method": "upi"}
        ]
        # Checkout clears the cart, which is itself a cart change.
        assert recorder.named("post_cart_change")[-1]["op"] == "clear"
        transitions = recorder.named("post_order_transition")
        assert transitions == [
            {"order_id": order_id, "from_status": "pending", "to_status": "confirmed"}
        ]

    def test_no_bus_no_dispatch(self, shop: Shop, cart: CartStore) -> None:
        assert shop.event_bus is None
        assert cart.add_or_increment("ring", "500").ok
