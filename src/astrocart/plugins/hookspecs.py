"""Pluggy hook specifications for astrocart lifecycle events.

Three events are dispatched through the EventBus: cart changes, order
placement, and order status transitions.  Payloads are JSON-shaped so a
plugin can forward them to analytics or a notification service unchanged.
"""

from __future__ import annotations

from typing import Any

import pluggy

hookspec = pluggy.HookspecMarker("astrocart")


class AstrocartHookSpec:
    """Hook specifications for the astrocart plugin system."""

    @hookspec
    def post_cart_change(
        self,
        op: str,
        item_count: int,
        promo_code: str | None,
        breakdown: dict[str, Any],
    ) -> None:
        """Called after every successful cart mutation with the new breakdown."""

    @hookspec
    def post_order_placed(
        self,
        order_id: str,
        item_count: int,
        total: str,
        payment_method: str,
    ) -> None:
        """Called after an order is created at checkout."""

    @hookspec
    def post_order_transition(
        self,
        order_id: str,
        from_status: str,
        to_status: str,
        at: str,
        step: dict[str, Any],
    ) -> None:
        """Called after an order moves to a new status.

        *step* is the tracking timeline step the transition completed.
        """
