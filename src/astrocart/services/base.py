"""BaseService — abstract foundation for all astrocart services.

Every service receives a :class:`Shop` at construction time. The Shop
provides the pricing engine, promo validator, timeline builder, order
repository, clock and event bus.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from astrocart.services.telemetry import trace_span

if TYPE_CHECKING:
    from astrocart.infrastructure.shop import Shop

logger = logging.getLogger(__name__)


class BaseService:
    """Abstract base for all service-layer classes.

    Usage::

        class OrderService(BaseService):
            def get_order(self, order_id: str) -> ServiceResult:
                order = self._shop.orders.get(order_id)
                ...
    """

    def __init__(self, shop: Shop) -> None:
        self._shop = shop

    @property
    def shop(self) -> Shop:
        return self._shop

    def _dispatch_event(
        self,
        hook_name: str,
        payload: dict[str, Any],
        warnings: list[str],
    ) -> None:
        """Dispatch a lifecycle event. No-op if event bus not initialized.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        bus = self._shop.event_bus
        if bus is None:
            return
        with trace_span("plugins.dispatch", hook=hook_name):
            try:
                bus.dispatch(hook_name, payload)
            except Exception:
                logger.debug("Event dispatch failed for %s", hook_name, exc_info=True)
                warnings.append(f"Event dispatch failed for {hook_name}")
