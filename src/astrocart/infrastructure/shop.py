"""Shop — the single dependency injected into every service.

Bundles the settings-derived collaborators a service needs: the pricing
engine, the promo validator, the timeline builder, the order repository,
a clock, and (once initialized) the event bus.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from astrocart.domain.pricing import PricingEngine
from astrocart.domain.promo import PromoCodeValidator
from astrocart.domain.timeline import TrackingTimelineBuilder
from astrocart.infrastructure.orders import OrderRepository

if TYPE_CHECKING:
    from astrocart.config.settings import ShopSettings
    from astrocart.plugins.event_bus import EventBus
    from astrocart.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(UTC)


class Shop:
    """Shared collaborators for the service layer.

    Usage::

        shop = Shop(ShopSettings.from_cli())
        cart = CartStore(shop)
    """

    def __init__(
        self,
        settings: ShopSettings,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.settings = settings
        self.clock = clock
        self.pricing = PricingEngine(settings.pricing.policy())
        self.promos = PromoCodeValidator(settings.promos.codes, clock=clock)
        self.timeline = TrackingTimelineBuilder()
        self.orders = OrderRepository(settings.orders_dir)
        self._event_bus: EventBus | None = None
        self._plugin_manager: PluginManager | None = None

    def now(self) -> datetime:
        return self.clock()

    @property
    def event_bus(self) -> EventBus | None:
        """The event bus, or None if :meth:`init_event_bus` was never called."""
        return self._event_bus

    @property
    def plugin_manager(self) -> PluginManager | None:
        return self._plugin_manager

    def init_event_bus(self, *, sync: bool = False, discover: bool = True) -> EventBus:
        """Create the plugin manager and event bus.

        With *discover*, plugins published under the ``astrocart.plugins``
        entry point are loaded.
        """
        from astrocart.plugins.event_bus import EventBus
        from astrocart.plugins.manager import PluginManager

        pm = PluginManager()
        if discover:
            names = pm.discover_and_load()
            logger.debug("Plugins loaded: %s", names)
        self._plugin_manager = pm
        self._event_bus = EventBus(pm, sync=sync)
        return self._event_bus

    def close(self) -> None:
        """Flush and stop the event bus."""
        if self._event_bus is not None:
            self._event_bus.shutdown()
            self._event_bus = None
