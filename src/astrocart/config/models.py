"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, astrocart.toml only contains
overrides.  A fresh install needs no config file at all; promo codes are
the one section a shop normally fills in.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field

from astrocart.domain.pricing import (
    FLAT_SHIPPING_FEE,
    FREE_SHIPPING_THRESHOLD,
    TAX_RATE,
    PricingPolicy,
)
from astrocart.domain.promo import PromoCatalogEntry

# --- astrocart.toml sections ---


class PricingConfig(BaseModel):
    """[pricing] section."""

    model_config = {"frozen": True}

    free_shipping_threshold: Decimal = Field(default=FREE_SHIPPING_THRESHOLD, ge=0)
    flat_shipping_fee: Decimal = Field(default=FLAT_SHIPPING_FEE, ge=0)
    tax_rate: Decimal = Field(default=TAX_RATE, ge=0, le=1)
    currency_symbol: str = "₹"

    def policy(self) -> PricingPolicy:
        """The engine policy described by this section."""
        return PricingPolicy(
            free_shipping_threshold=self.free_shipping_threshold,
            flat_shipping_fee=self.flat_shipping_fee,
            tax_rate=self.tax_rate,
        )


class PromosConfig(BaseModel):
    """[promos] section.

    Each code is a sub-table::

        [promos.codes.WELCOME10]
        kind = "percentage"
        amount = 10
    """

    model_config = {"frozen": True}

    codes: dict[str, PromoCatalogEntry] = Field(default_factory=dict)


class CartConfig(BaseModel):
    """[cart] section."""

    model_config = {"frozen": True}

    badge_cap: int = Field(default=99, ge=1)


class OrdersConfig(BaseModel):
    """[orders] section."""

    model_config = {"frozen": True}

    directory: str = "orders"


class ShopConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    pricing: PricingConfig = Field(default_factory=PricingConfig)
    promos: PromosConfig = Field(default_factory=PromosConfig)
    cart: CartConfig = Field(default_factory=CartConfig)
    orders: OrdersConfig = Field(default_factory=OrdersConfig)
