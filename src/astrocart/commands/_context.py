"""AppContext — shared Click context for all commands.

Created once by the root CLI group and handed to subcommands via
``@click.pass_obj``.  Owns the lazily built :class:`Shop`, the session
cart, and result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from astrocart.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from astrocart.config.settings import ShopSettings
    from astrocart.infrastructure.shop import Shop
    from astrocart.services.cart import CartStore
    from astrocart.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The shop is built on first use so ``--help`` and ``--version`` never
    touch the order directory or load plugins.
    """

    def __init__(self, settings: ShopSettings) -> None:
        self.settings = settings
        self._shop: Shop | None = None
        self._cart: CartStore | None = None

        from astrocart.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from astrocart.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def shop(self) -> Shop:
        """The shop instance (created lazily on first access)."""
        if self._shop is None:
            from astrocart.infrastructure.shop import Shop

            self._shop = Shop(self.settings)
            self._shop.init_event_bus(sync=self.settings.sync)
        return self._shop

    @property
    def cart(self) -> CartStore:
        """The cart for this invocation; starts empty."""
        if self._cart is None:
            from astrocart.services.cart import CartStore

            self._cart = CartStore(self.shop)
        return self._cart

    def close(self) -> None:
        """Wait for in-flight plugin hooks and stop the event bus."""
        if self._shop is not None:
            self._shop.close()

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: stdout; warnings go to stderr so piped output stays clean.
        * Failure: stderr, exit code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
            currency_symbol=self.settings.pricing.currency_symbol,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
