"""Subcommand modules for astrocart.

``register_commands()`` imports lazily so ``astrocart --help`` stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the command groups and standalone commands on the root group."""
    # --- Groups ---
    from astrocart.commands.order import order
    from astrocart.commands.promo import promo

    cli.add_command(order)
    cli.add_command(promo)

    # --- Standalone commands ---
    from astrocart.commands.quote import quote

    cli.add_command(quote)
