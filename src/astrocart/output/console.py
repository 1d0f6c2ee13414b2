"""Rich Console factory and theme for astrocart output.

Consoles render into a StringIO buffer so renderers keep a
``render_result() -> str`` contract.  Outside a terminal (CliRunner,
pipes) Rich drops color codes on its own.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

SHOP_THEME = Theme(
    {
        "shop.ok": "bold green",
        "shop.error": "bold red",
        "shop.warning": "bold yellow",
        "shop.op": "bold cyan",
        "shop.key": "dim",
        "shop.id": "bold blue",
        "shop.money": "bold",
        "shop.free": "green",
        "shop.discount": "green",
        "shop.status.pending": "yellow",
        "shop.status.confirmed": "cyan",
        "shop.status.shipped": "blue",
        "shop.status.delivered": "green",
        "shop.status.cancelled": "red",
        "shop.step.completed": "green",
        "shop.step.current": "bold magenta",
        "shop.step.pending": "dim",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes.
        width: Override terminal width (keeps table layout stable in tests).
    """
    return Console(
        file=StringIO(),
        theme=SHOP_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 100,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_status(status: str) -> str:
    """Return the Rich style name for an order status."""
    if status in ("pending", "confirmed", "shipped", "delivered", "cancelled"):
        return f"shop.status.{status}"
    return ""
