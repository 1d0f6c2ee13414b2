"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from astrocart.output.console import create_console, get_output, style_for_status

if TYPE_CHECKING:
    from rich.console import Console

    from astrocart.services.result import ServiceResult


STEP_ICONS: dict[str, str] = {
    "completed": "✓",
    "current": "●",
    "pending": "○",
}


# ── Public API ────────────────────────────────────────────────────────


def render_result(
    result: ServiceResult,
    *,
    verbose: bool = False,
    currency_symbol: str = "₹",
) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose, symbol=currency_symbol)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode.

    Lists print one order id per line, single orders print their id,
    cart results print the total.
    """
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    data = result.data
    items = data.get("items")
    if items and isinstance(items, list) and isinstance(items[0], dict) and "id" in items[0]:
        return "\n".join(str(item["id"]) for item in items)
    if isinstance(data.get("order"), dict):
        return str(data["order"].get("id", ""))
    if "order_id" in data:
        return str(data["order_id"])
    if isinstance(data.get("breakdown"), dict):
        return str(data["breakdown"].get("total", ""))

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _money(value: Any, symbol: str) -> str:
    return f"{symbol}{value}"


def _is_zero(value: Any) -> bool:
    try:
        return Decimal(str(value)) == 0
    except ArithmeticError:
        return False


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    label = Text("OK", style="shop.ok")
    op = Text(f"  {result.op}", style="shop.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="shop.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="shop.id")
    elif key == "status" or key.endswith("_status"):
        v = Text(str(value), style=style_for_status(str(value)))
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(
    console: Console,
    span_data: dict[str, Any],
    indent: int = 4,
) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    attrs = span_data.get("attrs") or {}
    if attrs:
        line += "  (" + ", ".join(f"{ak}={av}" for ak, av in attrs.items()) + ")"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _line_table(items: list[dict[str, Any]], symbol: str) -> Table:
    """Cart or order lines: product, variant, price, qty, line total."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Product", style="shop.id", no_wrap=True)
    table.add_column("Variant")
    table.add_column("Price", justify="right")
    table.add_column("Qty", justify="right")
    table.add_column("Total", style="shop.money", justify="right")

    for item in items:
        variant = item.get("variant") or {}
        variant_label = f"{variant['name']}: {variant['value']}" if variant else ""
        label = item.get("name") or item.get("product_id", "")
        line_total = item.get("line_total")
        if line_total is None:
            line_total = Decimal(str(item.get("unit_price", "0"))) * int(item.get("quantity", 0))
            line_total = f"{line_total:.2f}"
        table.add_row(
            str(label),
            variant_label,
            _money(item.get("unit_price", ""), symbol),
            str(item.get("quantity", "")),
            _money(line_total, symbol),
        )
    return table


def _breakdown_table(
    breakdown: dict[str, Any],
    symbol: str,
    *,
    promo_code: str | None = None,
) -> Table:
    """The price summary block: subtotal, discount, shipping, tax, total."""
    table = Table(show_header=False, show_lines=False, pad_edge=False, box=None, expand=False)
    table.add_column("Label", style="shop.key")
    table.add_column("Amount", justify="right")

    subtotal = breakdown.get("subtotal", "0.00")
    table.add_row("Subtotal", _money(subtotal, symbol))

    discount = breakdown.get("discount", "0.00")
    if not _is_zero(discount):
        label = f"Discount ({promo_code})" if promo_code else "Discount"
        table.add_row(label, Text(f"-{_money(discount, symbol)}", style="shop.discount"))

    shipping = breakdown.get("shipping", "0.00")
    if _is_zero(shipping) and not _is_zero(subtotal):
        table.add_row("Shipping", Text("FREE", style="shop.free"))
    else:
        table.add_row("Shipping", _money(shipping, symbol))

    table.add_row("Tax", _money(breakdown.get("tax", "0.00"), symbol))
    table.add_row(
        Text("Total", style="bold"),
        Text(_money(breakdown.get("total", "0.00"), symbol), style="shop.money"),
    )
    return table


def _print_steps(console: Console, steps: list[dict[str, Any]]) -> None:
    for step in steps:
        state = str(step.get("state", "pending"))
        icon = STEP_ICONS.get(state, "?")
        style = f"shop.step.{state}"
        when = step.get("timestamp") or ""
        console.print(
            Text(f"  {icon} ", style=style),
            Text(str(step.get("title", "")), style=style),
            Text(f"  {when}", style="dim"),
            sep="",
        )
        console.print(Text(f"    {step.get('description', '')}", style="dim"))


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="shop.error")
    op = Text(f"  {result.op}", style="shop.op")
    sep = Text(" — ")
    console.print(label, op, sep, msg)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Cart renderers ────────────────────────────────────────────────────


def _render_cart(
    result: ServiceResult, console: Console, *, verbose: bool = False, symbol: str = "₹"
) -> None:
    """Render any cart mutation (and ``quote``) as lines plus the summary."""
    d = result.data
    items = d.get("items", [])
    _status_line(console, result)

    if not items:
        console.print("  Your cart is empty.")
    else:
        console.print(_line_table(items, symbol))
        console.print(f"\n{d.get('item_count', 0)} items")

    console.print(_breakdown_table(d.get("breakdown", {}), symbol, promo_code=d.get("promo_code")))
    if verbose:
        _render_meta(console, result)


def _render_promo_check(
    result: ServiceResult, console: Console, *, verbose: bool = False, symbol: str = "₹"
) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "code", d.get("code", ""))
    if d.get("kind") == "percentage":
        _field(console, "discount", f"{d.get('amount')}% off")
    else:
        _field(console, "discount", f"{_money(d.get('amount'), symbol)} off")
    if verbose:
        _render_meta(console, result)


# ── Order renderers ───────────────────────────────────────────────────


def _render_order(
    result: ServiceResult, console: Console, *, verbose: bool = False, symbol: str = "₹"
) -> None:
    """Render a placed or looked-up order as a panel plus line items."""
    order = result.data.get("order", {})
    status = str(order.get("status", ""))
    address = order.get("shipping_address", {})

    lines: list[str] = [
        f"status: [{style_for_status(status)}]{status}[/]" if status else "status: ?",
        f"placed: {order.get('placed_at', '')}",
        f"payment: {order.get('payment_method_ref', '')}",
    ]
    if order.get("promo_code"):
        lines.append(f"promo: {order['promo_code']}")
    if address:
        street = ", ".join(
            p for p in (address.get("address_line1"), address.get("address_line2")) if p
        )
        lines.append(f"ship to: {address.get('full_name', '')}")
        lines.append(f"         {street}")
        lines.append(
            f"         {address.get('city', '')}, {address.get('state', '')} "
            f"{address.get('pincode', '')}"
        )
    if result.data.get("cancellable"):
        lines.append("[dim]can be cancelled[/dim]")

    console.print(
        Panel("\n".join(lines), title=str(order.get("id", "?")), border_style="dim", expand=False)
    )
    console.print(_line_table(order.get("items", []), symbol))
    console.print(_breakdown_table(order.get("breakdown", {}), symbol, promo_code=order.get("promo_code")))
    if verbose:
        _render_meta(console, result)


def _render_order_list(
    result: ServiceResult, console: Console, *, verbose: bool = False, symbol: str = "₹"
) -> None:
    """Render order history as a table, newest first."""
    items = result.data.get("items", [])
    if not items:
        console.print("No orders found.")
        return

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Order", style="shop.id", no_wrap=True)
    table.add_column("Status")
    table.add_column("Placed")
    table.add_column("Items", justify="right")
    table.add_column("Total", style="shop.money", justify="right")

    for item in items:
        status = str(item.get("status", ""))
        table.add_row(
            str(item.get("id", "")),
            Text(status, style=style_for_status(status)),
            str(item.get("placed_at", "")),
            str(item.get("item_count", "")),
            _money(item.get("total", ""), symbol),
        )

    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} orders")
    if verbose:
        _render_meta(console, result)


def _render_transition(
    result: ServiceResult, console: Console, *, verbose: bool = False, symbol: str = "₹"
) -> None:
    d = result.data
    _status_line(console, result)
    for key in ("order_id", "from_status", "to_status", "at"):
        if key in d:
            _field(console, key, d[key])
    step = d.get("step")
    if step:
        _print_steps(console, [step])
    if verbose:
        _render_meta(console, result)


def _render_timeline(
    result: ServiceResult, console: Console, *, verbose: bool = False, symbol: str = "₹"
) -> None:
    """Render the tracking timeline with one icon per step."""
    d = result.data
    status = str(d.get("status", ""))
    console.print(
        Text(f"Order {d.get('order_id', '?')}  ", style="shop.id"),
        Text(status.capitalize(), style=style_for_status(status)),
        sep="",
    )
    _print_steps(console, d.get("steps", []))
    if verbose:
        _render_meta(console, result)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(
    result: ServiceResult, console: Console, *, verbose: bool = False, symbol: str = "₹"
) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    # Cart
    "quote": _render_cart,
    "add_or_increment": _render_cart,
    "set_quantity": _render_cart,
    "remove": _render_cart,
    "apply_promo": _render_cart,
    "clear_promo": _render_cart,
    "clear": _render_cart,
    # Promo
    "check_promo": _render_promo_check,
    # Orders
    "place_order": _render_order,
    "get_order": _render_order,
    "list_orders": _render_order_list,
    "transition": _render_transition,
    "cancel": _render_transition,
    "track": _render_timeline,
}
