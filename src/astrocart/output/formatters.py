"""Rich/JSON output helpers.

The CLI renders a ServiceResult for humans (Rich tables, status icons)
or for machines (``--json``).  This layer picks the mode.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from astrocart.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    """Output-mode switches taken from the global CLI flags."""

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    currency_symbol: str = "₹"


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display.

    ``--json`` wins over ``--quiet``, which wins over the Rich renderers.
    """
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)

    from astrocart.output.renderers import render_quiet, render_result

    if settings.quiet:
        return render_quiet(result)
    return render_result(
        result,
        verbose=settings.verbose,
        currency_symbol=settings.currency_symbol,
    )
