"""Extension layer — plugin system via pluggy.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints.
INVARIANT: Plugin failures are warnings, never errors.
"""

from astrocart.plugins.event_bus import EventBus
from astrocart.plugins.manager import PluginManager

__all__ = ["EventBus", "PluginManager"]
