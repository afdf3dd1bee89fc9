"""Extension layer — history notifications via pluggy.

INVARIANT: Plugin failures are warnings, never errors.
"""

from assetgraph.plugins.event_bus import EventBus
from assetgraph.plugins.manager import PluginManager

__all__ = ["EventBus", "PluginManager"]
