"""Chat-plugin variant: the CoinGecko lookups wrapped as chat actions."""

from .actions import Action, ActionContent, ActionMessage, build_actions
from .plugin import CoinGeckoPlugin, MessageBusService, get_plugin, router

__all__ = [
    "Action",
    "ActionContent",
    "ActionMessage",
    "build_actions",
    "CoinGeckoPlugin",
    "MessageBusService",
    "get_plugin",
    "router",
]
