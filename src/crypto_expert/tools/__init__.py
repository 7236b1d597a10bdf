"""Tools offered to the agent orchestrator."""

from .catalog import build_tool_registry
from .registry import CACHE, FETCH, ToolRegistry, ToolSpec

__all__ = ["ToolRegistry", "ToolSpec", "build_tool_registry", "FETCH", "CACHE"]
