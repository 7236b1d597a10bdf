"""Orchestrator protocol.

The orchestrator decides which tool to call next, or answers. Its decision
logic (LLM inference in production) is a black box to the workflow, which
only relies on this narrow interface.
"""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from crypto_expert.entities import FinalAnswer, PromptState, ToolInvocation

if TYPE_CHECKING:
    from crypto_expert.tools import ToolRegistry


@runtime_checkable
class Orchestrator(Protocol):
    """Protocol for agent orchestrators."""

    async def infer_topic(self, query: str) -> str:
        """Short topic for a user query, used as cache query and namespace."""
        ...

    async def choose_and_invoke(
        self,
        registry: "ToolRegistry",
        state: PromptState,
    ) -> ToolInvocation | FinalAnswer:
        """Pick the next tool call from ``registry``, or produce the final answer."""
        ...
