"""Tool registry.

Every tool has a name, a description, a pydantic parameter model and an
async handler. Invocation always yields a ToolResult: parameters are
validated at the boundary and domain errors become typed failures.

FETCH tools are offered to the model. CACHE tools are driven by the
workflow itself and reachable directly through `crypto-expert tool`.
"""

import logging
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from typing import Any

from langchain_core.tools import BaseTool, StructuredTool
from pydantic import BaseModel, ValidationError

from crypto_expert.errors import CryptoExpertError
from crypto_expert.results import ToolResult

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Any], Awaitable[Any]]

FETCH = "fetch"
CACHE = "cache"


@dataclass(frozen=True)
class ToolSpec:
    """Declaration of a single tool.

    Attributes:
        name: Tool name as seen by the orchestrator
        description: What the tool does and when to use it
        params_model: Pydantic model validating the arguments
        handler: Coroutine receiving a validated params_model instance
        kind: "fetch" (remote data) or "cache" (content store)
    """

    name: str
    description: str
    params_model: type[BaseModel]
    handler: ToolHandler
    kind: str = FETCH

    def json_schema(self) -> dict[str, Any]:
        return self.params_model.model_json_schema()


class ToolRegistry:
    """Enumerable set of tools offered to an orchestrator."""

    def __init__(self, specs: list[ToolSpec] | None = None) -> None:
        self._tools: dict[str, ToolSpec] = {}
        for spec in specs or []:
            self.register(spec)

    def register(self, spec: ToolSpec) -> None:
        if spec.name in self._tools:
            raise ValueError(f"Tool already registered: {spec.name}")
        self._tools[spec.name] = spec
        logger.debug("Registered tool: %s (%s)", spec.name, spec.kind)

    def get(self, name: str) -> ToolSpec | None:
        return self._tools.get(name)

    def subset(self, kind: str) -> "ToolRegistry":
        """New registry holding only the tools of one kind."""
        return ToolRegistry([spec for spec in self._tools.values() if spec.kind == kind])

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolSpec]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    async def invoke(self, name: str, arguments: dict[str, Any] | None = None) -> ToolResult:
        """Validate the arguments and run a tool.

        Args:
            name: Registered tool name
            arguments: Raw arguments (e.g. from the model's tool call)

        Returns:
            ToolResult with the JSON-compatible payload or a typed failure
        """
        spec = self._tools.get(name)
        if spec is None:
            return ToolResult.failure("unknown_tool", f"No tool named {name!r}; available: {self.names}")

        try:
            params = spec.params_model.model_validate(arguments or {})
        except ValidationError as e:
            logger.warning("Rejected arguments for %s: %s", name, e)
            return ToolResult.failure("validation_error", str(e))

        try:
            data = await spec.handler(params)
        except CryptoExpertError as e:
            logger.error("Tool %s failed: %s", name, e.message)
            return ToolResult.from_error(e)

        return ToolResult.success(data)

    def as_langchain_tools(self) -> list[BaseTool]:
        """Wrap every tool as a LangChain StructuredTool (for bind_tools)."""
        return [self._to_langchain(spec) for spec in self._tools.values()]

    def _to_langchain(self, spec: ToolSpec) -> StructuredTool:
        registry = self

        async def _run(**kwargs: Any) -> str:
            result = await registry.invoke(spec.name, kwargs)
            return result.to_payload()

        return StructuredTool.from_function(
            coroutine=_run,
            name=spec.name,
            description=spec.description,
            args_schema=spec.params_model,
        )
