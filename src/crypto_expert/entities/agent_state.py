"""Agent conversation state passed to the orchestrator."""

import uuid
from dataclasses import dataclass, field
from typing import Any

from crypto_expert.results import ToolResult


@dataclass(frozen=True)
class ToolInvocation:
    """The orchestrator asks for a tool to be called."""

    name: str
    arguments: dict[str, Any] = field(default_factory=dict)
    call_id: str = field(default_factory=lambda: f"call_{uuid.uuid4().hex[:12]}")


@dataclass(frozen=True)
class FinalAnswer:
    """The orchestrator is done and answers the user."""

    text: str


@dataclass(frozen=True)
class ToolStep:
    invocation: ToolInvocation
    result: ToolResult


@dataclass
class PromptState:
    """Everything the orchestrator has seen so far for one query."""

    query: str
    topic: str
    steps: list[ToolStep] = field(default_factory=list)

    def record(self, invocation: ToolInvocation, result: ToolResult) -> None:
        self.steps.append(ToolStep(invocation=invocation, result=result))
