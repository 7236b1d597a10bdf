"""Result type shared by every tool and plugin action.

Tools never raise into the orchestrator: they return either a success payload
or a typed failure, so the model can apologise or pick another tool.
"""

import json
from dataclasses import dataclass
from typing import Any

from crypto_expert.errors import CryptoExpertError


@dataclass(frozen=True)
class ToolFailure:
    """Typed failure carried by a ToolResult."""

    kind: str
    message: str


@dataclass(frozen=True)
class ToolResult:
    """Outcome of a tool or action invocation."""

    ok: bool
    data: Any = None
    error: ToolFailure | None = None

    @classmethod
    def success(cls, data: Any) -> "ToolResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, kind: str, message: str, data: Any = None) -> "ToolResult":
        return cls(ok=False, data=data, error=ToolFailure(kind=kind, message=message))

    @classmethod
    def from_error(cls, exc: CryptoExpertError, data: Any = None) -> "ToolResult":
        return cls.failure(exc.kind, exc.message, data=data)

    def to_payload(self) -> str:
        """Serialize for a tool message sent back to the model."""
        if self.ok:
            return json.dumps(self.data, default=str)
        assert self.error is not None
        return json.dumps({"error": self.error.kind, "message": self.error.message})
