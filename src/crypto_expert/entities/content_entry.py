"""Content cache entry domain entities."""

from dataclasses import dataclass, field
from typing import Any

CORE_FIELDS = ("id", "chunk_text", "topic", "source", "timestamp")


@dataclass(frozen=True)
class ContentEntry:
    """A cached answer stored in the topic namespace of the vector index.

    Attributes:
        id: Generated id, "content_<millis>_<random>"
        chunk_text: The cached content, returned on a cache hit
        topic: Topic string; embedded for similarity search and used as namespace
        source: Where the content came from (default "agent_response")
        timestamp: Write time, ISO-8601
        extra: Additional caller metadata
    """

    id: str
    chunk_text: str
    topic: str
    source: str
    timestamp: str
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def namespace(self) -> str:
        return self.topic

    def fields(self) -> dict[str, Any]:
        """Flattened metadata; core fields win over caller metadata."""
        extra = {k: v for k, v in self.extra.items() if k not in CORE_FIELDS}
        return {
            "id": self.id,
            "chunk_text": self.chunk_text,
            "topic": self.topic,
            "source": self.source,
            "timestamp": self.timestamp,
            **extra,
        }


@dataclass(frozen=True)
class UpsertResult:
    """Outcome of a successful upsert."""

    success: bool
    id: str
    topic: str
    content_length: int
    timestamp: str
