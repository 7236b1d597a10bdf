"""Content search domain entities."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class SearchHit:
    """A single similarity search hit.

    Attributes:
        id: Entry id
        score: Similarity in [0, 1] (1 = identical)
        metadata: Stored fields (chunk_text, topic, source, timestamp, ...)
    """

    id: str
    score: float
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ContentSearchResult:
    """Result of a topic search.

    ``threshold`` is advisory: hits below it are still returned and the
    caller decides whether to use them.
    """

    topic: str
    results: list[SearchHit]
    threshold: float

    @property
    def count(self) -> int:
        return len(self.results)

    @property
    def found(self) -> bool:
        return self.count > 0

    def best_above(self, threshold: float | None = None) -> SearchHit | None:
        """Highest scoring hit at or above the threshold, if any."""
        limit = self.threshold if threshold is None else threshold
        for hit in self.results:
            if hit.score >= limit:
                return hit
        return None
