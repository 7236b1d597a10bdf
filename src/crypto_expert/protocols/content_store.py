"""Content store protocol.

Defines the interface for the vector index that backs the content cache.
Entries are written into namespaces (one per topic). Similarity search runs
across the whole index unless a namespace is given.
"""

from typing import Any, Protocol, runtime_checkable

from crypto_expert.entities import ContentEntry

# (entry id, cosine distance, stored fields)
StoredMatch = tuple[str, float, dict[str, Any]]


@runtime_checkable
class ContentStore(Protocol):
    """Protocol for content cache storage backends."""

    def ensure_index(self) -> None:
        """Create the index if it does not exist yet (idempotent)."""
        ...

    def upsert(self, entry: ContentEntry, vector: list[float]) -> str:
        """Write an entry into its topic namespace.

        Args:
            entry: The entry to store
            vector: Embedding of the entry's topic

        Returns:
            The entry id
        """
        ...

    def query(
        self,
        vector: list[float],
        top_k: int,
        namespace: str | None = None,
    ) -> list[StoredMatch]:
        """Nearest entries, index-wide or inside one namespace.

        Args:
            vector: The query embedding
            top_k: Maximum number of matches
            namespace: Optional topic namespace to restrict the search to

        Returns:
            Matches sorted by distance, closest first
        """
        ...

    def count(self, namespace: str | None = None) -> int:
        """Number of stored entries, optionally for a single namespace."""
        ...

    def health_check(self) -> bool:
        """Check if the store is reachable."""
        ...

    def get_stats(self) -> dict:
        """Store statistics (implementation-specific)."""
        ...
