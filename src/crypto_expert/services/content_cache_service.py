"""Content cache service.

Retrieval side of the check-before-fetch / store-after-fetch workflow. It
coordinates the content store (vector index) and the embedding provider.
"""

import logging
import random
import string
import time
from datetime import datetime, timezone
from typing import Any

from crypto_expert.config import Settings
from crypto_expert.entities import ContentEntry, ContentSearchResult, SearchHit, UpsertResult
from crypto_expert.errors import InputValidationError, StoreError
from crypto_expert.protocols import ContentStore, EmbeddingProvider

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_content_id(now: float | None = None) -> str:
    """Best-effort unique id: "content_<epoch millis>_<9 random base36 chars>".

    Collisions are unlikely but not cryptographically ruled out.
    """
    millis = int((time.time() if now is None else now) * 1000)
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"content_{millis}_{suffix}"


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds, e.g. 2024-05-01T12:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def distance_to_score(distance: float) -> float:
    """Cosine distance (0..2) to a similarity score clamped to [0, 1]."""
    return min(1.0, max(0.0, 1.0 - distance))


class ContentCacheService:
    """Topic-scoped semantic cache of agent answers.

    Depends on PROTOCOLS, not concrete implementations, so the Redis index
    and the embedding backend can be swapped (or faked in tests).

    Example:
        ```python
        cache = ContentCacheService.create(
            repository=RedisContentRepository.create(settings, dimension=provider.dimension),
            embedding_provider=provider,
            settings=settings,
        )
        hits = await cache.search("DeFi category")
        if not hits.best_above():
            await cache.upsert(answer, topic="DeFi category")
        ```
    """

    def __init__(
        self,
        repository: ContentStore,
        embedding_provider: EmbeddingProvider,
        threshold: float = Settings.cache_score_threshold,
        default_limit: int = Settings.cache_search_limit,
    ) -> None:
        """Initialize the content cache service.

        Args:
            repository: Vector store backend
            embedding_provider: Embedding generation service
            threshold: Advisory score threshold reported with every search
            default_limit: Number of hits returned when no limit is given
        """
        self._repository = repository
        self._embeddings = embedding_provider
        self._threshold = threshold
        self._default_limit = default_limit

    @classmethod
    def create(
        cls,
        repository: ContentStore,
        embedding_provider: EmbeddingProvider,
        settings: Settings,
    ) -> "ContentCacheService":
        """Factory method taking threshold and limit from settings."""
        return cls(
            repository=repository,
            embedding_provider=embedding_provider,
            threshold=settings.cache_score_threshold,
            default_limit=settings.cache_search_limit,
        )

    async def _embed(self, text: str) -> list[float]:
        try:
            return await self._embeddings.encode(text)
        except Exception as e:
            raise StoreError(f"Embedding failed ({self._embeddings.model_name}): {e}") from e

    async def search(self, topic: str, limit: int | None = None) -> ContentSearchResult:
        """Cached entries whose topics are closest to ``topic``.

        Business logic:
        1. Embed the topic
        2. Query the whole index for the ``limit`` nearest entries, so
           paraphrased topics still find each other
        3. Convert distances to scores, highest first

        No threshold filtering happens here: all ``limit`` nearest hits are
        returned and the caller decides what is good enough.

        Args:
            topic: Topic string used as query text
            limit: Maximum number of hits (default from settings, 2)

        Returns:
            ContentSearchResult with found/count/results/topic/threshold

        Raises:
            InputValidationError: Blank topic or limit below 1
            StoreError: If the store or the embedding model fails
        """
        limit = self._default_limit if limit is None else limit
        if not topic or not topic.strip():
            raise InputValidationError("Topic must not be empty")
        if limit < 1:
            raise InputValidationError(f"Limit must be at least 1, got {limit}")

        vector = await self._embed(topic)
        matches = self._repository.query(vector=vector, top_k=limit)

        hits = [
            SearchHit(id=entry_id, score=distance_to_score(distance), metadata=fields)
            for entry_id, distance, fields in matches
        ]
        hits.sort(key=lambda hit: hit.score, reverse=True)
        hits = hits[:limit]

        if hits:
            logger.info("Found %d existing content items for topic %r", len(hits), topic)
        else:
            logger.info("No existing content found for topic %r", topic)

        return ContentSearchResult(topic=topic, results=hits, threshold=self._threshold)

    async def upsert(
        self,
        content: str,
        topic: str,
        source: str = "agent_response",
        metadata: dict[str, Any] | None = None,
    ) -> UpsertResult:
        """Store content in the topic's namespace.

        Repeated topics share a namespace and accumulate entries; there is
        no cap and no eviction.

        Args:
            content: Text to cache
            topic: Topic (namespace) of the content
            source: Origin of the content
            metadata: Extra fields stored alongside the core fields

        Returns:
            UpsertResult with the generated id and write timestamp

        Raises:
            InputValidationError: Blank content or topic
            StoreError: If the store or the embedding model fails
        """
        if not content or not content.strip():
            raise InputValidationError("Content must not be empty")
        if not topic or not topic.strip():
            raise InputValidationError("Topic must not be empty")

        entry = ContentEntry(
            id=generate_content_id(),
            chunk_text=content,
            topic=topic,
            source=source or "agent_response",
            timestamp=utc_timestamp(),
            extra=dict(metadata or {}),
        )
        # Indexed by the topic embedding; chunk_text is payload only
        vector = await self._embed(topic)
        entry_id = self._repository.upsert(entry, vector)
        logger.info("Content stored successfully (ID: %s, topic: %r)", entry_id, topic)

        return UpsertResult(
            success=True,
            id=entry_id,
            topic=topic,
            content_length=len(content),
            timestamp=entry.timestamp,
        )

    async def is_healthy(self) -> bool:
        """True if both the store and the embedding model are reachable."""
        return self._repository.health_check() and await self._embeddings.is_available()

    def get_stats(self) -> dict:
        stats = self._repository.get_stats()
        stats["score_threshold"] = self._threshold
        stats["embedding_model"] = self._embeddings.model_name
        stats["embedding_dimension"] = self._embeddings.dimension
        return stats

    @property
    def threshold(self) -> float:
        """Advisory score threshold."""
        return self._threshold

    @property
    def repository(self) -> ContentStore:
        return self._repository
