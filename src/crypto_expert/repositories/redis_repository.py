"""Redis implementation of ContentStore.

Uses Redis Stack vector search (HNSW, COSINE) through redisvl. Namespaces
are modelled as a tag field declared with a "|" separator, so topics that
contain commas stay a single tag.
"""

import json
import logging
import struct
from typing import Any

import redis
from redisvl.index import SearchIndex
from redisvl.query import VectorQuery
from redisvl.query.filter import Tag

from crypto_expert.config import Settings, get_redis_client
from crypto_expert.entities import ContentEntry
from crypto_expert.entities.content_entry import CORE_FIELDS
from crypto_expert.errors import StoreError
from crypto_expert.protocols import StoredMatch

logger = logging.getLogger(__name__)

# Default dimension for paraphrase-multilingual-MiniLM-L12-v2
DEFAULT_DIMENSION = 384

# redis-py replaces a hash field named "id" with the document key, so the
# entry id lives under "entry_id"
ENTRY_ID_FIELD = "entry_id"

RETURN_FIELDS = [ENTRY_ID_FIELD, "chunk_text", "topic", "source", "timestamp", "metadata"]


def build_index_schema(index_name: str, dimension: int) -> dict[str, Any]:
    """redisvl schema dict for the content index."""
    return {
        "index": {
            "name": index_name,
            "prefix": f"{index_name}:",
            "storage_type": "hash",
        },
        "fields": [
            {"name": ENTRY_ID_FIELD, "type": "tag"},
            {"name": "namespace", "type": "tag", "attrs": {"separator": "|"}},
            {"name": "chunk_text", "type": "text"},
            {"name": "topic", "type": "text"},
            {"name": "source", "type": "tag"},
            {"name": "timestamp", "type": "tag"},
            {"name": "metadata", "type": "text"},
            {
                "name": "content_vector",
                "type": "vector",
                "attrs": {
                    "dims": dimension,
                    "algorithm": "HNSW",
                    "metric": "COSINE",
                },
            },
        ],
    }


def entry_to_mapping(entry: ContentEntry, vector: list[float]) -> dict[str, Any]:
    """Hash fields written for an entry."""
    extra = {k: v for k, v in entry.extra.items() if k not in CORE_FIELDS}
    return {
        ENTRY_ID_FIELD: entry.id,
        "namespace": entry.namespace,
        "chunk_text": entry.chunk_text,
        "topic": entry.topic,
        "source": entry.source,
        "timestamp": entry.timestamp,
        "metadata": json.dumps(extra, default=str),
        "content_vector": struct.pack(f"{len(vector)}f", *vector),
    }


def result_to_match(result: dict[str, Any]) -> StoredMatch:
    """Convert one redisvl search result into (entry id, distance, fields).

    The result's own "id" is the Redis key and is ignored.
    """
    distance = float(result.get("vector_distance", 2.0))
    fields: dict[str, Any] = {}
    if result.get("metadata"):
        try:
            fields.update(json.loads(result["metadata"]))
        except json.JSONDecodeError:
            fields["raw"] = result["metadata"]

    entry_id = result.get(ENTRY_ID_FIELD, "")
    fields["id"] = entry_id
    for name in CORE_FIELDS:
        if name != "id":
            fields[name] = result.get(name, "")
    return entry_id, distance, fields


class RedisContentRepository:
    """Redis implementation using an HNSW vector index.

    This class satisfies the ContentStore protocol through structural
    typing - no explicit inheritance needed.

    Layout:
    - index name and key prefix: settings.cache_index_name
    - key: "<index>:<namespace>:<entry id>"
    - fields: entry_id, namespace, chunk_text, topic, source, timestamp,
      metadata (JSON of caller metadata), content_vector
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        index_name: str,
        dimension: int = DEFAULT_DIMENSION,
    ) -> None:
        """Initialize the Redis content repository.

        The index is not touched here; call ensure_index() once at startup.

        Args:
            redis_client: Redis client instance
            index_name: Name of the Redis search index
            dimension: Embedding vector dimension
        """
        self._client = redis_client
        self._index_name = index_name
        self._dimension = dimension
        self._index = SearchIndex.from_dict(
            build_index_schema(index_name, dimension),
            redis_client=redis_client,
        )

    @classmethod
    def create(cls, settings: Settings, dimension: int = DEFAULT_DIMENSION) -> "RedisContentRepository":
        """Factory method: build the repository and provision its index.

        Args:
            settings: Application settings
            dimension: Embedding dimension, taken from the embedding provider

        Returns:
            Configured RedisContentRepository with its index in place
        """
        repository = cls(
            redis_client=get_redis_client(settings),
            index_name=settings.cache_index_name,
            dimension=dimension,
        )
        repository.ensure_index()
        return repository

    def ensure_index(self) -> None:
        """Create the index if it does not exist yet."""
        try:
            if self._index.exists():
                logger.info("Using existing index: %s", self._index_name)
                return
            self._index.create(overwrite=False)
            logger.info("Created new index: %s (dims=%d)", self._index_name, self._dimension)
        except Exception as e:
            raise StoreError(f"Failed to provision index {self._index_name}: {e}") from e

    def _key(self, namespace: str, entry_id: str) -> str:
        return f"{self._index_name}:{namespace}:{entry_id}"

    def upsert(self, entry: ContentEntry, vector: list[float]) -> str:
        """Store an entry in its topic namespace.

        Args:
            entry: The content entry
            vector: Embedding of entry.topic

        Returns:
            The entry id
        """
        if len(vector) != self._dimension:
            raise StoreError(
                f"Vector dimension {len(vector)} does not match index dimension {self._dimension}"
            )

        try:
            self._client.hset(
                self._key(entry.namespace, entry.id),
                mapping=entry_to_mapping(entry, vector),
            )
        except Exception as e:
            raise StoreError(f"Failed to upsert {entry.id}: {e}") from e

        return entry.id

    def query(
        self,
        vector: list[float],
        top_k: int,
        namespace: str | None = None,
    ) -> list[StoredMatch]:
        """Nearest entries, closest first, optionally within one namespace."""
        query = VectorQuery(
            vector=vector,
            vector_field_name="content_vector",
            return_fields=RETURN_FIELDS,
            filter_expression=Tag("namespace") == namespace if namespace else None,
            num_results=top_k,
        )

        try:
            results = self._index.query(query)
        except Exception as e:
            raise StoreError(f"Vector search failed: {e}") from e

        matches = [result_to_match(result) for result in results]
        matches.sort(key=lambda m: m[1])
        return matches[:top_k]

    def count(self, namespace: str | None = None) -> int:
        """Count stored entries, optionally for one namespace."""
        pattern = f"{self._index_name}:{namespace}:*" if namespace else f"{self._index_name}:*"
        try:
            return sum(1 for _ in self._client.scan_iter(match=pattern))
        except Exception as e:
            raise StoreError(f"Failed to count entries: {e}") from e

    def health_check(self) -> bool:
        """Check if Redis is accessible."""
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False

    def get_stats(self) -> dict:
        """Repository statistics."""
        return {
            "index_name": self._index_name,
            "dimension": self._dimension,
            "total_entries": self.count(),
        }

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client
