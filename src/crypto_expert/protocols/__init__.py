"""Protocol interfaces for swappable implementations.

Structural typing keeps the services independent of Redis, of the
embedding backend and of the LLM behind the orchestrator, so tests can
substitute in-memory fakes and a scripted orchestrator.
"""

from .content_store import ContentStore, StoredMatch
from .embedding_provider import EmbeddingProvider
from .orchestrator import Orchestrator

__all__ = [
    "ContentStore",
    "StoredMatch",
    "EmbeddingProvider",
    "Orchestrator",
]
