"""Repository layer for data access.

This layer hides external dependencies (CoinGecko, Redis, embedding
backends) behind small classes. The cache-side repositories are
protocol-based: any class implementing the required methods satisfies
ContentStore / EmbeddingProvider.
"""

from crypto_expert.config import Settings
from crypto_expert.protocols import ContentStore, EmbeddingProvider

from .coingecko_client import CoinGeckoClient
from .local_embedding_provider import LocalEmbeddingProvider
from .ollama_embedding_provider import OllamaEmbeddingProvider
from .redis_repository import RedisContentRepository


def create_embedding_provider(settings: Settings) -> EmbeddingProvider:
    """Embedding provider selected by settings.embedding_provider."""
    if settings.embedding_provider == "ollama":
        return OllamaEmbeddingProvider.create(settings)
    return LocalEmbeddingProvider.create(settings)


__all__ = [
    "ContentStore",
    "EmbeddingProvider",
    "CoinGeckoClient",
    "RedisContentRepository",
    "LocalEmbeddingProvider",
    "OllamaEmbeddingProvider",
    "create_embedding_provider",
]
