"""Embedding provider protocol.

Converts text to the vectors stored in, and queried against, the
content index. The dimension must match the index schema.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Protocol for embedding generation services."""

    @property
    def dimension(self) -> int:
        """Return the dimension of the embedding vectors."""
        ...

    @property
    def model_name(self) -> str:
        """Return the name/identifier of the model."""
        ...

    async def encode(self, text: str) -> list[float]:
        """Generate the embedding vector for a single text."""
        ...

    async def is_available(self) -> bool:
        """Check if the embedding provider is available."""
        ...
