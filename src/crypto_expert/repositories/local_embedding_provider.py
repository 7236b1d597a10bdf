"""Local sentence-transformers embedding provider.

This is the default embedding provider, using sentence-transformers
models running locally. No API calls required.
"""

import asyncio
import logging
import time

import numpy as np
from sentence_transformers import SentenceTransformer

from crypto_expert.config import Settings

logger = logging.getLogger(__name__)


class LocalEmbeddingProvider:
    """Local sentence-transformers implementation of EmbeddingProvider.

    Default model: paraphrase-multilingual-MiniLM-L12-v2 (384 dimensions).
    Embeddings are normalized so cosine distance stays in [0, 2].
    """

    def __init__(self, model_name: str = Settings.embedding_model) -> None:
        """Initialize the local embedding provider.

        Args:
            model_name: Name of the sentence-transformers model.
        """
        self._model_name = model_name
        self._model: SentenceTransformer | None = None
        self._dimension: int | None = None

    @classmethod
    def create(cls, settings: Settings) -> "LocalEmbeddingProvider":
        """Factory method building the provider from settings."""
        return cls(model_name=settings.embedding_model)

    @property
    def model(self) -> SentenceTransformer:
        """Lazy-load the embedding model."""
        if self._model is None:
            logger.info("Loading embedding model: %s", self._model_name)
            start_time = time.time()
            self._model = SentenceTransformer(self._model_name)
            logger.info("Model loaded in %.2fs", time.time() - start_time)
        return self._model

    @property
    def dimension(self) -> int:
        """Get the embedding vector dimension."""
        if self._dimension is None:
            sample_embedding = self.model.encode(["test"], show_progress_bar=False)
            self._dimension = len(sample_embedding[0])
        return self._dimension

    @property
    def model_name(self) -> str:
        return self._model_name

    async def encode(self, text: str) -> list[float]:
        """Generate embedding vector for a single text off the event loop."""
        embedding = await asyncio.to_thread(
            self.model.encode,
            text,
            show_progress_bar=False,
            normalize_embeddings=True,
        )
        if isinstance(embedding, np.ndarray):
            if embedding.ndim == 1:
                return embedding.tolist()
            return embedding[0].tolist()
        return list(embedding)

    async def is_available(self) -> bool:
        """True if the model can be loaded."""
        try:
            _ = self.model
            return True
        except (OSError, ValueError) as e:
            logger.warning("Embedding model %s unavailable: %s", self._model_name, e)
            return False
