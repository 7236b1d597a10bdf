"""Ollama-based embedding provider.

Uses Ollama's local API to generate embeddings, for deployments that do
not want to load sentence-transformers in-process.

Requirements:
    - Ollama installed: https://ollama.com
    - Model pulled: `ollama pull nomic-embed-text`
"""

import logging

import httpx

from crypto_expert.config import Settings

logger = logging.getLogger(__name__)


class OllamaEmbeddingProvider:
    """Ollama-based implementation of EmbeddingProvider protocol.

    Calls POST {base_url}/api/embed.
    """

    # Known model dimensions (for common models)
    MODEL_DIMENSIONS = {
        "embeddinggemma": 768,
        "nomic-embed-text": 768,
        "mxbai-embed-large": 1024,
        "all-minilm": 384,
    }

    def __init__(
        self,
        model_name: str,
        base_url: str = Settings.ollama_base_url,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Ollama embedding provider.

        Args:
            model_name: Name of the Ollama model
            base_url: Ollama API base URL
            timeout: Request timeout in seconds
            transport: Custom httpx transport (used by tests)
        """
        self._model_name = model_name
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def create(cls, settings: Settings) -> "OllamaEmbeddingProvider":
        """Factory method building the provider from settings."""
        return cls(
            model_name=settings.embedding_model,
            base_url=settings.ollama_base_url,
            timeout=settings.http_timeout,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self._client

    @property
    def dimension(self) -> int:
        """Known dimension for the model; 768 for unknown models."""
        return self.MODEL_DIMENSIONS.get(self._model_name.split(":")[0], 768)

    @property
    def model_name(self) -> str:
        return self._model_name

    async def encode(self, text: str) -> list[float]:
        """Generate embedding vector for a single text.

        Raises:
            RuntimeError: If the Ollama API request fails
            ValueError: If the response format is invalid
        """
        url = f"{self._base_url}/api/embed"
        payload = {"model": self._model_name, "input": text}

        try:
            response = await self.client.post(url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            error_msg = f"Ollama API error: {e}"
            if "connection refused" in str(e).lower():
                error_msg += " (is Ollama running? try: ollama serve)"
            raise RuntimeError(error_msg) from e

        # Ollama returns {"embeddings": [[...]]} for a single input
        if data.get("embeddings"):
            return data["embeddings"][0]
        if "embedding" in data:
            return data["embedding"]
        raise ValueError(f"Unexpected response format: {data}")

    async def is_available(self) -> bool:
        """True if Ollama answers an embedding request."""
        try:
            await self.encode("test")
            return True
        except (RuntimeError, ValueError) as e:
            logger.warning("Ollama embeddings unavailable: %s", e)
            return False

    async def close(self) -> None:
        """Close the async HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
