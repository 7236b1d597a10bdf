"""CoinGecko REST client.

Thin async transport over the public CoinGecko v3 API. Each method maps to a
single endpoint and returns the parsed JSON body; filtering and ranking
policies live in MarketDataService.

Endpoints used:
- /coins/categories/list                 (category ids and names)
- /coins/categories                      (categories with market metadata)
- /coins/markets                         (market data)
- /coins/list?include_platform=true      (coins with platform addresses)
"""

import logging
from typing import Any

import httpx

from crypto_expert.config import Settings
from crypto_expert.errors import UpstreamFetchError

logger = logging.getLogger(__name__)


class CoinGeckoClient:
    """Async client for the CoinGecko API.

    Any transport error, non-2xx status or non-JSON body raises
    UpstreamFetchError. There is no retry and no partial result.

    Example:
        ```python
        client = CoinGeckoClient.create(settings)
        markets = await client.get_markets({"vs_currency": "usd", "ids": "bitcoin"})
        await client.close()
        ```
    """

    def __init__(
        self,
        base_url: str = Settings.coingecko_base_url,
        api_key: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the CoinGecko client.

        Args:
            base_url: API root, e.g. https://api.coingecko.com/api/v3
            api_key: Optional demo API key, sent as x-cg-demo-api-key
            timeout: Request timeout in seconds
            transport: Custom httpx transport (used by tests)
        """
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def create(cls, settings: Settings) -> "CoinGeckoClient":
        """Factory method building the client from settings."""
        return cls(
            base_url=settings.coingecko_base_url,
            api_key=settings.coingecko_api_key,
            timeout=settings.http_timeout,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            headers = {"accept": "application/json"}
            if self._api_key:
                headers["x-cg-demo-api-key"] = self._api_key
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=headers,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        try:
            response = await self.client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise UpstreamFetchError(
                f"CoinGecko {path} returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamFetchError(f"CoinGecko {path} request failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamFetchError(f"CoinGecko {path} returned a non-JSON body") from e

    async def _get_list(self, path: str, params: dict[str, Any] | None = None) -> list[Any]:
        data = await self._get_json(path, params)
        if not isinstance(data, list):
            raise UpstreamFetchError(
                f"CoinGecko {path} returned {type(data).__name__}, expected a list"
            )
        return data

    async def get_category_list(self) -> list[dict[str, Any]]:
        """All categories as {category_id, name} objects."""
        return await self._get_list("/coins/categories/list")

    async def get_categories(self, order: str | None = None) -> list[dict[str, Any]]:
        """All categories with market cap, volume and top coins."""
        params = {"order": order} if order else None
        return await self._get_list("/coins/categories", params)

    async def get_markets(self, params: dict[str, Any]) -> list[dict[str, Any]]:
        """Market data for coins, filtered by the given query parameters."""
        return await self._get_list("/coins/markets", params)

    async def get_coins_with_platforms(self) -> list[dict[str, Any]]:
        """Every coin with its platform -> contract address mapping."""
        return await self._get_list("/coins/list", {"include_platform": "true"})

    async def close(self) -> None:
        """Close the async HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
