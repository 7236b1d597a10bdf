"""Market data service.

Business rules on top of the CoinGecko transport: keyword filtering of
categories, the top-30-by-market-cap policy for category lookups and the
platform whitelist. Progress is reported through logging (start, success,
failure); failures always propagate to the caller.
"""

import logging
from typing import Any

from crypto_expert.entities import CategoryRecord
from crypto_expert.dto import Platform
from crypto_expert.errors import InputValidationError, UpstreamFetchError
from crypto_expert.repositories import CoinGeckoClient

logger = logging.getLogger(__name__)

TOP_CATEGORY_COINS = 30


def _query_params(**params: str | None) -> dict[str, str]:
    return {key: value for key, value in params.items() if value}


class MarketDataService:
    """Category and market lookups against CoinGecko.

    Example:
        ```python
        service = MarketDataService(CoinGeckoClient.create(settings))
        defi = await service.fetch_categories(["defi"])
        top = await service.fetch_top_by_category("layer-1")
        ```
    """

    def __init__(self, client: CoinGeckoClient) -> None:
        self._client = client

    async def fetch_categories(self, keywords: list[str] | None = None) -> list[CategoryRecord]:
        """Fetch every category, optionally keeping only keyword matches.

        A category is kept if any keyword (case-insensitive) is a substring
        of its name or of its category_id. Blank keywords are ignored; no
        keywords at all returns the full list.

        Args:
            keywords: Optional keywords to filter by

        Returns:
            Matching categories in upstream order

        Raises:
            UpstreamFetchError: On network failure or an unexpected payload
        """
        logger.info("Fetching cryptocurrency categories...")
        try:
            payload = await self._client.get_category_list()
            categories = [self._to_category(item) for item in payload]
        except UpstreamFetchError:
            logger.error("Failed to fetch categories", exc_info=True)
            raise
        logger.info("Categories fetched successfully (%d)", len(categories))

        terms = [k.strip() for k in keywords or [] if k and k.strip()]
        if not terms:
            return categories
        return [c for c in categories if any(c.matches(term) for term in terms)]

    @staticmethod
    def _to_category(item: Any) -> CategoryRecord:
        try:
            return CategoryRecord(category_id=str(item["category_id"]), name=str(item["name"]))
        except (KeyError, TypeError) as e:
            raise UpstreamFetchError(f"Malformed category record: {item!r}") from e

    async def fetch_category_overview(self, order: str | None = None) -> list[dict[str, Any]]:
        """Categories with market cap, volume and top coins."""
        logger.info("Fetching category overview...")
        try:
            data = await self._client.get_categories(order=order)
        except UpstreamFetchError:
            logger.error("Failed to fetch category overview", exc_info=True)
            raise
        logger.info("Category overview fetched successfully (%d)", len(data))
        return data

    async def fetch_market_data(
        self,
        vs_currency: str = "usd",
        ids: str | None = None,
        names: str | None = None,
        category: str | None = None,
    ) -> list[dict[str, Any]]:
        """Market data, narrowed by the optional filters.

        Filters are passed to CoinGecko as-is; how they combine is up to
        the upstream API.
        """
        params = _query_params(vs_currency=vs_currency or "usd", ids=ids, names=names, category=category)
        return await self._fetch_markets(params)

    async def fetch_top_by_category(
        self,
        category: str | None = None,
        vs_currency: str = "usd",
    ) -> list[dict[str, Any]]:
        """Top 30 coins of a category by market cap, descending.

        Ties keep upstream order.
        """
        params = _query_params(vs_currency=vs_currency or "usd", category=category)
        params.update(order="market_cap_desc", per_page=str(TOP_CATEGORY_COINS), page="1")
        return await self._fetch_markets(params)

    async def _fetch_markets(self, params: dict[str, str]) -> list[dict[str, Any]]:
        logger.info("Fetching market data %s", params)
        try:
            data = await self._client.get_markets(params)
        except UpstreamFetchError:
            logger.error("Failed to fetch market data", exc_info=True)
            raise
        logger.info("Market data fetched successfully (%d coins)", len(data))
        return data

    async def fetch_coins_on_platform(self, platform: Platform | str) -> list[dict[str, Any]]:
        """Coins with a contract address on the given platform.

        Args:
            platform: One of the supported Platform values

        Raises:
            InputValidationError: For an unsupported platform, before any request
            UpstreamFetchError: On network failure or an unexpected payload
        """
        try:
            key = Platform(platform).value
        except ValueError as e:
            supported = ", ".join(p.value for p in Platform)
            raise InputValidationError(
                f"Unsupported platform {platform!r}; expected one of: {supported}"
            ) from e

        logger.info("Fetching coins on platform %s...", key)
        try:
            coins = await self._client.get_coins_with_platforms()
        except UpstreamFetchError:
            logger.error("Failed to fetch coin platforms", exc_info=True)
            raise

        matching = [
            coin
            for coin in coins
            if isinstance(coin, dict) and isinstance(coin.get("platforms"), dict) and coin["platforms"].get(key)
        ]
        logger.info("Coin platforms fetched successfully (%d on %s)", len(matching), key)
        return matching
