"""The crypto expert's tools, bound to the services."""

from dataclasses import asdict

from crypto_expert.dto import (
    CategoryOverviewParams,
    CategorySearchParams,
    CheckExistingContentParams,
    CoinPlatformsParams,
    CoinsMarketDataParams,
    ContentSearchResponse,
    ContentUpsertResponse,
    MarketDataByCategoryParams,
    UpsertContentParams,
)
from crypto_expert.services import ContentCacheService, MarketDataService

from .registry import CACHE, ToolRegistry, ToolSpec


def build_tool_registry(market: MarketDataService, cache: ContentCacheService) -> ToolRegistry:
    """Registry with every market-data and content-cache tool."""

    async def category_search(params: CategorySearchParams) -> list[dict]:
        categories = await market.fetch_categories(params.keywords)
        return [asdict(category) for category in categories]

    async def category_overview(params: CategoryOverviewParams) -> list[dict]:
        return await market.fetch_category_overview(order=params.order)

    async def coins_market_data(params: CoinsMarketDataParams) -> list[dict]:
        return await market.fetch_market_data(
            vs_currency=params.vs_currency,
            ids=params.ids,
            names=params.names,
            category=params.category,
        )

    async def market_data_by_category(params: MarketDataByCategoryParams) -> list[dict]:
        return await market.fetch_top_by_category(
            category=params.category,
            vs_currency=params.vs_currency,
        )

    async def coin_platforms(params: CoinPlatformsParams) -> list[dict]:
        return await market.fetch_coins_on_platform(params.platform)

    async def check_existing_content(params: CheckExistingContentParams) -> dict:
        result = await cache.search(params.topic, limit=params.limit)
        return ContentSearchResponse.from_entity(result).model_dump()

    async def upsert_content(params: UpsertContentParams) -> dict:
        result = await cache.upsert(
            content=params.content,
            topic=params.topic,
            source=params.source,
            metadata=params.metadata,
        )
        return ContentUpsertResponse.from_entity(result).model_dump()

    return ToolRegistry(
        [
            ToolSpec(
                name="category_search",
                description=(
                    "Get the list of cryptocurrency categories (id and name). "
                    "Pass keywords to keep only categories whose name or id contains one of them."
                ),
                params_model=CategorySearchParams,
                handler=category_search,
            ),
            ToolSpec(
                name="category_overview",
                description=(
                    "Get cryptocurrency categories with market cap, 24h volume and top coins. "
                    "Optionally pass an order such as market_cap_desc."
                ),
                params_model=CategoryOverviewParams,
                handler=category_overview,
            ),
            ToolSpec(
                name="coins_market_data",
                description=(
                    "Get the market data for all cryptocurrencies. If only interested in a specific "
                    "category pass it as a parameter, and if only interested on certain coins pass "
                    "their ids or names as a parameter"
                ),
                params_model=CoinsMarketDataParams,
                handler=coins_market_data,
            ),
            ToolSpec(
                name="market_data_by_category",
                description=(
                    "Get the top 30 cryptocurrencies by market cap in a specific category, "
                    "with their market data."
                ),
                params_model=MarketDataByCategoryParams,
                handler=market_data_by_category,
            ),
            ToolSpec(
                name="coin_platforms",
                description=(
                    "Get the list of coins for a given platform. Make sure to always provide a "
                    "platform relevant to what the user is asking for"
                ),
                params_model=CoinPlatformsParams,
                handler=coin_platforms,
            ),
            ToolSpec(
                name="check_existing_content",
                description=(
                    "Check if there is existing content in the database related to a specific topic "
                    "with high similarity score."
                ),
                params_model=CheckExistingContentParams,
                handler=check_existing_content,
                kind=CACHE,
            ),
            ToolSpec(
                name="upsert_content",
                description=(
                    "Upsert content to the database with metadata for future retrieval. Format the "
                    "content as JSON that is easy to parse and understand."
                ),
                params_model=UpsertContentParams,
                handler=upsert_content,
                kind=CACHE,
            ),
        ]
    )

