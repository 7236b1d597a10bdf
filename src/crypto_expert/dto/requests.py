"""Request DTOs for the HTTP endpoint and the tool parameter schemas."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Platform(str, Enum):
    """Asset platforms supported by the coin_platforms tool."""

    ETHEREUM = "ethereum"
    AVALANCHE = "avalanche"
    BASE = "base"
    ARBITRUM_ONE = "arbitrum-one"
    POLYGON_POS = "polygon-pos"
    SOLANA = "solana"


class QueryRequest(BaseModel):
    """Request DTO for POST /query.

    ``query`` is optional here so the handler can answer a missing or empty
    query with the documented 400 body instead of a schema error.
    """

    query: str | None = Field(None, description="Free-text question for the agent")


class EmptyParams(BaseModel):
    """Tools without parameters."""


class CategorySearchParams(BaseModel):
    keywords: list[str] | None = Field(
        None,
        description="Optional keywords; a category matches if any keyword appears in its name or id",
    )


class CategoryOverviewParams(BaseModel):
    order: str | None = Field(
        None,
        description="Optional sort order, e.g. market_cap_desc, name_asc, market_cap_change_24h_desc",
    )


class CoinsMarketDataParams(BaseModel):
    vs_currency: str = Field("usd", description="The currency to use for the market data, 3 letter code")
    ids: str | None = Field(None, description="Comma separated list of coin ids")
    names: str | None = Field(None, description="Comma separated list of coin names")
    category: str | None = Field(None, description="The category of the coins we are searching for")


class MarketDataByCategoryParams(BaseModel):
    vs_currency: str = Field("usd", description="The currency to use for the market data, 3 letter code")
    category: str | None = Field(None, description="The category of the coins we are searching for")


class CoinPlatformsParams(BaseModel):
    platform: Platform = Field(
        ...,
        description=(
            "The platform to get the coins for. Must be one of the supported platforms: "
            "ethereum, avalanche, base, arbitrum-one, polygon-pos, or solana"
        ),
    )


class CheckExistingContentParams(BaseModel):
    topic: str = Field(..., description="The topic to search for in the database", min_length=1)
    limit: int = Field(2, description="Maximum number of results to return", ge=1)


class UpsertContentParams(BaseModel):
    content: str = Field(..., description="The content to store in the database", min_length=1)
    topic: str = Field(..., description="The main topic of the content", min_length=1)
    source: str = Field("agent_response", description="Source of the content")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Additional metadata to store")
