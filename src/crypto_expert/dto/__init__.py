"""Data Transfer Objects for API and tool contracts.

These Pydantic models define the external contract of the HTTP endpoints
and of every tool offered to the orchestrator. Internal domain logic
should use entities from the entities package.
"""

from .requests import (
    CategoryOverviewParams,
    CategorySearchParams,
    CheckExistingContentParams,
    CoinPlatformsParams,
    CoinsMarketDataParams,
    EmptyParams,
    MarketDataByCategoryParams,
    Platform,
    QueryRequest,
    UpsertContentParams,
)
from .responses import (
    ContentSearchResponse,
    ContentUpsertResponse,
    ErrorResponse,
    HealthResponse,
    QueryResponse,
    SearchHitItem,
)

__all__ = [
    "Platform",
    "QueryRequest",
    "EmptyParams",
    "CategorySearchParams",
    "CategoryOverviewParams",
    "CoinsMarketDataParams",
    "MarketDataByCategoryParams",
    "CoinPlatformsParams",
    "CheckExistingContentParams",
    "UpsertContentParams",
    "SearchHitItem",
    "ContentSearchResponse",
    "ContentUpsertResponse",
    "QueryResponse",
    "ErrorResponse",
    "HealthResponse",
]
