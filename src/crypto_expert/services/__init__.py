"""Service layer: business rules over the repositories."""

from .content_cache_service import ContentCacheService
from .market_service import MarketDataService

__all__ = ["ContentCacheService", "MarketDataService"]
