"""Dependency injection configuration for the FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - The agent stack is built once in the lifespan (or injected by tests)
    - Dependency functions retrieve from request.app.state
    - No global mutable state
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from crypto_expert.agent import CachedAnswerWorkflow, LLMOrchestrator
from crypto_expert.config import Settings
from crypto_expert.handlers import QueryHandler
from crypto_expert.plugin import CoinGeckoPlugin
from crypto_expert.protocols import EmbeddingProvider
from crypto_expert.repositories import (
    CoinGeckoClient,
    RedisContentRepository,
    create_embedding_provider,
)
from crypto_expert.services import ContentCacheService, MarketDataService
from crypto_expert.tools import ToolRegistry, build_tool_registry

from .rate_limit import SlidingWindowRateLimiter, client_key

logger = logging.getLogger(__name__)


@dataclass
class AgentStack:
    """Every long-lived object of one running agent."""

    client: CoinGeckoClient
    embedding_provider: EmbeddingProvider
    market: MarketDataService
    cache: ContentCacheService
    registry: ToolRegistry
    plugin: CoinGeckoPlugin
    workflow: CachedAnswerWorkflow | None = None

    async def aclose(self) -> None:
        await self.client.close()
        close = getattr(self.embedding_provider, "close", None)
        if close is not None:
            await close()


def build_stack(settings: Settings, with_workflow: bool = True) -> AgentStack:
    """Wire every layer from settings.

    1. Repositories (CoinGecko transport, embeddings, Redis index)
    2. Services (market data, content cache)
    3. Tool registry, orchestrator and workflow
    4. Chat plugin sharing the market data service

    With ``with_workflow=False`` no orchestrator is built, so direct tool
    calls work without an OpenAI key.
    """
    client = CoinGeckoClient.create(settings)
    embedding_provider = create_embedding_provider(settings)
    repository = RedisContentRepository.create(settings, dimension=embedding_provider.dimension)

    market = MarketDataService(client)
    cache = ContentCacheService.create(
        repository=repository,
        embedding_provider=embedding_provider,
        settings=settings,
    )
    registry = build_tool_registry(market, cache)
    workflow = None
    if with_workflow:
        workflow = CachedAnswerWorkflow(
            orchestrator=LLMOrchestrator.create(settings),
            registry=registry,
            cache=cache,
            search_limit=settings.cache_search_limit,
            max_steps=settings.agent_max_steps,
        )

    return AgentStack(
        client=client,
        embedding_provider=embedding_provider,
        market=market,
        cache=cache,
        registry=registry,
        plugin=CoinGeckoPlugin(market),
        workflow=workflow,
    )


def get_settings_dep(request: Request) -> Settings:
    """Dependency injection for Settings from app.state."""
    return request.app.state.settings


def get_query_handler(request: Request) -> QueryHandler:
    """Dependency injection for QueryHandler from app.state.

    Raises:
        RuntimeError: If the handler is not initialized
    """
    handler = getattr(request.app.state, "query_handler", None)
    if handler is None:
        raise RuntimeError("QueryHandler not initialized. Check lifespan setup.")
    return handler


def enforce_rate_limit(request: Request) -> None:
    """Reject the request when the client is over its quota (no-op when disabled)."""
    limiter: SlidingWindowRateLimiter | None = getattr(request.app.state, "rate_limiter", None)
    if limiter is not None:
        limiter.check(client_key(request))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the agent stack unless the handler and plugin were injected.

    Stores in app.state:
    - stack: AgentStack (only when built here)
    - query_handler: QueryHandler for POST /query
    - plugin: CoinGeckoPlugin for the plugin routes
    """
    settings: Settings = app.state.settings
    stack: AgentStack | None = None

    injected = getattr(app.state, "query_handler", None) is not None
    if not injected:
        stack = build_stack(settings)
        app.state.stack = stack
        app.state.query_handler = QueryHandler(
            workflow=stack.workflow,
            max_query_length=settings.max_query_length,
        )
        if getattr(app.state, "plugin", None) is None:
            app.state.plugin = stack.plugin
        logger.info("Agent stack initialized")
        logger.info("Cache threshold: %s", stack.cache.threshold)
        logger.info("LLM model: %s", settings.llm_model)

    yield

    if stack is not None:
        await stack.aclose()
        del app.state.stack
        del app.state.query_handler
        if getattr(app.state, "plugin", None) is stack.plugin:
            del app.state.plugin
        logger.info("Agent stack shut down")


# Type aliases for cleaner dependency injection
QueryHandlerDep = Annotated[QueryHandler, Depends(get_query_handler)]
SettingsDep = Annotated[Settings, Depends(get_settings_dep)]
