"""Crypto Expert Agent - cryptocurrency Q&A with a semantic content cache.

This package provides a layered architecture:

Layers:
    - protocols: Interface contracts (ContentStore, EmbeddingProvider, Orchestrator)
    - repositories: Data access (CoinGecko, Redis vector index, embeddings)
    - services: Business logic (market data, content cache)
    - tools: Named, schema-described tools offered to the LLM
    - agent: Orchestrator and the check-before-fetch workflow
    - handlers: HTTP endpoint handlers
    - plugin: Chat-plugin actions and debug routes
    - dto: Data transfer objects (API and tool contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from crypto_expert.api.dependencies import build_stack
    from crypto_expert.config import get_settings

    stack = build_stack(get_settings())
    result = await stack.workflow.run("What are the top DeFi coins?")
    ```

For HTTP API:
    ```python
    from crypto_expert.api import create_app
    ```
"""

from crypto_expert.agent import CachedAnswerWorkflow, LLMOrchestrator
from crypto_expert.config import Settings, get_settings
from crypto_expert.errors import (
    AgentError,
    CryptoExpertError,
    InputValidationError,
    StoreError,
    UpstreamFetchError,
)
from crypto_expert.protocols import ContentStore, EmbeddingProvider, Orchestrator
from crypto_expert.results import ToolFailure, ToolResult
from crypto_expert.services import ContentCacheService, MarketDataService
from crypto_expert.tools import ToolRegistry, build_tool_registry

__all__ = [
    # Configuration
    "Settings",
    "get_settings",
    # Errors and results
    "CryptoExpertError",
    "UpstreamFetchError",
    "InputValidationError",
    "StoreError",
    "AgentError",
    "ToolFailure",
    "ToolResult",
    # Protocols (interfaces)
    "ContentStore",
    "EmbeddingProvider",
    "Orchestrator",
    # Services (business logic)
    "MarketDataService",
    "ContentCacheService",
    # Tools and agent
    "ToolRegistry",
    "build_tool_registry",
    "LLMOrchestrator",
    "CachedAnswerWorkflow",
]
