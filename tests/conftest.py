"""Shared fixtures: in-memory fakes of the protocols and a mocked CoinGecko."""

import json
import math
from typing import Any

import httpx
import pytest

from crypto_expert.entities import ContentEntry, FinalAnswer, PromptState, ToolInvocation
from crypto_expert.entities.content_entry import CORE_FIELDS
from crypto_expert.errors import StoreError
from crypto_expert.repositories import CoinGeckoClient
from crypto_expert.services import ContentCacheService, MarketDataService

CATEGORIES = [
    {"category_id": "decentralized-finance-defi", "name": "Decentralized Finance (DeFi)"},
    {"category_id": "layer-1", "name": "Layer 1 (L1)"},
    {"category_id": "meme-token", "name": "Meme"},
    {"category_id": "gaming", "name": "Gaming (GameFi)"},
]

COINS = [
    {"id": "usd-coin", "symbol": "usdc", "name": "USDC", "platforms": {"ethereum": "0xa0b8", "solana": "EPjF"}},
    {"id": "bonk", "symbol": "bonk", "name": "Bonk", "platforms": {"solana": "DezX"}},
    {"id": "bitcoin", "symbol": "btc", "name": "Bitcoin", "platforms": {}},
    {"id": "weird", "symbol": "w", "name": "Weird", "platforms": {"ethereum": ""}},
]

MARKETS = [
    {"id": "bitcoin", "symbol": "btc", "market_cap": 1_300_000_000_000},
    {"id": "ethereum", "symbol": "eth", "market_cap": 400_000_000_000},
]


class FakeEmbeddingProvider:
    """Deterministic bag-of-words embeddings; identical texts give identical vectors."""

    def __init__(self, dimension: int = 32) -> None:
        self._dimension = dimension
        self.calls: list[str] = []
        self.fail = False

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_name(self) -> str:
        return "fake-bow"

    async def encode(self, text: str) -> list[float]:
        if self.fail:
            raise RuntimeError("model offline")
        self.calls.append(text)
        vector = [0.0] * self._dimension
        for word in text.lower().split():
            vector[sum(ord(c) for c in word) % self._dimension] += 1.0
        norm = math.sqrt(sum(v * v for v in vector)) or 1.0
        return [v / norm for v in vector]

    async def is_available(self) -> bool:
        return not self.fail


class InMemoryContentStore:
    """ContentStore fake computing exact cosine distances."""

    def __init__(self) -> None:
        self.entries: dict[str, list[tuple[ContentEntry, list[float]]]] = {}
        self.upserts = 0
        self.queries: list[str | None] = []
        self.fail_upsert = False

    def ensure_index(self) -> None:
        pass

    def upsert(self, entry: ContentEntry, vector: list[float]) -> str:
        if self.fail_upsert:
            raise StoreError("index unavailable")
        self.upserts += 1
        self.entries.setdefault(entry.namespace, []).append((entry, vector))
        return entry.id

    def query(
        self,
        vector: list[float],
        top_k: int,
        namespace: str | None = None,
    ) -> list[tuple[str, float, dict]]:
        self.queries.append(namespace)
        if namespace is None:
            candidates = [item for items in self.entries.values() for item in items]
        else:
            candidates = self.entries.get(namespace, [])
        matches = []
        for entry, stored in candidates:
            dot = sum(a * b for a, b in zip(vector, stored))
            norm = math.sqrt(sum(a * a for a in vector)) * math.sqrt(sum(b * b for b in stored))
            distance = 1.0 - (dot / norm if norm else 0.0)
            fields = {k: v for k, v in entry.extra.items() if k not in CORE_FIELDS}
            fields.update({name: getattr(entry, name) for name in CORE_FIELDS})
            matches.append((entry.id, distance, fields))
        matches.sort(key=lambda m: m[1])
        return matches[:top_k]

    def count(self, namespace: str | None = None) -> int:
        if namespace is not None:
            return len(self.entries.get(namespace, []))
        return sum(len(items) for items in self.entries.values())

    def health_check(self) -> bool:
        return True

    def get_stats(self) -> dict:
        return {"index_name": "memory", "total_entries": self.count()}


class ScriptedOrchestrator:
    """Orchestrator replaying a fixed list of decisions."""

    def __init__(self, topic: str, decisions: list[ToolInvocation | FinalAnswer] | None = None) -> None:
        self.topic = topic
        self.decisions = list(decisions or [])
        self.offered_tools: list[list[str]] = []
        self.states: list[PromptState] = []

    async def infer_topic(self, query: str) -> str:
        return self.topic

    async def choose_and_invoke(self, registry, state: PromptState) -> ToolInvocation | FinalAnswer:
        self.offered_tools.append(registry.names)
        self.states.append(state)
        if not self.decisions:
            return ToolInvocation(name="category_search", arguments={})
        return self.decisions.pop(0)


class CoinGeckoStub:
    """httpx.MockTransport handler serving canned CoinGecko payloads."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.overrides: dict[str, httpx.Response] = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api/v3")
        if path in self.overrides:
            return self.overrides[path]
        if path == "/coins/categories/list":
            return httpx.Response(200, json=CATEGORIES)
        if path == "/coins/categories":
            return httpx.Response(200, json=[{"id": c["category_id"], "name": c["name"]} for c in CATEGORIES])
        if path == "/coins/markets":
            return httpx.Response(200, json=MARKETS)
        if path == "/coins/list":
            return httpx.Response(200, content=json.dumps(COINS))
        return httpx.Response(404, json={"error": "not found"})

    @property
    def paths(self) -> list[str]:
        return [r.url.path.removeprefix("/api/v3") for r in self.requests]


@pytest.fixture
def coingecko() -> CoinGeckoStub:
    return CoinGeckoStub()


@pytest.fixture
def market(coingecko: CoinGeckoStub) -> MarketDataService:
    client = CoinGeckoClient(
        base_url="https://api.coingecko.com/api/v3",
        transport=httpx.MockTransport(coingecko),
    )
    return MarketDataService(client)


@pytest.fixture
def embeddings() -> FakeEmbeddingProvider:
    return FakeEmbeddingProvider()


@pytest.fixture
def store() -> InMemoryContentStore:
    return InMemoryContentStore()


@pytest.fixture
def cache(store: InMemoryContentStore, embeddings: FakeEmbeddingProvider) -> ContentCacheService:
    return ContentCacheService(repository=store, embedding_provider=embeddings)
