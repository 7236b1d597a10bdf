"""Cache-aware answer workflow.

Per query the workflow walks a fixed state machine:

    CHECK_CACHE -> DECISION -> RETURN_CACHED                 (hit)
                           -> FETCH_FRESH -> STORE_RESULT    (miss)

The cache check always runs first, and the store always runs last on the
fresh path and never on the cached path. The orchestrator only chooses
among the fetch tools, so it cannot skip or reorder the cache steps.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from crypto_expert.entities import FinalAnswer, PromptState, SearchHit, ToolInvocation
from crypto_expert.errors import AgentError, StoreError
from crypto_expert.protocols import Orchestrator
from crypto_expert.services import ContentCacheService
from crypto_expert.tools import FETCH, ToolRegistry

from .orchestrator import normalize_topic

logger = logging.getLogger(__name__)


class WorkflowState(str, Enum):
    CHECK_CACHE = "check_cache"
    DECISION = "decision"
    RETURN_CACHED = "return_cached"
    FETCH_FRESH = "fetch_fresh"
    STORE_RESULT = "store_result"


@dataclass
class WorkflowResult:
    """Answer to one query plus a trace of how it was produced."""

    query: str
    topic: str
    answer: str
    source: str  # "cache" or "fresh"
    hits: list[SearchHit] = field(default_factory=list)
    tool_calls: list[ToolInvocation] = field(default_factory=list)
    stored: bool = False
    entry_id: str | None = None
    states: list[WorkflowState] = field(default_factory=list)

    @property
    def from_cache(self) -> bool:
        return self.source == "cache"


class CachedAnswerWorkflow:
    """Check-before-fetch, store-after-fetch answering.

    Example:
        ```python
        workflow = CachedAnswerWorkflow(orchestrator, registry, cache)
        result = await workflow.run("What are the top DeFi coins?")
        print(result.answer, result.source)
        ```
    """

    def __init__(
        self,
        orchestrator: Orchestrator,
        registry: ToolRegistry,
        cache: ContentCacheService,
        threshold: float | None = None,
        search_limit: int = 2,
        max_steps: int = 8,
    ) -> None:
        """Initialize the workflow.

        Args:
            orchestrator: Chooses tool calls and writes the answer
            registry: All tools; only the fetch tools are offered to the orchestrator
            cache: Content cache used for the check and store steps
            threshold: Minimum score for a cached answer (defaults to the cache's)
            search_limit: Hits requested in the cache check
            max_steps: Maximum tool calls in the fetch loop
        """
        self._orchestrator = orchestrator
        self._fetch_tools = registry.subset(FETCH)
        self._cache = cache
        self._threshold = cache.threshold if threshold is None else threshold
        self._search_limit = search_limit
        self._max_steps = max_steps

    async def run(self, query: str) -> WorkflowResult:
        """Answer a query, from the cache when a close enough entry exists.

        Raises:
            StoreError: If the cache check fails
            AgentError: If the orchestrator fails or exceeds max_steps
        """
        topic = normalize_topic(await self._orchestrator.infer_topic(query)) or normalize_topic(query)
        result = WorkflowResult(query=query, topic=topic, answer="", source="fresh")

        result.states.append(WorkflowState.CHECK_CACHE)
        search = await self._cache.search(topic, limit=self._search_limit)
        result.hits = list(search.results)

        result.states.append(WorkflowState.DECISION)
        best = search.best_above(self._threshold)
        if best is not None:
            result.states.append(WorkflowState.RETURN_CACHED)
            result.answer = str(best.metadata.get("chunk_text", ""))
            result.source = "cache"
            result.entry_id = best.id
            logger.info("Answering %r from cache (score %.3f, id %s)", topic, best.score, best.id)
            return result

        result.states.append(WorkflowState.FETCH_FRESH)
        result.answer = await self._fetch_fresh(query, topic, result)

        result.states.append(WorkflowState.STORE_RESULT)
        try:
            stored = await self._cache.upsert(content=result.answer, topic=topic)
        except StoreError as e:
            # The answer is still returned; caching is best-effort
            logger.error("Failed to cache answer for %r: %s", topic, e.message)
        else:
            result.stored = True
            result.entry_id = stored.id

        return result

    async def _fetch_fresh(self, query: str, topic: str, result: WorkflowResult) -> str:
        state = PromptState(query=query, topic=topic)

        for _ in range(self._max_steps):
            decision = await self._orchestrator.choose_and_invoke(self._fetch_tools, state)
            if isinstance(decision, FinalAnswer):
                if not decision.text.strip():
                    raise AgentError("Orchestrator returned an empty answer")
                return decision.text

            logger.info("Calling tool %s %s", decision.name, decision.arguments)
            result.tool_calls.append(decision)
            tool_result = await self._fetch_tools.invoke(decision.name, decision.arguments)
            state.record(decision, tool_result)

        raise AgentError(f"No answer after {self._max_steps} tool calls")
