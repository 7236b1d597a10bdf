"""
Tests for the check-before-fetch workflow.
"""

import pytest

from crypto_expert.agent import CachedAnswerWorkflow, WorkflowState, normalize_topic
from crypto_expert.entities import FinalAnswer, ToolInvocation
from crypto_expert.errors import AgentError
from crypto_expert.tools import build_tool_registry

from .conftest import ScriptedOrchestrator

FETCH_TOOLS = [
    "category_search",
    "category_overview",
    "coins_market_data",
    "market_data_by_category",
    "coin_platforms",
]


def make_workflow(orchestrator, market, cache, **kwargs):
    return CachedAnswerWorkflow(
        orchestrator=orchestrator,
        registry=build_tool_registry(market, cache),
        cache=cache,
        **kwargs,
    )


async def test_cache_hit_skips_fetch_and_store(market, cache, store, coingecko):
    """A hit above the threshold is returned verbatim with no tool calls."""
    await cache.upsert("Cached DeFi answer", topic="top defi coins")
    orchestrator = ScriptedOrchestrator("top defi coins")
    workflow = make_workflow(orchestrator, market, cache)

    result = await workflow.run("What are the top DeFi coins?")

    assert result.from_cache is True
    assert result.answer == "Cached DeFi answer"
    assert result.tool_calls == []
    assert orchestrator.offered_tools == []
    assert coingecko.requests == []
    assert store.upserts == 1
    assert result.states == [
        WorkflowState.CHECK_CACHE,
        WorkflowState.DECISION,
        WorkflowState.RETURN_CACHED,
    ]


async def test_cache_miss_fetches_then_stores(market, cache, store, coingecko):
    orchestrator = ScriptedOrchestrator(
        "solana coins",
        [
            ToolInvocation(name="coin_platforms", arguments={"platform": "solana"}),
            FinalAnswer(text="USDC and Bonk run on Solana."),
        ],
    )
    workflow = make_workflow(orchestrator, market, cache)

    result = await workflow.run("Which coins run on Solana?")

    assert result.source == "fresh"
    assert result.answer == "USDC and Bonk run on Solana."
    assert [call.name for call in result.tool_calls] == ["coin_platforms"]
    assert coingecko.paths == ["/coins/list"]
    assert result.stored is True
    assert store.count("solana coins") == 1
    assert result.states == [
        WorkflowState.CHECK_CACHE,
        WorkflowState.DECISION,
        WorkflowState.FETCH_FRESH,
        WorkflowState.STORE_RESULT,
    ]

    # Second run answers from the stored entry
    again = await make_workflow(ScriptedOrchestrator("solana coins"), market, cache).run("Solana coins?")
    assert again.from_cache is True
    assert again.answer == "USDC and Bonk run on Solana."


async def test_low_score_hit_is_a_miss(market, cache):
    """Hits below the threshold do not short-circuit the fetch."""
    await cache.upsert("old", topic="bitcoin")
    orchestrator = ScriptedOrchestrator("bitcoin", [FinalAnswer(text="fresh")])
    workflow = make_workflow(orchestrator, market, cache, threshold=1.01)

    result = await workflow.run("bitcoin?")

    assert result.source == "fresh"
    assert result.hits


async def test_only_fetch_tools_offered(market, cache):
    orchestrator = ScriptedOrchestrator("defi", [FinalAnswer(text="answer")])
    await make_workflow(orchestrator, market, cache).run("defi?")

    assert orchestrator.offered_tools == [FETCH_TOOLS]


async def test_cache_tool_call_rejected_as_unknown(market, cache, store):
    """The orchestrator cannot write to the cache on its own."""
    orchestrator = ScriptedOrchestrator(
        "defi",
        [
            ToolInvocation(name="upsert_content", arguments={"content": "x", "topic": "defi"}),
            FinalAnswer(text="answer"),
        ],
    )
    await make_workflow(orchestrator, market, cache).run("defi?")

    step = orchestrator.states[-1].steps[0]
    assert step.result.ok is False
    assert step.result.error.kind == "unknown_tool"
    assert store.count("defi") == 1


async def test_tool_failure_is_reported_to_orchestrator(market, cache):
    orchestrator = ScriptedOrchestrator(
        "platforms",
        [
            ToolInvocation(name="coin_platforms", arguments={"platform": "dogechain"}),
            FinalAnswer(text="Sorry, that platform is not supported."),
        ],
    )
    result = await make_workflow(orchestrator, market, cache).run("dogechain coins?")

    assert result.answer == "Sorry, that platform is not supported."
    assert orchestrator.states[-1].steps[0].result.error.kind == "validation_error"


async def test_store_failure_still_returns_answer(market, cache, store):
    store.fail_upsert = True
    orchestrator = ScriptedOrchestrator("defi", [FinalAnswer(text="answer")])

    result = await make_workflow(orchestrator, market, cache).run("defi?")

    assert result.answer == "answer"
    assert result.stored is False
    assert result.entry_id is None


async def test_max_steps_exceeded(market, cache, store):
    orchestrator = ScriptedOrchestrator("loop")  # keeps asking for category_search
    workflow = make_workflow(orchestrator, market, cache, max_steps=3)

    with pytest.raises(AgentError):
        await workflow.run("loop forever")
    assert len(orchestrator.offered_tools) == 3
    assert store.upserts == 0


async def test_empty_answer_is_agent_error(market, cache):
    orchestrator = ScriptedOrchestrator("defi", [FinalAnswer(text="   ")])
    with pytest.raises(AgentError):
        await make_workflow(orchestrator, market, cache).run("defi?")


async def test_blank_topic_falls_back_to_query(market, cache, store):
    orchestrator = ScriptedOrchestrator("", [FinalAnswer(text="answer")])
    result = await make_workflow(orchestrator, market, cache).run("  Top   DeFi Coins? ")

    assert result.topic == "top defi coins"
    assert store.count("top defi coins") == 1


def test_normalize_topic():
    assert normalize_topic('  "Top  DeFi\nCoins."  ') == "top defi coins"
    assert normalize_topic("") == ""
    assert len(normalize_topic("x" * 500)) == 120
