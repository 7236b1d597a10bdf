"""
Tests for the content cache service.
"""

import re

import pytest

from crypto_expert.errors import InputValidationError, StoreError
from crypto_expert.services.content_cache_service import distance_to_score, generate_content_id


async def test_search_empty_store(cache):
    """An empty namespace is found=False, count=0, results=[]."""
    result = await cache.search("defi tokens")

    assert result.found is False
    assert result.count == 0
    assert result.results == []
    assert result.topic == "defi tokens"
    assert result.threshold == 0.4


async def test_upsert_then_search_same_topic(cache):
    """Content written under a topic comes back for the same topic."""
    stored = await cache.upsert("Top DeFi coins: UNI, AAVE, MKR", topic="top defi coins")
    result = await cache.search("top defi coins")

    assert result.found is True
    assert result.results[0].id == stored.id
    assert result.results[0].metadata["chunk_text"] == "Top DeFi coins: UNI, AAVE, MKR"
    assert result.results[0].score > 0.9


async def test_search_never_exceeds_limit(cache):
    for i in range(5):
        await cache.upsert(f"answer {i}", topic="solana coins")

    assert (await cache.search("solana coins", limit=3)).count == 3
    assert (await cache.search("solana coins")).count == 2


async def test_search_results_sorted_descending(cache):
    await cache.upsert("far", topic="memes dogs cats")
    await cache.upsert("near", topic="layer one chains")
    await cache.upsert("mid", topic="layer two")

    result = await cache.search("layer one chains", limit=3)
    scores = [hit.score for hit in result.results]

    assert scores == sorted(scores, reverse=True)
    assert [hit.metadata["chunk_text"] for hit in result.results] == ["near", "mid", "far"]


async def test_paraphrased_topic_hits_above_threshold(cache):
    """A close but different topic scores between the threshold and 1."""
    await cache.upsert("Top DeFi coins: UNI, AAVE, MKR", topic="top defi coins")

    result = await cache.search("top defi coins today")
    best = result.best_above()

    assert best is not None
    assert best.metadata["chunk_text"] == "Top DeFi coins: UNI, AAVE, MKR"
    assert result.threshold <= best.score < 1.0


async def test_threshold_is_not_applied(cache):
    """Hits below the advisory threshold are still returned."""
    await cache.upsert("unrelated", topic="completely different words")

    result = await cache.search("bitcoin")

    assert result.count == 1
    assert result.results[0].score < result.threshold
    assert result.best_above() is None


async def test_upsert_writes_into_topic_namespace(cache, store):
    await cache.upsert("Ethereum answer", topic="ethereum")
    await cache.upsert("Prices", topic="bitcoin, ethereum prices")

    assert store.count("ethereum") == 1
    assert store.count("bitcoin, ethereum prices") == 1


async def test_comma_topic_round_trip(cache):
    await cache.upsert("BTC and ETH prices", topic="bitcoin, ethereum prices")

    hit = (await cache.search("bitcoin, ethereum prices")).results[0]

    assert hit.metadata["chunk_text"] == "BTC and ETH prices"
    assert hit.score > 0.9


async def test_repeated_topic_accumulates(cache, store):
    await cache.upsert("first", topic="meme coins")
    await cache.upsert("second", topic="meme coins")

    assert store.count("meme coins") == 2


async def test_upsert_core_fields_win_over_metadata(cache):
    await cache.upsert(
        "real content",
        topic="gaming",
        metadata={"chunk_text": "spoofed", "id": "spoofed", "category": "gaming"},
    )
    hit = (await cache.search("gaming")).results[0]

    assert hit.metadata["chunk_text"] == "real content"
    assert hit.metadata["id"] == hit.id
    assert hit.metadata["category"] == "gaming"
    assert hit.metadata["source"] == "agent_response"


async def test_upsert_result_fields(cache):
    result = await cache.upsert("12345", topic="t", source="manual")

    assert result.success is True
    assert result.topic == "t"
    assert result.content_length == 5
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", result.timestamp)


@pytest.mark.parametrize("limit", [0, -1])
async def test_search_rejects_bad_limit(cache, store, limit):
    with pytest.raises(InputValidationError):
        await cache.search("defi", limit=limit)
    assert store.queries == []


async def test_blank_topic_and_content_rejected(cache, store):
    with pytest.raises(InputValidationError):
        await cache.search("   ")
    with pytest.raises(InputValidationError):
        await cache.upsert("", topic="defi")
    assert store.upserts == 0


async def test_embedding_failure_is_store_error(cache, embeddings):
    embeddings.fail = True
    with pytest.raises(StoreError):
        await cache.search("defi")


async def test_store_failure_propagates(cache, store):
    store.fail_upsert = True
    with pytest.raises(StoreError):
        await cache.upsert("content", topic="defi")


def test_generate_content_id_format():
    content_id = generate_content_id(now=1_700_000_000.123)
    assert re.fullmatch(r"content_1700000000123_[0-9a-z]{9}", content_id)


def test_distance_to_score_clamped():
    assert distance_to_score(0.0) == 1.0
    assert distance_to_score(0.25) == pytest.approx(0.75)
    assert distance_to_score(1.5) == 0.0


async def test_stats_and_health(cache):
    await cache.upsert("content", topic="defi")

    stats = cache.get_stats()
    assert stats["total_entries"] == 1
    assert stats["embedding_model"] == "fake-bow"
    assert await cache.is_healthy() is True
