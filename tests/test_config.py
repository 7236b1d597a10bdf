"""
Tests for settings loading and validation.
"""

import pytest

from crypto_expert.config import Settings


def test_defaults():
    settings = Settings()
    assert settings.cache_index_name == "cryptocurrency-expert-agent"
    assert settings.cache_score_threshold == 0.4
    assert settings.cache_search_limit == 2
    assert settings.api_port == 3000
    assert settings.max_query_length is None
    assert settings.rate_limit_enabled is False


def test_from_env(monkeypatch):
    monkeypatch.setenv("COINGECKO_API_KEY", "demo")
    monkeypatch.setenv("CACHE_SCORE_THRESHOLD", "0.8")
    monkeypatch.setenv("EMBEDDING_PROVIDER", "Ollama")
    monkeypatch.setenv("MAX_QUERY_LENGTH", "500")
    monkeypatch.setenv("RATE_LIMIT_ENABLED", "true")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.delenv("API_PORT", raising=False)

    settings = Settings.from_env()

    assert settings.coingecko_api_key == "demo"
    assert settings.cache_score_threshold == 0.8
    assert settings.embedding_provider == "ollama"
    assert settings.max_query_length == 500
    assert settings.rate_limit_enabled is True
    assert settings.api_port == 8080


def test_blank_max_query_length_means_unlimited(monkeypatch):
    monkeypatch.setenv("MAX_QUERY_LENGTH", "")
    assert Settings.from_env().max_query_length is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"cache_score_threshold": 1.5},
        {"cache_search_limit": 0},
        {"embedding_provider": "pinecone"},
        {"max_query_length": 0},
        {"rate_limit_requests": 0},
        {"agent_max_steps": 0},
    ],
)
def test_invalid_settings_rejected(overrides):
    with pytest.raises(ValueError):
        Settings(**overrides)
