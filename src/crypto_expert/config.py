import logging
import os
from dataclasses import dataclass
from functools import lru_cache

import redis
from dotenv import load_dotenv

load_dotenv()


def _optional_int(name: str) -> int | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return int(value)


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class Settings:
    """Application settings, built once at process start and passed explicitly."""

    # CoinGecko
    coingecko_base_url: str = "https://api.coingecko.com/api/v3"
    coingecko_api_key: str | None = None
    http_timeout: float = 30.0

    # Redis
    redis_url: str = "redis://localhost:6379"
    redis_password: str | None = None

    # Content cache
    cache_index_name: str = "cryptocurrency-expert-agent"
    cache_search_limit: int = 2
    cache_score_threshold: float = 0.4

    # Embedding
    embedding_provider: str = "local"  # or "ollama"
    embedding_model: str = "paraphrase-multilingual-MiniLM-L12-v2"
    ollama_base_url: str = "http://localhost:11434"

    # Agent
    openai_api_key: str | None = None
    llm_model: str = "gpt-4o-mini"
    agent_max_steps: int = 8

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    api_reload: bool = False
    max_query_length: int | None = None

    # Rate limiting
    rate_limit_enabled: bool = False
    rate_limit_requests: int = 2
    rate_limit_window_seconds: float = 60.0
    rate_limit_message: str = "Too many requests, please try again later."

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables (and a local .env file)."""
        return cls(
            coingecko_base_url=os.getenv("COINGECKO_BASE_URL", cls.coingecko_base_url),
            coingecko_api_key=os.getenv("COINGECKO_API_KEY") or None,
            http_timeout=float(os.getenv("HTTP_TIMEOUT", str(cls.http_timeout))),
            redis_url=os.getenv("REDIS_URL", cls.redis_url),
            redis_password=os.getenv("REDIS_PASSWORD") or None,
            cache_index_name=os.getenv("CACHE_INDEX_NAME", cls.cache_index_name),
            cache_search_limit=int(os.getenv("CACHE_SEARCH_LIMIT", str(cls.cache_search_limit))),
            cache_score_threshold=float(
                os.getenv("CACHE_SCORE_THRESHOLD", str(cls.cache_score_threshold))
            ),
            embedding_provider=os.getenv("EMBEDDING_PROVIDER", cls.embedding_provider).lower(),
            embedding_model=os.getenv("EMBEDDING_MODEL", cls.embedding_model),
            ollama_base_url=os.getenv("OLLAMA_BASE_URL", cls.ollama_base_url),
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            llm_model=os.getenv("LLM_MODEL", cls.llm_model),
            agent_max_steps=int(os.getenv("AGENT_MAX_STEPS", str(cls.agent_max_steps))),
            api_host=os.getenv("API_HOST", cls.api_host),
            api_port=int(os.getenv("API_PORT", os.getenv("PORT", str(cls.api_port)))),
            api_reload=_flag("API_RELOAD", "false"),
            max_query_length=_optional_int("MAX_QUERY_LENGTH"),
            rate_limit_enabled=_flag("RATE_LIMIT_ENABLED", "false"),
            rate_limit_requests=int(os.getenv("RATE_LIMIT_REQUESTS", str(cls.rate_limit_requests))),
            rate_limit_window_seconds=float(
                os.getenv("RATE_LIMIT_WINDOW_SECONDS", str(cls.rate_limit_window_seconds))
            ),
            rate_limit_message=os.getenv("RATE_LIMIT_MESSAGE", cls.rate_limit_message),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
        )

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if not 0 <= self.cache_score_threshold <= 1:
            raise ValueError("CACHE_SCORE_THRESHOLD must be between 0 and 1")

        if self.cache_search_limit < 1:
            raise ValueError("CACHE_SEARCH_LIMIT must be at least 1")

        if self.embedding_provider not in ("local", "ollama"):
            raise ValueError(
                f"EMBEDDING_PROVIDER must be 'local' or 'ollama', got {self.embedding_provider!r}"
            )

        if self.max_query_length is not None and self.max_query_length < 1:
            raise ValueError("MAX_QUERY_LENGTH must be a positive integer")

        if self.rate_limit_requests < 1 or self.rate_limit_window_seconds <= 0:
            raise ValueError("Rate limit requests and window must be positive")

        if self.agent_max_steps < 1:
            raise ValueError("AGENT_MAX_STEPS must be at least 1")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()


def get_redis_client(settings: Settings) -> redis.Redis:
    """Create a Redis client instance."""
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=False,
    )


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the CLI and the HTTP server."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
