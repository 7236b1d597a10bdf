"""FastAPI application: POST /query, GET /health and the plugin routes."""

import logging

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from crypto_expert.agent.instructions import AGENT_NAME
from crypto_expert.config import Settings, get_settings
from crypto_expert.dto import ErrorResponse, HealthResponse, QueryRequest, QueryResponse
from crypto_expert.errors import CryptoExpertError, InputValidationError
from crypto_expert.handlers import QueryHandler
from crypto_expert.plugin import CoinGeckoPlugin
from crypto_expert.plugin import router as plugin_router

from .dependencies import QueryHandlerDep, enforce_rate_limit, lifespan
from .rate_limit import RateLimitExceeded, SlidingWindowRateLimiter

logger = logging.getLogger(__name__)


def _error(status_code: int, error: str, message: str) -> JSONResponse:
    body = ErrorResponse(success=False, error=error, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def create_app(
    settings: Settings | None = None,
    query_handler: QueryHandler | None = None,
    plugin: CoinGeckoPlugin | None = None,
) -> FastAPI:
    """Build the HTTP application.

    Args:
        settings: Application settings (default: get_settings())
        query_handler: Prebuilt handler; when given the lifespan builds nothing
        plugin: Prebuilt chat plugin for the plugin routes

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=f"{AGENT_NAME} API",
        description="Cryptocurrency question answering backed by CoinGecko and a semantic content cache",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.query_handler = query_handler
    app.state.plugin = plugin
    app.state.rate_limiter = (
        SlidingWindowRateLimiter(
            max_requests=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window_seconds,
            message=settings.rate_limit_message,
        )
        if settings.rate_limit_enabled
        else None
    )

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(InputValidationError)
    async def input_validation_handler(request: Request, exc: InputValidationError) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, exc.error, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning("Malformed request body on %s: %s", request.url.path, exc.errors())
        return _error(
            status.HTTP_400_BAD_REQUEST,
            "Invalid request",
            "The request body must be a JSON object with a string 'query' field",
        )

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        response = _error(status.HTTP_429_TOO_MANY_REQUESTS, "Too many requests", exc.message)
        response.headers["Retry-After"] = str(max(1, int(exc.retry_after)))
        return response

    @app.exception_handler(CryptoExpertError)
    async def domain_error_handler(request: Request, exc: CryptoExpertError) -> JSONResponse:
        logger.error("Error processing %s: %s", request.url.path, exc.message)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", exc.message)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unexpected error processing %s", request.url.path)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", str(exc))

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        """Liveness check; does not touch Redis or CoinGecko."""
        return QueryHandler.health()

    @app.post(
        "/query",
        response_model=QueryResponse,
        dependencies=[Depends(enforce_rate_limit)],
    )
    async def query(handler: QueryHandlerDep, request: QueryRequest | None = None) -> QueryResponse:
        """Answer a free-text cryptocurrency question."""
        return await handler.handle_query(request)

    app.include_router(plugin_router)

    return app


if __name__ == "__main__":
    import uvicorn

    from crypto_expert.config import configure_logging

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        create_app(settings),
        host=settings.api_host,
        port=settings.api_port,
    )
