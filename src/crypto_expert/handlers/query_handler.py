"""HTTP handler for agent queries."""

import logging

from crypto_expert.agent import CachedAnswerWorkflow
from crypto_expert.agent.instructions import AGENT_NAME
from crypto_expert.dto import HealthResponse, QueryRequest, QueryResponse
from crypto_expert.errors import InputValidationError
from crypto_expert.services.content_cache_service import utc_timestamp

logger = logging.getLogger(__name__)


class QueryHandler:
    """Validates incoming queries and runs them through the workflow.

    Errors are raised as CryptoExpertError subclasses; the app's exception
    handlers turn them into the shared error body.
    """

    def __init__(self, workflow: CachedAnswerWorkflow, max_query_length: int | None = None) -> None:
        """Initialize the query handler.

        Args:
            workflow: The cache-aware answer workflow
            max_query_length: Optional maximum query length in characters
        """
        self._workflow = workflow
        self._max_query_length = max_query_length

    def validate(self, request: QueryRequest | None) -> str:
        """Return the query text or raise InputValidationError."""
        query = request.query if request is not None else None
        if query is None or not query.strip():
            raise InputValidationError(
                "Please provide a query in the request body",
                error="Query is required",
            )
        if self._max_query_length is not None and len(query) > self._max_query_length:
            raise InputValidationError(
                f"Query must be at most {self._max_query_length} characters "
                f"(got {len(query)})",
                error="Query too long",
            )
        return query

    async def handle_query(self, request: QueryRequest | None) -> QueryResponse:
        """Handle POST /query requests."""
        query = self.validate(request)
        logger.info("Processing query: %s", query)

        result = await self._workflow.run(query)
        logger.info(
            "Query processed successfully (source=%s, tools=%d, stored=%s)",
            result.source,
            len(result.tool_calls),
            result.stored,
        )

        return QueryResponse(
            success=True,
            query=query,
            response=result.answer,
            timestamp=utc_timestamp(),
        )

    @staticmethod
    def health() -> HealthResponse:
        """Handle GET /health requests."""
        return HealthResponse(status="OK", message=f"{AGENT_NAME} is running")
