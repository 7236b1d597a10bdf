"""Exception taxonomy.

Services and repositories raise these; tool and action boundaries turn them
into ``ToolResult`` failures, and the HTTP layer maps them to status codes.
"""


class CryptoExpertError(Exception):
    """Base class for all errors raised by this package."""

    kind = "internal_error"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UpstreamFetchError(CryptoExpertError):
    """The remote market-data API was unreachable or returned a bad payload."""

    kind = "upstream_fetch_error"
    status_code = 502


class InputValidationError(CryptoExpertError):
    """Parameters were rejected before any network call was made."""

    kind = "validation_error"
    status_code = 400

    def __init__(self, message: str, error: str = "Invalid request") -> None:
        super().__init__(message)
        self.error = error


class StoreError(CryptoExpertError):
    """The vector store (or its embedding model) failed or returned garbage."""

    kind = "store_error"
    status_code = 503


class AgentError(CryptoExpertError):
    """The orchestrator failed to produce an answer."""

    kind = "agent_error"
    status_code = 500
