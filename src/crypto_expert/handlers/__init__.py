"""HTTP handlers layer.

Handlers convert between DTOs and service/workflow calls and own the
HTTP-facing validation rules.
"""

from .query_handler import QueryHandler

__all__ = ["QueryHandler"]
