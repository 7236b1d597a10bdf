"""Domain entities for internal representation.

Frozen dataclasses used by services, repositories and the agent workflow.
They are NOT used for API or tool contracts - use the DTOs from the dto
package for that.
"""

from .agent_state import FinalAnswer, PromptState, ToolInvocation, ToolStep
from .category import CategoryRecord
from .content_entry import ContentEntry, UpsertResult
from .search_hit import ContentSearchResult, SearchHit

__all__ = [
    "CategoryRecord",
    "ContentEntry",
    "ContentSearchResult",
    "SearchHit",
    "UpsertResult",
    "PromptState",
    "ToolInvocation",
    "ToolStep",
    "FinalAnswer",
]
