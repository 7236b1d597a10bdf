"""Agent orchestration: the LLM orchestrator and the cache-aware workflow."""

from .orchestrator import LLMOrchestrator, normalize_topic
from .workflow import CachedAnswerWorkflow, WorkflowResult, WorkflowState

__all__ = [
    "LLMOrchestrator",
    "normalize_topic",
    "CachedAnswerWorkflow",
    "WorkflowResult",
    "WorkflowState",
]
