"""LLM-backed orchestrator.

A LangChain chat model bound to the registry's tools decides, one step at
a time, whether to call a tool or to answer.
"""

import logging
import re

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage, ToolMessage
from langchain_openai import ChatOpenAI

from crypto_expert.config import Settings
from crypto_expert.entities import FinalAnswer, PromptState, ToolInvocation
from crypto_expert.errors import AgentError
from crypto_expert.tools import ToolRegistry

from .instructions import CRYPTO_EXPERT_INSTRUCTIONS, TOPIC_INSTRUCTIONS

logger = logging.getLogger(__name__)

MAX_TOPIC_LENGTH = 120


def normalize_topic(text: str) -> str:
    """Collapse whitespace, lowercase and trim a topic string."""
    topic = re.sub(r"\s+", " ", text).strip().strip("\"'").rstrip(".?!").strip()
    return topic.lower()[:MAX_TOPIC_LENGTH]


def _message_text(message: BaseMessage) -> str:
    content = message.content
    if isinstance(content, str):
        return content
    # Content blocks: keep the text parts only
    return "".join(block.get("text", "") if isinstance(block, dict) else str(block) for block in content)


class LLMOrchestrator:
    """Orchestrator driven by a tool-calling chat model.

    Example:
        ```python
        orchestrator = LLMOrchestrator.create(settings)
        topic = await orchestrator.infer_topic("What are the top DeFi coins?")
        ```
    """

    def __init__(
        self,
        chat_model: BaseChatModel,
        instructions: str = CRYPTO_EXPERT_INSTRUCTIONS,
    ) -> None:
        self._model = chat_model
        self._instructions = instructions

    @classmethod
    def create(cls, settings: Settings) -> "LLMOrchestrator":
        """Factory method building an OpenAI chat model from settings."""
        if not settings.openai_api_key:
            raise AgentError("OPENAI_API_KEY is not set")
        chat_model = ChatOpenAI(
            model=settings.llm_model,
            api_key=settings.openai_api_key,
            temperature=0,
        )
        return cls(chat_model=chat_model)

    async def infer_topic(self, query: str) -> str:
        """Ask the model for a short topic; fall back to the query itself."""
        try:
            reply = await self._model.ainvoke(
                [SystemMessage(content=TOPIC_INSTRUCTIONS), HumanMessage(content=query)]
            )
        except Exception as e:
            raise AgentError(f"Topic inference failed: {e}") from e

        topic = normalize_topic(_message_text(reply))
        return topic or normalize_topic(query)

    async def choose_and_invoke(
        self,
        registry: ToolRegistry,
        state: PromptState,
    ) -> ToolInvocation | FinalAnswer:
        """One reasoning step: the next tool call, or the final answer."""
        model = self._model
        if len(registry):
            model = model.bind_tools(registry.as_langchain_tools())

        try:
            reply = await model.ainvoke(self._build_messages(state))
        except Exception as e:
            raise AgentError(f"Orchestrator call failed: {e}") from e

        tool_calls = getattr(reply, "tool_calls", None) or []
        if tool_calls:
            call = tool_calls[0]
            if len(tool_calls) > 1:
                logger.debug("Model requested %d tool calls; running %s first", len(tool_calls), call["name"])
            fields = {"name": call["name"], "arguments": call.get("args") or {}}
            if call.get("id"):
                fields["call_id"] = call["id"]
            return ToolInvocation(**fields)

        return FinalAnswer(text=_message_text(reply).strip())

    def _build_messages(self, state: PromptState) -> list[BaseMessage]:
        messages: list[BaseMessage] = [
            SystemMessage(content=self._instructions),
            HumanMessage(content=state.query),
        ]
        for step in state.steps:
            invocation = step.invocation
            messages.append(
                AIMessage(
                    content="",
                    tool_calls=[
                        {
                            "name": invocation.name,
                            "args": invocation.arguments,
                            "id": invocation.call_id,
                        }
                    ],
                )
            )
            messages.append(
                ToolMessage(content=step.result.to_payload(), tool_call_id=invocation.call_id)
            )
        return messages
