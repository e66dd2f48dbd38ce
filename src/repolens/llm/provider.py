"""Reviewer capability backed by a LangChain chat model."""

import logging
from dataclasses import dataclass, field
from typing import Any, Literal

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage


logger = logging.getLogger(__name__)

Role = Literal["system", "user", "assistant"]

_LANGCHAIN_MESSAGES: dict[str, type[BaseMessage]] = {
    "system": SystemMessage,
    "user": HumanMessage,
    "assistant": AIMessage,
}


@dataclass(frozen=True)
class Message:
    """One turn of a reviewer exchange."""

    role: Role
    content: str

    def to_langchain(self) -> BaseMessage:
        """Convert to LangChain message format."""
        return _LANGCHAIN_MESSAGES.get(self.role, HumanMessage)(content=self.content)


@dataclass
class LLMResponse:
    """Raw reply of the reviewer model."""

    content: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)
    raw_response: Any = None


def _reply_text(content: Any) -> str:
    # Anthropic models may answer with a list of content blocks
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(
            block if isinstance(block, str) else block.get("text", "")
            for block in content
            if isinstance(block, (str, dict))
        )
    return str(content)


class LLMProvider:
    """Text-completion capability backed by a LangChain chat model."""

    def __init__(
        self,
        model: BaseChatModel,
        model_name: str = "unknown",
    ):
        """Initialize the provider.

        Args:
            model: LangChain chat model instance
            model_name: Name of the model for logging
        """
        self.model = model
        self.model_name = model_name

    async def complete(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """Send messages to the model and return its reply text.

        Generation parameters given here override the model defaults for
        this call only.

        Args:
            messages: Conversation, usually one system and one user message
            temperature: Sampling temperature (0.0 to 1.0)
            max_tokens: Maximum tokens in the response

        Returns:
            LLMResponse with the reply text and token usage
        """
        overrides: dict[str, Any] = {}
        if temperature is not None:
            overrides["temperature"] = temperature
        if max_tokens is not None:
            overrides["max_tokens"] = max_tokens

        runnable = self.model.bind(**overrides) if overrides else self.model
        response = await runnable.ainvoke([message.to_langchain() for message in messages])

        usage: dict[str, int] = {}
        metadata = getattr(response, "usage_metadata", None)
        if metadata:
            usage = {
                "prompt_tokens": metadata.get("input_tokens", 0),
                "completion_tokens": metadata.get("output_tokens", 0),
                "total_tokens": metadata.get("total_tokens", 0),
            }
            logger.debug(f"{self.model_name} used {usage['total_tokens']} tokens")

        return LLMResponse(
            content=_reply_text(response.content),
            model=self.model_name,
            usage=usage,
            raw_response=response,
        )
