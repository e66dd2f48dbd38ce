"""Base agent class."""

from dataclasses import dataclass
import logging

from repolens.llm.factory import REVIEW_MAX_TOKENS, REVIEW_TEMPERATURE
from repolens.llm.provider import LLMProvider, Message


@dataclass
class AgentContext:
    """Context passed to agents for processing."""

    llm_provider: LLMProvider | None = None
    temperature: float = REVIEW_TEMPERATURE
    max_tokens: int = REVIEW_MAX_TOKENS


class BaseAgent:
    """Base class for all reviewer agents."""

    def __init__(self, context: AgentContext):
        """Initialize the agent.

        Args:
            context: Agent context with the provider and sampling settings
        """
        self.context = context
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def llm(self) -> LLMProvider | None:
        """Get the LLM provider, if one is configured."""
        return self.context.llm_provider

    async def _complete(self, system_prompt: str, prompt: str) -> str:
        """Send one system+user exchange and return the raw reply text."""
        if self.llm is None:
            raise RuntimeError(f"{self.__class__.__name__} has no LLM provider")
        response = await self.llm.complete(
            [Message(role="system", content=system_prompt), Message(role="user", content=prompt)],
            temperature=self.context.temperature,
            max_tokens=self.context.max_tokens,
        )
        return response.content

    def _log_info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def _log_error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def _log_warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)
