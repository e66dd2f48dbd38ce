"""LLM abstraction layer for repolens using LangChain."""

from repolens.llm.provider import LLMProvider, Message, LLMResponse
from repolens.llm.schemas import (
    FindingPayload,
    FileReviewPayload,
    IssueSuggestionPayload,
    IssueReviewPayload,
    MalformedResponseError,
    decode_file_review,
    decode_issue_review,
)
from repolens.llm.factory import (
    get_provider,
    LLMConfigError,
    REVIEW_MAX_TOKENS,
    REVIEW_TEMPERATURE,
)

__all__ = [
    # Provider
    "LLMProvider",
    "Message",
    "LLMResponse",
    # Factory
    "get_provider",
    "LLMConfigError",
    "REVIEW_MAX_TOKENS",
    "REVIEW_TEMPERATURE",
    # Schemas
    "FindingPayload",
    "FileReviewPayload",
    "IssueSuggestionPayload",
    "IssueReviewPayload",
    "MalformedResponseError",
    "decode_file_review",
    "decode_issue_review",
]
