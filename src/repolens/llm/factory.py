"""Factory for creating LLM providers using LangChain."""

from typing import Callable, Literal

from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI

from repolens.llm.provider import LLMProvider
from repolens.server.config import Settings, get_settings


ProviderType = Literal["openai", "claude"]

# Reviewer calls should be close to deterministic and bounded in size
REVIEW_TEMPERATURE = 0.1
REVIEW_MAX_TOKENS = 2000

DEFAULT_MODELS: dict[str, str] = {
    "openai": "gpt-4o-mini",
    "claude": "claude-sonnet-4-20250514",
}


class LLMConfigError(Exception):
    """Raised when LLM configuration is invalid."""


def _build_openai(api_key: str, model: str, api_url: str | None) -> BaseChatModel:
    kwargs: dict = {
        "api_key": api_key,
        "model": model,
        "temperature": REVIEW_TEMPERATURE,
        "max_tokens": REVIEW_MAX_TOKENS,
    }
    if api_url:
        kwargs["base_url"] = api_url
    return ChatOpenAI(**kwargs)


def _build_claude(api_key: str, model: str, api_url: str | None) -> BaseChatModel:
    kwargs: dict = {
        "api_key": api_key,
        "model": model,
        "temperature": REVIEW_TEMPERATURE,
        "max_tokens": REVIEW_MAX_TOKENS,
    }
    if api_url:
        kwargs["base_url"] = api_url
    return ChatAnthropic(**kwargs)


_BUILDERS: dict[str, tuple[Callable[[str, str, str | None], BaseChatModel], str]] = {
    "openai": (_build_openai, "openai_api_key"),
    "claude": (_build_claude, "anthropic_api_key"),
}

_KEY_HINTS = {
    "openai": "OpenAI API key not found. Set OPENAI_API_KEY environment variable.",
    "claude": "Anthropic API key not found. Set ANTHROPIC_API_KEY environment variable.",
}


def get_provider(
    provider_name: ProviderType | None = None,
    api_key: str | None = None,
    model: str | None = None,
    settings: Settings | None = None,
) -> LLMProvider:
    """Build the reviewer capability configured for this server.

    Explicit arguments take precedence over Settings values.

    Args:
        provider_name: Provider type ('openai' or 'claude')
        api_key: API key for the provider
        model: Model name
        settings: Settings to read defaults from

    Returns:
        Configured LLMProvider instance

    Raises:
        LLMConfigError: If configuration is invalid or missing
    """
    settings = settings or get_settings()
    provider_name = provider_name or settings.llm_provider  # type: ignore[assignment]

    if provider_name not in _BUILDERS:
        raise LLMConfigError(
            f"Unknown provider: {provider_name}. Supported: 'openai', 'claude'"
        )

    builder, key_field = _BUILDERS[provider_name]
    api_key = api_key or getattr(settings, key_field)
    if not api_key:
        raise LLMConfigError(_KEY_HINTS[provider_name])

    model = model or settings.llm_model or DEFAULT_MODELS[provider_name]
    chat_model = builder(api_key, model, settings.llm_api_url or None)
    return LLMProvider(model=chat_model, model_name=model)
