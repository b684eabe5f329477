"""Factory for creating LLM providers from configuration."""

from __future__ import annotations

from rustydocs.config import LLMConfig
from rustydocs.exceptions import ConfigError
from rustydocs.llm.base import LLMProvider


def create_provider(config: LLMConfig) -> LLMProvider:
    """Create an LLM provider from configuration.

    Args:
        config: LLM configuration with provider, model, etc.

    Returns:
        An initialized LLM provider.

    Raises:
        ConfigError: If the provider is unknown.
        ProviderNotAvailableError: If the provider's SDK is not installed.
    """
    provider = config.provider.lower()

    if provider == "openai" or provider == "local":
        from rustydocs.llm.openai_provider import OpenAIProvider

        return OpenAIProvider(
            model=config.model,
            embedding_model=config.embedding_model,
            api_key=config.api_key,
            base_url=config.base_url,
            seed=config.seed,
            top_p=config.top_p,
        )
    else:
        raise ConfigError(
            f"Unknown LLM provider: '{provider}'. "
            f"Supported providers: openai, local"
        )
