"""Generation backend module for diffdraft.

This module provides a unified interface to the supported backends.
The active backend is configured in ~/.diffdraft/config.yaml.
"""

from typing import Optional

from dotenv import load_dotenv

from diffdraft import config as _config
from diffdraft.config import LLMProvider
from diffdraft.llm.base import BaseLLMProvider
from diffdraft.llm.exceptions import (
    AuthenticationError,
    BackendConnectionError,
    BackendDisabledError,
    BackendError,
    ChunkProcessingError,
    EmptyResponseError,
    InvalidInputError,
    LLMError,
    MissingAPIKeyError,
    RetryExhaustedError,
)
from diffdraft.llm.retry import RetryPolicy

# Load environment variables from .env file
load_dotenv()


def get_provider(
    provider: Optional[LLMProvider] = None,
    model: Optional[str] = None,
    **kwargs,
) -> BaseLLMProvider:
    """Get a backend instance.

    Args:
        provider: The provider to use. Defaults to ACTIVE_PROVIDER from config.
        model: The model to use. Defaults to ACTIVE_MODEL from config, then
            to the backend's own default.
        **kwargs: Backend options (retry_policy, max_diff_size,
            min_diff_size, strict_types).

    Returns:
        An instance of the appropriate backend.

    Raises:
        ValueError: If the provider is not supported.
    """
    provider = provider or _config.ACTIVE_PROVIDER
    model = model or _config.ACTIVE_MODEL

    if provider == LLMProvider.OPENROUTER:
        from diffdraft.llm.openrouter_provider import OpenRouterProvider

        return OpenRouterProvider(model=model, **kwargs)

    elif provider == LLMProvider.GROQ:
        from diffdraft.llm.groq_provider import GroqProvider

        return GroqProvider(model=model, **kwargs)

    elif provider == LLMProvider.GEMINI:
        from diffdraft.llm.gemini_provider import GeminiProvider

        return GeminiProvider(model=model, **kwargs)

    elif provider == LLMProvider.PHIND:
        from diffdraft.llm.phind_provider import PhindProvider

        return PhindProvider(model=model, **kwargs)

    else:
        raise ValueError(f"Unsupported provider: {provider}")


__all__ = [
    "AuthenticationError",
    "BackendConnectionError",
    "BackendDisabledError",
    "BackendError",
    "BaseLLMProvider",
    "ChunkProcessingError",
    "EmptyResponseError",
    "InvalidInputError",
    "LLMError",
    "MissingAPIKeyError",
    "RetryExhaustedError",
    "RetryPolicy",
    "get_provider",
]
