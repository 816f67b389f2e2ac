"""OpenRouter backend implementation.

OpenRouter provides unified access to many models through a single
OpenAI-compatible API.
"""

import os
from typing import Optional

import openai
from openai import OpenAI

from diffdraft import config as _config
from diffdraft.config import API_KEY_ENV_VARS, DEFAULT_MODELS, MODEL_ENV_VARS, LLMProvider
from diffdraft.llm.base import BaseLLMProvider
from diffdraft.llm.exceptions import BackendConnectionError, BackendError, status_error

# OpenRouter API base URL
OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
REQUEST_TIMEOUT = 30.0


class OpenRouterProvider(BaseLLMProvider):
    """OpenRouter backend (OpenAI-compatible chat completions)."""

    name = "OpenRouter"

    def __init__(self, model: Optional[str] = None, **kwargs):
        """Initialize the OpenRouter backend.

        Args:
            model: The model to use, in provider/model-name form. Falls back
                to $OPENROUTER_MODEL, then to a free default model.
            **kwargs: Passed through to BaseLLMProvider.
        """
        model = (
            model
            or os.getenv(MODEL_ENV_VARS[LLMProvider.OPENROUTER])
            or DEFAULT_MODELS[LLMProvider.OPENROUTER]
        )
        super().__init__(model=model, **kwargs)
        self.api_key_env_var = API_KEY_ENV_VARS[LLMProvider.OPENROUTER]

    def get_api_key(self) -> str:
        """Get the OpenRouter API key from environment or credentials file.

        Raises:
            MissingAPIKeyError: If OPENROUTER_API_KEY is not found.
        """
        return self._get_api_key_with_fallback(self.api_key_env_var)

    def _create_client(self) -> OpenAI:
        # Retries are handled by our RetryPolicy, not the SDK
        return OpenAI(
            api_key=self.get_api_key(),
            base_url=OPENROUTER_BASE_URL,
            timeout=REQUEST_TIMEOUT,
            max_retries=0,
        )

    def _complete(self, system_prompt: str, user_prompt: str) -> str:
        client = self._create_client()

        try:
            response = client.chat.completions.create(
                model=self.model,
                max_tokens=_config.MAX_TOKENS,
                temperature=_config.TEMPERATURE,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                extra_headers={
                    "HTTP-Referer": "https://github.com/diffdraft/diffdraft",
                    "X-Title": "diffdraft",
                },
            )
        except openai.APIConnectionError as e:
            # Includes APITimeoutError
            raise BackendConnectionError(f"failed to send request to OpenRouter: {e}") from e
        except openai.APIStatusError as e:
            body = e.body if e.body is not None else e.response.text
            raise status_error(self.name, e.status_code, body) from e

        if not response.choices or not response.choices[0].message.content:
            raise BackendError("no content found in OpenRouter response or choices array is empty")

        return response.choices[0].message.content
