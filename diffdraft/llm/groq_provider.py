"""Groq backend implementation."""

import os
from typing import Optional

import groq
from groq import Groq

from diffdraft import config as _config
from diffdraft.config import API_KEY_ENV_VARS, DEFAULT_MODELS, MODEL_ENV_VARS, LLMProvider
from diffdraft.llm.base import BaseLLMProvider
from diffdraft.llm.exceptions import BackendConnectionError, BackendError, status_error

REQUEST_TIMEOUT = 30.0


class GroqProvider(BaseLLMProvider):
    """Groq backend (fast inference for open-source models)."""

    name = "Groq"

    def __init__(self, model: Optional[str] = None, **kwargs):
        """Initialize the Groq backend.

        Args:
            model: The model to use. Falls back to $GROQ_MODEL, then to
                mixtral-8x7b-32768.
            **kwargs: Passed through to BaseLLMProvider.
        """
        model = (
            model
            or os.getenv(MODEL_ENV_VARS[LLMProvider.GROQ])
            or DEFAULT_MODELS[LLMProvider.GROQ]
        )
        super().__init__(model=model, **kwargs)
        self.api_key_env_var = API_KEY_ENV_VARS[LLMProvider.GROQ]

    def get_api_key(self) -> str:
        """Get the Groq API key from environment or credentials file.

        Raises:
            MissingAPIKeyError: If GROQ_API_KEY is not found.
        """
        return self._get_api_key_with_fallback(self.api_key_env_var)

    def _complete(self, system_prompt: str, user_prompt: str) -> str:
        client = Groq(api_key=self.get_api_key(), timeout=REQUEST_TIMEOUT, max_retries=0)

        try:
            response = client.chat.completions.create(
                model=self.model,
                max_tokens=_config.MAX_TOKENS,
                temperature=_config.TEMPERATURE,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
            )
        except groq.APIConnectionError as e:
            raise BackendConnectionError(f"failed to send request to Groq: {e}") from e
        except groq.APIStatusError as e:
            body = e.body if e.body is not None else e.response.text
            raise status_error(self.name, e.status_code, body) from e

        if not response.choices or not response.choices[0].message.content:
            raise BackendError("no content found in Groq response or choices array is empty")

        return response.choices[0].message.content
