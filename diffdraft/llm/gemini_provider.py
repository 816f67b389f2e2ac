"""Google Gemini backend implementation.

Authenticates with an API key when one is configured, otherwise with an
OAuth access token obtained through a browser login (see oauth.py).
"""

import os
import threading
from typing import Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from diffdraft import config as _config
from diffdraft.config import API_KEY_ENV_VARS, DEFAULT_MODELS, MODEL_ENV_VARS, LLMProvider
from diffdraft.llm import oauth
from diffdraft.llm.base import BaseLLMProvider
from diffdraft.llm.exceptions import (
    AuthenticationError,
    BackendConnectionError,
    BackendError,
    LLMError,
    MissingAPIKeyError,
    status_error,
)

GEMINI_API_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
REQUEST_TIMEOUT = 15.0
CLIENT_ID_ENV_VAR = "GOOGLE_CLIENT_ID"

AUTH_HELP = """GEMINI_API_KEY not set. Choose an authentication method:

1. Login with Google (OAuth):
   Set the GOOGLE_CLIENT_ID environment variable (Desktop app client, no secret needed).
   Get a client ID from: https://console.cloud.google.com/apis/credentials
   A browser will open for login on the next run.

2. Use an API key:
   Set GEMINI_API_KEY or run: diffdraft config set-key gemini
   Get a key from: https://makersuite.google.com/app/apikey"""


class GeminiProvider(BaseLLMProvider):
    """Google Gemini backend."""

    name = "Gemini"

    def __init__(self, model: Optional[str] = None, api_key: Optional[str] = None, **kwargs):
        """Initialize the Gemini backend.

        Args:
            model: The model to use. Falls back to $GEMINI_MODEL, then to the
                default Gemini model.
            api_key: API key. When omitted the environment and credentials
                file are checked; without any key the backend uses OAuth.
            **kwargs: Passed through to BaseLLMProvider.
        """
        model = (
            model
            or os.getenv(MODEL_ENV_VARS[LLMProvider.GEMINI])
            or DEFAULT_MODELS[LLMProvider.GEMINI]
        )
        super().__init__(model=model, **kwargs)
        self.api_key_env_var = API_KEY_ENV_VARS[LLMProvider.GEMINI]
        self.api_key = api_key or self._lookup_api_key()
        self.use_oauth = not self.api_key
        self.access_token: Optional[str] = None
        self._auth_lock = threading.Lock()
        self._auth_error: Optional[LLMError] = None

        if self.use_oauth:
            token = oauth.load_cached_token()
            if token is not None:
                self.access_token = token.access_token

    def _lookup_api_key(self) -> Optional[str]:
        try:
            return self._get_api_key_with_fallback(self.api_key_env_var)
        except MissingAPIKeyError:
            return None

    def get_api_key(self) -> str:
        """Get the Gemini API key.

        Raises:
            MissingAPIKeyError: If no API key is configured.
        """
        if not self.api_key:
            raise MissingAPIKeyError(AUTH_HELP)
        return self.api_key

    def ensure_authenticated(self) -> None:
        """Make sure an API key or an access token is available.

        Runs the browser login when OAuth is in use and no cached token exists.
        A failed login is remembered and re-raised on later calls, so chunk
        workers do not open one browser login each.

        Raises:
            MissingAPIKeyError: If neither an API key nor an OAuth client ID is set.
            AuthenticationError: If the browser login fails.
        """
        if not self.use_oauth or self.access_token:
            return

        # Chunk workers share one login
        with self._auth_lock:
            if self.access_token:
                return
            if self._auth_error is not None:
                raise self._auth_error

            try:
                client_id = os.getenv(CLIENT_ID_ENV_VAR)
                if not client_id:
                    raise MissingAPIKeyError(AUTH_HELP)
                token = oauth.authenticate(client_id)
            except (MissingAPIKeyError, AuthenticationError) as e:
                self._auth_error = e
                raise

            self.access_token = token.access_token

    def _complete(self, system_prompt: str, user_prompt: str) -> str:
        self.ensure_authenticated()
        if self.use_oauth:
            return self._complete_with_token(system_prompt, user_prompt)
        return self._complete_with_api_key(system_prompt, user_prompt)

    def _complete_with_api_key(self, system_prompt: str, user_prompt: str) -> str:
        client = genai.Client(
            api_key=self.get_api_key(),
            http_options=types.HttpOptions(timeout=int(REQUEST_TIMEOUT * 1000)),
        )

        try:
            response = client.models.generate_content(
                model=self.model,
                contents=user_prompt,
                config=types.GenerateContentConfig(
                    system_instruction=system_prompt,
                    max_output_tokens=_config.MAX_TOKENS,
                    temperature=_config.TEMPERATURE,
                ),
            )
        except httpx.TransportError as e:
            raise BackendConnectionError(f"failed to send request to Gemini: {e}") from e
        except genai_errors.APIError as e:
            raise status_error(self.name, e.code, e.message or str(e)) from e

        if not response.candidates or not response.text:
            raise BackendError("no content found in Gemini response")

        return response.text

    def _complete_with_token(self, system_prompt: str, user_prompt: str) -> str:
        url = f"{GEMINI_API_BASE_URL}/models/{self.model}:generateContent"
        payload = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"role": "user", "parts": [{"text": user_prompt}]}],
            "generationConfig": {
                "temperature": _config.TEMPERATURE,
                "maxOutputTokens": _config.MAX_TOKENS,
            },
        }
        headers = {"Authorization": f"Bearer {self.access_token}"}

        try:
            with httpx.Client(timeout=REQUEST_TIMEOUT) as client:
                response = client.post(url, json=payload, headers=headers)
        except httpx.TransportError as e:
            raise BackendConnectionError(f"failed to send request to Gemini: {e}") from e

        if response.status_code != 200:
            raise status_error(self.name, response.status_code, response.text)

        try:
            data = response.json()
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise BackendError(
                f"no content found in Gemini response: {e}. Body: {response.text}"
            ) from e
