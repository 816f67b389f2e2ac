"""Exception classes for generation backends and the chunk pipeline.

Contains:
- LLMError: Base exception for generation errors
- InvalidInputError: Empty diff or vocabulary, rejected before any call
- MissingAPIKeyError: Raised when credentials are not set
- AuthenticationError: Raised when the OAuth login flow fails
- BackendError: Non-2xx response or malformed payload (fatal)
- BackendConnectionError: Timeout or connection failure (retryable)
- BackendDisabledError: Raised when a deprecated backend is invoked
- RetryExhaustedError: A retryable failure outlasted every attempt
- EmptyResponseError: The backend answered but nothing usable was found
- ChunkProcessingError: Every chunk of a chunked diff failed
"""

import json
from typing import Any, Optional


class LLMError(Exception):
    """Base exception for LLM-related errors."""

    pass


class InvalidInputError(LLMError):
    """Raised when the diff or the type vocabulary is empty."""

    pass


class MissingAPIKeyError(LLMError):
    """Raised when the required API key is not set."""

    pass


class AuthenticationError(LLMError):
    """Raised when interactive authentication fails or times out."""

    pass


class BackendError(LLMError):
    """Raised when a backend call fails with a non-retryable cause.

    Attributes:
        status_code: HTTP status of the failed response, if there was one.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class BackendConnectionError(BackendError):
    """Raised on network-level failures (timeouts, refused connections)."""

    pass


class BackendDisabledError(LLMError):
    """Raised when a deprecated backend is asked to generate."""

    pass


class RetryExhaustedError(LLMError):
    """Raised when a retryable failure persists after all attempts.

    Attributes:
        attempts: Number of attempts made.
        last_error: The error raised by the final attempt.
    """

    def __init__(self, message: str, attempts: int, last_error: Exception):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


class EmptyResponseError(LLMError):
    """Raised when no usable commit message could be extracted."""

    pass


class ChunkProcessingError(LLMError):
    """Raised when every chunk of a chunked diff failed.

    Attributes:
        failures: The failed ChunkResults, in chunk order.
    """

    def __init__(self, failures: list):
        details = "; ".join(f"chunk {r.chunk_index}: {r.error}" for r in failures)
        super().__init__(f"chunk processing errors: {details}")
        self.failures = failures


def describe_error_body(body: Any) -> str:
    """Best-effort extraction of ``error.message`` from an error payload.

    Args:
        body: The response body, either already decoded (dict) or raw text.

    Returns:
        The error message when the body is a JSON error envelope, otherwise
        the raw body as text.
    """
    payload = body
    if isinstance(body, (str, bytes)):
        try:
            payload = json.loads(body)
        except ValueError:
            return body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body

    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        # SDKs often hand over the inner error object already
        if isinstance(payload.get("message"), str) and payload["message"]:
            return payload["message"]

    return "" if body is None else str(body)


def status_error(provider_name: str, status_code: int, body: Any) -> BackendError:
    """Build the error for a non-2xx response.

    Status 429, 503 and the rest all map to BackendError; the retry policy
    decides from ``status_code`` whether to try again.
    """
    detail = describe_error_body(body)
    return BackendError(
        f"{provider_name} API error (status {status_code}): {detail}",
        status_code=status_code,
    )
