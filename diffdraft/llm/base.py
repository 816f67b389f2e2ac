"""Base class and shared behaviour for generation backends."""

import os
from abc import ABC, abstractmethod
from typing import Optional

from loguru import logger

from diffdraft.config import DEFAULT_MAX_DIFF_SIZE, DEFAULT_MIN_DIFF_SIZE
from diffdraft.diff.summarizer import enhance_small_diff, summarize_diff
from diffdraft.formatters import CommitResult, parse_type_vocabulary
from diffdraft.llm.exceptions import EmptyResponseError, InvalidInputError, MissingAPIKeyError
from diffdraft.llm.parsing import extract_commit_message, parse_detailed_commit_message
from diffdraft.llm.prompts import (
    DETAILED_SYSTEM_PROMPT,
    SYSTEM_PROMPT,
    build_detailed_user_prompt,
    build_user_prompt,
)
from diffdraft.llm.retry import RetryPolicy


class BaseLLMProvider(ABC):
    """Abstract base class for generation backends.

    Subclasses implement one network round trip in :meth:`_complete`; the
    base class prepares the diff, builds prompts, applies the retry policy
    and extracts the commit message from the raw reply.
    """

    #: Human-readable name used in errors and logs.
    name = "LLM"

    def __init__(
        self,
        model: str,
        retry_policy: Optional[RetryPolicy] = None,
        max_diff_size: int = DEFAULT_MAX_DIFF_SIZE,
        min_diff_size: int = DEFAULT_MIN_DIFF_SIZE,
        strict_types: bool = False,
    ):
        self.model = model
        self.retry_policy = retry_policy or RetryPolicy()
        self.max_diff_size = max_diff_size
        self.min_diff_size = min_diff_size
        self.strict_types = strict_types

    def get_model(self) -> str:
        """Return the configured model identifier."""
        return self.model

    @abstractmethod
    def _complete(self, system_prompt: str, user_prompt: str) -> str:
        """Perform one request against the backend and return its raw text.

        Raises:
            MissingAPIKeyError: If the API key is not set.
            BackendError: For non-2xx responses or malformed payloads.
            BackendConnectionError: For timeouts and connection failures.
        """
        pass

    def _get_api_key_with_fallback(self, env_var_name: str) -> str:
        """Get an API key from the environment, then the credentials file.

        Args:
            env_var_name: Environment variable name to check.

        Returns:
            The API key string.

        Raises:
            MissingAPIKeyError: If the API key is not found.
        """
        api_key = os.getenv(env_var_name)
        if api_key:
            return api_key

        from diffdraft.global_config import get_credential

        api_key = get_credential(env_var_name)
        if api_key:
            return api_key

        raise MissingAPIKeyError(
            f"{self.name} API key not found. Set it using:\n"
            f"  1. Environment variable: export {env_var_name}=your_key_here\n"
            f"  2. Run: diffdraft config set-key {self.name.lower()}\n"
            f"  3. Manually add to ~/.diffdraft/credentials"
        )

    def prepare_diff(self, diff: str, commit_types: str, extra_context: str = "") -> tuple[str, str]:
        """Validate inputs and shrink the diff for the prompt.

        Returns:
            A (diff, extra_context) tuple. When the diff was compressed the
            synopsis is appended to the context so the model knows.

        Raises:
            InvalidInputError: If the diff or the vocabulary is empty.
        """
        if not diff:
            raise InvalidInputError("empty diff provided")
        if not commit_types or not commit_types.strip():
            raise InvalidInputError("empty commit type vocabulary provided")

        summary, optimized = summarize_diff(diff, self.max_diff_size)
        if summary.is_compressed:
            note = (
                f"(Diff summarized: {len(summary.files_changed)} files changed. "
                f"{summary.summary})"
            )
            extra_context = f"{extra_context} {note}" if extra_context else note

        return enhance_small_diff(optimized, self.min_diff_size), extra_context

    def _call(self, system_prompt: str, user_prompt: str) -> str:
        return self.retry_policy.call(
            lambda: self._complete(system_prompt, user_prompt),
            description=f"{self.name} request",
        )

    def generate_commit_message(self, diff: str, commit_types: str, extra_context: str = "") -> str:
        """Generate a single-line commit message for a diff.

        Args:
            diff: The diff text (or a merge prompt).
            commit_types: JSON mapping of commit type name to description.
            extra_context: Optional free-form hint for the model.

        Returns:
            The extracted commit message.

        Raises:
            InvalidInputError: If the diff or vocabulary is empty.
            EmptyResponseError: If no usable message could be extracted.
            LLMError: For backend failures.
        """
        diff, extra_context = self.prepare_diff(diff, commit_types, extra_context)
        user_prompt = build_user_prompt(diff, commit_types, extra_context)

        raw_result = self._call(SYSTEM_PROMPT, user_prompt)
        message = extract_commit_message(
            raw_result,
            known_types=parse_type_vocabulary(commit_types),
            strict=self.strict_types,
        )
        if not message:
            raise EmptyResponseError(
                f"no valid commit message found in {self.name} response. Raw response: {raw_result}"
            )

        logger.debug(f"{self.name} ({self.model}) generated: {message}")
        return message

    def generate_detailed_commit(self, diff: str, commit_types: str, extra_context: str = "") -> CommitResult:
        """Generate a commit title and bullet-point body for a diff.

        Raises:
            InvalidInputError: If the diff or vocabulary is empty.
            EmptyResponseError: If no usable message could be extracted.
            LLMError: For backend failures.
        """
        diff, extra_context = self.prepare_diff(diff, commit_types, extra_context)
        user_prompt = build_detailed_user_prompt(diff, commit_types, extra_context)

        raw_result = self._call(DETAILED_SYSTEM_PROMPT, user_prompt)
        try:
            return parse_detailed_commit_message(raw_result)
        except EmptyResponseError:
            raise EmptyResponseError(
                f"no valid commit message found in {self.name} response. Raw response: {raw_result}"
            ) from None
