"""Phind backend (deprecated).

The public Phind endpoint is no longer available, so this backend only
exists to give old configurations a clear error instead of an unknown
provider.
"""

from typing import Optional

from diffdraft.config import DEFAULT_MODELS, LLMProvider
from diffdraft.llm.base import BaseLLMProvider
from diffdraft.llm.exceptions import BackendDisabledError


class PhindProvider(BaseLLMProvider):
    """Disabled Phind backend."""

    name = "Phind"

    def __init__(self, model: Optional[str] = None, **kwargs):
        super().__init__(model=model or DEFAULT_MODELS[LLMProvider.PHIND], **kwargs)

    def _complete(self, system_prompt: str, user_prompt: str) -> str:
        raise BackendDisabledError(
            "The Phind backend is deprecated and disabled. "
            "Switch provider with: diffdraft config set-provider openrouter"
        )
