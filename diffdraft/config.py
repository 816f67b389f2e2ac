"""Configuration for diffdraft generation backends and pipeline thresholds.

Configuration is loaded from ~/.diffdraft/config.yaml.
Use 'diffdraft config' commands to modify settings.
"""

from enum import Enum


class LLMProvider(Enum):
    """Supported generation backends."""

    OPENROUTER = "openrouter"
    GROQ = "groq"
    GEMINI = "gemini"
    PHIND = "phind"  # deprecated, kept so old configs still resolve


# ============================================================
# DEFAULT FALLBACK VALUES
# ============================================================
# These are used only if ~/.diffdraft/config.yaml doesn't exist

DEFAULT_PROVIDER = LLMProvider.OPENROUTER
DEFAULT_MODEL = None  # each backend has its own default model
DEFAULT_MAX_TOKENS = 500
DEFAULT_TEMPERATURE = 0.1

# ~4 characters per token, 6k tokens
DEFAULT_MAX_CHUNK_SIZE = 24000
# Legacy whole-diff budget for non-chunking call paths
DEFAULT_MAX_DIFF_SIZE = 50000
DEFAULT_MIN_DIFF_SIZE = 10
DEFAULT_CHUNK_WORKERS = 4
MAX_TITLE_LENGTH = 72


# ============================================================
# ACTIVE CONFIGURATION (loaded from global config)
# ============================================================

# Initially set to defaults - will be overridden by load_config()
ACTIVE_PROVIDER = DEFAULT_PROVIDER
ACTIVE_MODEL = DEFAULT_MODEL
MAX_TOKENS = DEFAULT_MAX_TOKENS
TEMPERATURE = DEFAULT_TEMPERATURE


def load_config():
    """Load configuration from global config file.

    This should be called by the CLI before using a backend.
    """
    global ACTIVE_PROVIDER, ACTIVE_MODEL, MAX_TOKENS, TEMPERATURE

    # Import here to avoid circular dependency
    from diffdraft import global_config

    provider = global_config.get_active_provider()
    model = global_config.get_active_model()
    max_tokens = global_config.get_max_tokens()
    temperature = global_config.get_temperature()

    if provider:
        ACTIVE_PROVIDER = provider
    if model:
        ACTIVE_MODEL = model
    if max_tokens is not None:
        MAX_TOKENS = max_tokens
    if temperature is not None:
        TEMPERATURE = temperature


# ============================================================
# API KEY ENVIRONMENT VARIABLES
# ============================================================

API_KEY_ENV_VARS = {
    LLMProvider.OPENROUTER: "OPENROUTER_API_KEY",
    LLMProvider.GROQ: "GROQ_API_KEY",
    LLMProvider.GEMINI: "GEMINI_API_KEY",
}

MODEL_ENV_VARS = {
    LLMProvider.OPENROUTER: "OPENROUTER_MODEL",
    LLMProvider.GROQ: "GROQ_MODEL",
    LLMProvider.GEMINI: "GEMINI_MODEL",
}

DEFAULT_MODELS = {
    LLMProvider.OPENROUTER: "mistralai/devstral-small:free",
    LLMProvider.GROQ: "mixtral-8x7b-32768",
    LLMProvider.GEMINI: "gemini-3-flash-preview",
    LLMProvider.PHIND: "Phind-70B",
}
