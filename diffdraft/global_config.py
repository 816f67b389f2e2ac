"""Global configuration management for diffdraft.

Handles user-level configuration stored in ~/.diffdraft/:
- config.yaml: Provider, model, pipeline thresholds, commit styling and types
- credentials: API keys for generation backends
"""

import os
import stat
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from diffdraft.config import LLMProvider


class GlobalConfigError(Exception):
    """Raised when there's an error with global configuration."""
    pass


_CONFIG_DIR = Path.home() / ".diffdraft"


def get_global_config_dir() -> Path:
    """Get the global diffdraft configuration directory.

    Returns:
        Path to ~/.diffdraft/
    """
    return _CONFIG_DIR


def ensure_global_config_dir() -> Path:
    """Ensure the global config directory exists.

    Returns:
        Path to ~/.diffdraft/
    """
    config_dir = get_global_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_file_path() -> Path:
    """Get path to config.yaml file."""
    return get_global_config_dir() / "config.yaml"


def get_credentials_file_path() -> Path:
    """Get path to credentials file."""
    return get_global_config_dir() / "credentials"


def load_global_config() -> Dict[str, Any]:
    """Load global configuration from ~/.diffdraft/config.yaml.

    Returns:
        Dictionary with configuration values. Empty dict if file doesn't exist.

    Raises:
        GlobalConfigError: If the file exists but cannot be read or parsed.
    """
    config_file = get_config_file_path()

    if not config_file.exists():
        return {}

    try:
        with open(config_file, "r") as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise GlobalConfigError(f"Failed to load config from {config_file}: {e}")

    if not isinstance(config, dict):
        raise GlobalConfigError(f"Config file {config_file} must contain a mapping")
    return config


def save_global_config(config: Dict[str, Any]) -> None:
    """Save global configuration to ~/.diffdraft/config.yaml.

    Args:
        config: Configuration dictionary to save.
    """
    ensure_global_config_dir()
    config_file = get_config_file_path()

    try:
        with open(config_file, "w") as f:
            yaml.dump(config, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
    except OSError as e:
        raise GlobalConfigError(f"Failed to save config to {config_file}: {e}")


def _read_credentials_file(credentials_file: Path) -> Dict[str, str]:
    credentials = {}
    with open(credentials_file, "r") as f:
        for line in f:
            line = line.strip()
            # Skip empty lines and comments
            if not line or line.startswith("#"):
                continue

            # Parse KEY=value format
            if "=" in line:
                key, value = line.split("=", 1)
                credentials[key.strip()] = value.strip()
    return credentials


def load_credentials() -> Dict[str, str]:
    """Load API keys from ~/.diffdraft/credentials.

    Returns:
        Dictionary mapping environment variable names to API keys.
    """
    credentials_file = get_credentials_file_path()

    if not credentials_file.exists():
        return {}

    try:
        return _read_credentials_file(credentials_file)
    except OSError as e:
        raise GlobalConfigError(f"Failed to load credentials from {credentials_file}: {e}")


def save_credential(provider_key: str, api_key: str) -> None:
    """Save or update an API key in the credentials file.

    Args:
        provider_key: Environment variable name (e.g., "GROQ_API_KEY")
        api_key: The API key value.
    """
    ensure_global_config_dir()
    credentials_file = get_credentials_file_path()

    existing_creds = load_credentials()
    existing_creds[provider_key] = api_key

    try:
        with open(credentials_file, "w") as f:
            f.write("# diffdraft API credentials\n")
            f.write("# Format: PROVIDER_API_KEY=your_key_here\n\n")

            for key, value in existing_creds.items():
                f.write(f"{key}={value}\n")

        # Owner read/write only
        os.chmod(credentials_file, stat.S_IRUSR | stat.S_IWUSR)

    except OSError as e:
        raise GlobalConfigError(f"Failed to save credential: {e}")


def get_credential(provider_key: str) -> Optional[str]:
    """Get an API key from credentials file.

    Args:
        provider_key: Environment variable name (e.g., "GROQ_API_KEY")

    Returns:
        The API key if found, None otherwise.
    """
    credentials = load_credentials()
    return credentials.get(provider_key)


def get_active_provider() -> Optional[LLMProvider]:
    """Get the active backend provider from global config.

    Returns:
        LLMProvider enum value, or None if not configured.
    """
    config = load_global_config()
    provider_str = config.get("provider")

    if not provider_str:
        return None

    try:
        return LLMProvider(provider_str)
    except ValueError:
        return None


def get_active_model() -> Optional[str]:
    """Get the active model from global config."""
    config = load_global_config()
    return config.get("model")


def set_provider_and_model(provider: LLMProvider, model: Optional[str]) -> None:
    """Set the active provider and model in global config.

    Args:
        provider: The backend provider to use.
        model: The model name to use, or None for the backend default.
    """
    config = load_global_config()
    config["provider"] = provider.value
    if model:
        config["model"] = model
    else:
        config.pop("model", None)
    save_global_config(config)


def get_max_tokens() -> Optional[int]:
    """Get max_tokens setting from global config."""
    config = load_global_config()
    return config.get("max_tokens")


def get_temperature() -> Optional[float]:
    """Get temperature setting from global config."""
    config = load_global_config()
    return config.get("temperature")


def get_pipeline_config() -> Dict[str, Any]:
    """Get the pipeline threshold keys present in global config.

    Returns:
        Dictionary holding only the keys that are set (max_chunk_size,
        max_diff_size, min_diff_size, chunk_workers, chunking, strict_types).
    """
    config = load_global_config()
    keys = (
        "max_chunk_size",
        "max_diff_size",
        "min_diff_size",
        "chunk_workers",
        "chunking",
        "strict_types",
    )
    return {key: config[key] for key in keys if config.get(key) is not None}


def get_no_emoji() -> bool:
    """Check whether emoji should be left out of commit titles."""
    config = load_global_config()
    return bool(config.get("no_emoji", False))


def get_sign_off() -> bool:
    """Check whether commits get a Signed-off-by trailer."""
    config = load_global_config()
    return bool(config.get("sign_off", False))


def get_commit_types() -> Optional[list]:
    """Get the configured commit type vocabulary.

    Returns:
        List of type dictionaries (name, description, emoji, code), or None.
    """
    config = load_global_config()
    return config.get("types")


def is_configured() -> bool:
    """Check if diffdraft has been configured."""
    return get_config_file_path().exists()
