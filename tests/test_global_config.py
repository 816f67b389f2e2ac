"""Tests for diffdraft.global_config module."""

import stat
from pathlib import Path

import pytest
import yaml

from diffdraft.config import LLMProvider
from diffdraft.global_config import (
    GlobalConfigError,
    ensure_global_config_dir,
    get_active_model,
    get_active_provider,
    get_commit_types,
    get_config_file_path,
    get_credential,
    get_credentials_file_path,
    get_global_config_dir,
    get_max_tokens,
    get_no_emoji,
    get_pipeline_config,
    get_sign_off,
    get_temperature,
    is_configured,
    load_credentials,
    load_global_config,
    save_credential,
    save_global_config,
    set_provider_and_model,
)


class TestGlobalConfigDir:
    """Tests for global config directory functions."""

    def test_get_global_config_dir_returns_path(self, isolated_config_dir):
        result = get_global_config_dir()
        assert isinstance(result, Path)
        assert result == isolated_config_dir

    def test_ensure_global_config_dir_creates_directory(self, isolated_config_dir):
        result = ensure_global_config_dir()
        assert isolated_config_dir.exists()
        assert result == isolated_config_dir

    def test_file_paths(self, isolated_config_dir):
        assert get_config_file_path() == isolated_config_dir / "config.yaml"
        assert get_credentials_file_path() == isolated_config_dir / "credentials"


class TestLoadSaveConfig:
    """Tests for loading and saving config.yaml."""

    def test_missing_file(self):
        assert load_global_config() == {}
        assert not is_configured()

    def test_round_trip(self):
        save_global_config({"provider": "groq", "max_chunk_size": 8000})

        assert load_global_config() == {"provider": "groq", "max_chunk_size": 8000}
        assert is_configured()

    def test_empty_file(self):
        ensure_global_config_dir()
        get_config_file_path().write_text("")
        assert load_global_config() == {}

    def test_invalid_yaml(self):
        ensure_global_config_dir()
        get_config_file_path().write_text("provider: [unclosed")

        with pytest.raises(GlobalConfigError, match="Failed to load config"):
            load_global_config()

    def test_non_mapping(self):
        ensure_global_config_dir()
        get_config_file_path().write_text("- just\n- a list\n")

        with pytest.raises(GlobalConfigError, match="mapping"):
            load_global_config()


class TestCredentials:
    """Tests for the credentials file."""

    def test_missing_file(self):
        assert load_credentials() == {}
        assert get_credential("GROQ_API_KEY") is None

    def test_save_and_get(self):
        save_credential("GROQ_API_KEY", "gsk-1")
        save_credential("OPENROUTER_API_KEY", "or-1")

        assert get_credential("GROQ_API_KEY") == "gsk-1"
        assert load_credentials() == {"GROQ_API_KEY": "gsk-1", "OPENROUTER_API_KEY": "or-1"}

    def test_update_existing(self):
        save_credential("GROQ_API_KEY", "old")
        save_credential("GROQ_API_KEY", "new")
        assert get_credential("GROQ_API_KEY") == "new"

    def test_owner_only_permissions(self):
        save_credential("GROQ_API_KEY", "gsk-1")
        mode = stat.S_IMODE(get_credentials_file_path().stat().st_mode)
        assert mode == 0o600

    def test_comments_and_blank_lines_ignored(self):
        ensure_global_config_dir()
        get_credentials_file_path().write_text("# header\n\nGEMINI_API_KEY = gm=1\nnot a pair\n")

        assert load_credentials() == {"GEMINI_API_KEY": "gm=1"}


class TestProviderSettings:
    """Tests for provider and model settings."""

    def test_unset(self):
        assert get_active_provider() is None
        assert get_active_model() is None
        assert get_max_tokens() is None
        assert get_temperature() is None

    def test_set_provider_and_model(self):
        set_provider_and_model(LLMProvider.GEMINI, "gemini-2.5-pro")

        assert get_active_provider() == LLMProvider.GEMINI
        assert get_active_model() == "gemini-2.5-pro"

    def test_set_provider_without_model_clears_model(self):
        set_provider_and_model(LLMProvider.GROQ, "custom")
        set_provider_and_model(LLMProvider.OPENROUTER, None)

        assert get_active_provider() == LLMProvider.OPENROUTER
        assert get_active_model() is None

    def test_unknown_provider_ignored(self):
        save_global_config({"provider": "anthropic"})
        assert get_active_provider() is None

    def test_preserves_other_keys(self):
        save_global_config({"no_emoji": True})
        set_provider_and_model(LLMProvider.GROQ, None)

        with open(get_config_file_path()) as f:
            assert yaml.safe_load(f) == {"no_emoji": True, "provider": "groq"}

    def test_tokens_and_temperature(self):
        save_global_config({"max_tokens": 300, "temperature": 0.4})
        assert get_max_tokens() == 300
        assert get_temperature() == 0.4


class TestPipelineAndStyleSettings:
    """Tests for pipeline thresholds and styling keys."""

    def test_pipeline_config_only_set_keys(self):
        save_global_config({"provider": "groq", "max_chunk_size": 8000, "min_diff_size": None})
        assert get_pipeline_config() == {"max_chunk_size": 8000}

    def test_pipeline_config_all_keys(self):
        values = {
            "max_chunk_size": 1,
            "max_diff_size": 2,
            "min_diff_size": 3,
            "chunk_workers": 4,
            "chunking": False,
            "strict_types": True,
        }
        save_global_config(values)
        assert get_pipeline_config() == values

    def test_no_emoji(self):
        assert get_no_emoji() is False
        save_global_config({"no_emoji": True})
        assert get_no_emoji() is True

    def test_sign_off(self):
        assert get_sign_off() is False
        save_global_config({"sign_off": True})
        assert get_sign_off() is True

    def test_commit_types(self):
        types = [{"name": "feat", "description": "Feature", "emoji": "✨"}]
        save_global_config({"types": types})
        assert get_commit_types() == types
