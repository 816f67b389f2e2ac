"""Tests for diffdraft.llm.base module."""

import pytest

from diffdraft.global_config import save_credential
from diffdraft.llm.exceptions import (
    BackendDisabledError,
    BackendError,
    EmptyResponseError,
    InvalidInputError,
    MissingAPIKeyError,
)
from diffdraft.llm.phind_provider import PhindProvider
from diffdraft.llm.prompts import SYSTEM_PROMPT
from diffdraft.llm.retry import RetryPolicy


class TestApiKeyFallback:
    """Tests for _get_api_key_with_fallback method."""

    def test_environment_first(self, fake_backend, monkeypatch):
        monkeypatch.setenv("FAKE_API_KEY", "env-key")
        save_credential("FAKE_API_KEY", "file-key")

        assert fake_backend()._get_api_key_with_fallback("FAKE_API_KEY") == "env-key"

    def test_credentials_file(self, fake_backend, monkeypatch):
        monkeypatch.delenv("FAKE_API_KEY", raising=False)
        save_credential("FAKE_API_KEY", "file-key")

        assert fake_backend()._get_api_key_with_fallback("FAKE_API_KEY") == "file-key"

    def test_missing_key(self, fake_backend, monkeypatch):
        """Test that the error explains how to set the key."""
        monkeypatch.delenv("FAKE_API_KEY", raising=False)

        with pytest.raises(MissingAPIKeyError) as exc_info:
            fake_backend()._get_api_key_with_fallback("FAKE_API_KEY")

        assert "export FAKE_API_KEY=" in str(exc_info.value)
        assert "diffdraft config set-key fake" in str(exc_info.value)


class TestPrepareDiff:
    """Tests for prepare_diff method."""

    def test_rejects_empty_diff(self, fake_backend, commit_types):
        with pytest.raises(InvalidInputError):
            fake_backend().prepare_diff("", commit_types)

    def test_rejects_empty_vocabulary(self, fake_backend, sample_diff):
        with pytest.raises(InvalidInputError):
            fake_backend().prepare_diff(sample_diff, "")

    def test_small_diff_passes_through(self, fake_backend, commit_types, sample_diff):
        diff, context = fake_backend().prepare_diff(sample_diff, commit_types, "ctx")
        assert diff == sample_diff
        assert context == "ctx"

    def test_tiny_diff_is_enhanced(self, fake_backend, commit_types):
        diff, _ = fake_backend().prepare_diff("+x", commit_types)
        assert diff.startswith("+x\n\n# Note: This is a very small change.")

    def test_compression_is_disclosed(self, fake_backend, commit_types, file_diff):
        """Test that a summarized diff adds the synopsis to the context."""
        big = file_diff("a.py", 3000) + file_diff("b.py", 3000)
        backend = fake_backend(max_diff_size=1000)

        diff, context = backend.prepare_diff(big, commit_types, "ticket 7")

        assert len(diff) < len(big)
        assert context.startswith("ticket 7 (Diff summarized: 2 files changed. 2 files changed\n")
        assert "a.py (+" in context


class TestGenerateCommitMessage:
    """Tests for generate_commit_message method."""

    def test_builds_prompts(self, fake_backend, commit_types, sample_diff):
        backend = fake_backend(lambda s, u: "feat(ai): add helper")

        message = backend.generate_commit_message(sample_diff, commit_types, "extra hint")

        assert message == "feat(ai): add helper"
        system_prompt, user_prompt = backend.calls[0]
        assert system_prompt == SYSTEM_PROMPT
        assert commit_types in user_prompt
        assert "Additional context: extra hint" in user_prompt
        assert sample_diff in user_prompt

    def test_no_usable_output(self, fake_backend, commit_types, sample_diff):
        """Test that comment-only output is an EmptyResponseError."""
        backend = fake_backend(lambda s, u: "# nothing\n```")

        with pytest.raises(EmptyResponseError, match="Raw response"):
            backend.generate_commit_message(sample_diff, commit_types)

    def test_retries_transient_failures(self, fake_backend, commit_types, sample_diff):
        replies = iter([BackendError("busy", status_code=503), "fix: recover"])

        def responder(system_prompt, user_prompt):
            reply = next(replies)
            if isinstance(reply, Exception):
                raise reply
            return reply

        backend = fake_backend(responder)

        assert backend.generate_commit_message(sample_diff, commit_types) == "fix: recover"
        assert len(backend.calls) == 2

    def test_strict_types(self, fake_backend, commit_types, sample_diff):
        """Test that strict mode skips lines with unknown types."""
        backend = fake_backend(lambda s, u: "banana: peel\nfeat: add peeler", strict_types=True)
        assert backend.generate_commit_message(sample_diff, commit_types) == "feat: add peeler"


class TestGenerateDetailedCommit:
    """Tests for generate_detailed_commit method."""

    def test_parses_title_and_body(self, fake_backend, commit_types, sample_diff):
        backend = fake_backend(lambda s, u: "Title: feat: add helper\n\nBody:\n• one")

        result = backend.generate_detailed_commit(sample_diff, commit_types)

        assert result.message == "feat: add helper"
        assert result.body == "• one"

    def test_empty_reply(self, fake_backend, commit_types, sample_diff):
        backend = fake_backend(lambda s, u: "  \n ")
        with pytest.raises(EmptyResponseError, match="Raw response"):
            backend.generate_detailed_commit(sample_diff, commit_types)


class TestPhindProvider:
    """Tests for the disabled Phind backend."""

    def test_constructs_with_default_model(self):
        assert PhindProvider().get_model() == "Phind-70B"

    def test_generation_is_disabled(self, commit_types, sample_diff, mocker):
        sleep = mocker.MagicMock()
        provider = PhindProvider(retry_policy=RetryPolicy(sleep=sleep))

        with pytest.raises(BackendDisabledError, match="deprecated"):
            provider.generate_commit_message(sample_diff, commit_types)

        sleep.assert_not_called()
