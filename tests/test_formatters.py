"""Tests for diffdraft.formatters module."""

import json

import pytest
from pydantic import ValidationError

from diffdraft.formatters import (
    DEFAULT_COMMIT_TYPES,
    CommitResult,
    CommitType,
    apply_commit_style,
    build_type_vocabulary,
    load_commit_types,
    parse_type_vocabulary,
    render_commit_message,
    sanitize_title,
)


class TestCommitResult:
    """Tests for CommitResult model."""

    def test_strips_fields(self):
        result = CommitResult(message="  feat: x  ", body="\n• a\n")
        assert result.message == "feat: x"
        assert result.body == "• a"

    def test_empty_message_rejected(self):
        with pytest.raises(ValidationError):
            CommitResult(message="   ")


class TestTypeVocabulary:
    """Tests for commit type vocabulary helpers."""

    def test_default_types(self):
        names = [t.name for t in DEFAULT_COMMIT_TYPES]
        assert names == [
            "feat", "fix", "docs", "refactor", "chore", "test",
            "hotfix", "deprecate", "perf", "wip", "package",
        ]

    def test_build_vocabulary(self):
        """Test that the vocabulary is a name-to-description JSON object."""
        types = [CommitType(name="feat", description="New feature"), CommitType(name="fix", description="Bug fix")]

        vocabulary = build_type_vocabulary(types)

        assert json.loads(vocabulary) == {"feat": "New feature", "fix": "Bug fix"}

    def test_parse_vocabulary(self):
        vocabulary = build_type_vocabulary(DEFAULT_COMMIT_TYPES)
        assert parse_type_vocabulary(vocabulary) == {t.name for t in DEFAULT_COMMIT_TYPES}

    def test_parse_vocabulary_not_json(self):
        assert parse_type_vocabulary("feat, fix") == set()

    def test_parse_vocabulary_not_object(self):
        assert parse_type_vocabulary('["feat"]') == set()

    def test_load_commit_types_defaults(self):
        assert load_commit_types(None) == DEFAULT_COMMIT_TYPES
        assert load_commit_types([]) == DEFAULT_COMMIT_TYPES

    def test_load_commit_types_from_config(self):
        types = load_commit_types([{"name": "build", "description": "Build system", "emoji": "🏗️"}])
        assert types == [CommitType(name="build", description="Build system", emoji="🏗️")]

    def test_load_commit_types_rejects_bad_entries(self):
        with pytest.raises(ValidationError):
            load_commit_types([{"name": "feat"}])
        with pytest.raises(ValidationError):
            load_commit_types(["feat"])


class TestSanitizeTitle:
    """Tests for sanitize_title function."""

    def test_first_line_only(self):
        assert sanitize_title("  feat: x\nmore  ") == "feat: x"

    def test_truncates_long_title(self):
        title = sanitize_title("feat: " + "a" * 100)
        assert len(title) == 72
        assert title.endswith("...")

    def test_short_title_unchanged(self):
        assert sanitize_title("fix: y") == "fix: y"


class TestRenderCommitMessage:
    """Tests for render_commit_message function."""

    def test_title_only(self):
        assert render_commit_message(CommitResult(message="docs: update readme")) == "docs: update readme"

    def test_title_and_body(self):
        result = CommitResult(message="feat(auth): add login", body="• Add JWT\n• Add endpoints")
        assert render_commit_message(result) == "feat(auth): add login\n\n• Add JWT\n• Add endpoints"


class TestApplyCommitStyle:
    """Tests for apply_commit_style function."""

    def test_adds_emoji(self):
        assert apply_commit_style("feat(auth): add login", DEFAULT_COMMIT_TYPES) == "feat ✨ (auth): add login"

    def test_emoji_without_scope(self):
        assert apply_commit_style("fix: handle nil", DEFAULT_COMMIT_TYPES) == "fix 🐛: handle nil"

    def test_no_emoji(self):
        assert apply_commit_style("feat(auth): add login", DEFAULT_COMMIT_TYPES, no_emoji=True) == "feat(auth): add login"

    def test_type_override(self):
        result = apply_commit_style("feat(auth): add login", DEFAULT_COMMIT_TYPES, type_override="fix")
        assert result == "fix 🐛 (auth): add login"

    def test_scope_override_wins(self):
        result = apply_commit_style(
            "feat(auth): add login",
            DEFAULT_COMMIT_TYPES,
            no_emoji=True,
            scope_override="api",
            detected_scope="core",
        )
        assert result == "feat(api): add login"

    def test_detected_scope_replaces_model_scope(self):
        result = apply_commit_style("feat(auth): add login", no_emoji=True, detected_scope="core")
        assert result == "feat(core): add login"

    def test_detected_scope_added(self):
        result = apply_commit_style("docs: fix typo", no_emoji=True, detected_scope="readme")
        assert result == "docs(readme): fix typo"

    def test_breaking_marker_kept(self):
        result = apply_commit_style("feat(api)!: drop v1", DEFAULT_COMMIT_TYPES)
        assert result == "feat ✨ (api)!: drop v1"

    def test_unknown_type_has_no_emoji(self):
        assert apply_commit_style("banana: peel", DEFAULT_COMMIT_TYPES) == "banana: peel"

    def test_non_conventional_unchanged(self):
        assert apply_commit_style("Update stuff", DEFAULT_COMMIT_TYPES, type_override="fix") == "Update stuff"
