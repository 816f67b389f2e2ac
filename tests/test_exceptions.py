"""Tests for diffdraft.llm.exceptions module."""

from diffdraft.diff.models import ChunkResult
from diffdraft.llm.exceptions import (
    BackendConnectionError,
    BackendError,
    ChunkProcessingError,
    LLMError,
    describe_error_body,
    status_error,
)


class TestHierarchy:
    """Tests for the exception hierarchy."""

    def test_connection_error_is_backend_error(self):
        error = BackendConnectionError("timeout")
        assert isinstance(error, BackendError)
        assert isinstance(error, LLMError)
        assert error.status_code is None

    def test_chunk_processing_error_lists_every_chunk(self):
        """Test that the message names each failed chunk and its cause."""
        failures = [
            ChunkResult(chunk_index=0, error=BackendError("boom")),
            ChunkResult(chunk_index=1, error=BackendConnectionError("timeout")),
        ]

        error = ChunkProcessingError(failures)

        assert str(error) == "chunk processing errors: chunk 0: boom; chunk 1: timeout"
        assert error.failures == failures


class TestDescribeErrorBody:
    """Tests for describe_error_body function."""

    def test_json_text_envelope(self):
        assert describe_error_body('{"error": {"message": "quota exceeded"}}') == "quota exceeded"

    def test_dict_envelope(self):
        assert describe_error_body({"error": {"message": "bad model", "code": 400}}) == "bad model"

    def test_inner_error_object(self):
        """Test SDK bodies that are already the inner error object."""
        assert describe_error_body({"message": "invalid key", "type": "auth"}) == "invalid key"

    def test_string_error_field(self):
        assert describe_error_body({"error": "rate limited"}) == "rate limited"

    def test_plain_text_falls_back(self):
        assert describe_error_body("Service Unavailable") == "Service Unavailable"

    def test_bytes_body(self):
        assert describe_error_body(b"<html>502</html>") == "<html>502</html>"

    def test_json_without_message_falls_back_to_raw(self):
        assert describe_error_body('{"detail": "x"}') == '{"detail": "x"}'

    def test_none(self):
        assert describe_error_body(None) == ""


class TestStatusError:
    """Tests for status_error function."""

    def test_builds_backend_error(self):
        error = status_error("OpenRouter", 429, '{"error": {"message": "slow down"}}')

        assert isinstance(error, BackendError)
        assert error.status_code == 429
        assert str(error) == "OpenRouter API error (status 429): slow down"
