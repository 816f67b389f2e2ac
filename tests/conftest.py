"""Shared test fixtures and configuration."""

import tempfile
from pathlib import Path

import pytest

from diffdraft import config
from diffdraft.diff.models import byte_len
from diffdraft.formatters import DEFAULT_COMMIT_TYPES, build_type_vocabulary
from diffdraft.llm.base import BaseLLMProvider
from diffdraft.llm.retry import RetryPolicy


class FakeBackend(BaseLLMProvider):
    """Backend whose network round trip is a plain function.

    ``responder(system_prompt, user_prompt)`` returns the raw reply or
    raises. Every call goes through the real base-class preparation,
    retry and extraction.
    """

    name = "Fake"

    def __init__(self, responder=None, **kwargs):
        kwargs.setdefault("retry_policy", RetryPolicy(sleep=lambda _: None))
        super().__init__(model="fake-model", **kwargs)
        self.responder = responder or (lambda system_prompt, user_prompt: "feat: update code")
        self.calls = []

    def _complete(self, system_prompt, user_prompt):
        self.calls.append((system_prompt, user_prompt))
        return self.responder(system_prompt, user_prompt)

    @property
    def user_prompts(self):
        return [user_prompt for _, user_prompt in self.calls]


def make_file_diff(path: str, size: int) -> str:
    """Build a single-file diff of exactly ``size`` bytes with lines of at most 100 bytes."""
    header = (
        f"diff --git a/{path} b/{path}\n"
        f"--- a/{path}\n"
        f"+++ b/{path}\n"
        "@@ -0,0 +1 @@\n"
    )
    remaining = size - byte_len(header)
    lines = []
    while remaining > 0:
        n = min(100, remaining)
        if remaining - n == 1:
            n -= 1
        lines.append("+" + "x" * (n - 2) + "\n")
        remaining -= n
    return header + "".join(lines)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def isolated_config_dir(temp_dir, mocker):
    """Point ~/.diffdraft at a temporary directory for every test."""
    config_dir = temp_dir / ".diffdraft"
    mocker.patch("diffdraft.global_config._CONFIG_DIR", config_dir)
    return config_dir


@pytest.fixture(autouse=True)
def restore_active_config(monkeypatch):
    """Undo load_config() changes to the module-level active settings."""
    for name in ("ACTIVE_PROVIDER", "ACTIVE_MODEL", "MAX_TOKENS", "TEMPERATURE"):
        monkeypatch.setattr(config, name, getattr(config, name))


@pytest.fixture
def clean_env(monkeypatch):
    """Remove backend credentials and model overrides from the environment."""
    for var in (
        "OPENROUTER_API_KEY",
        "GROQ_API_KEY",
        "GEMINI_API_KEY",
        "OPENROUTER_MODEL",
        "GROQ_MODEL",
        "GEMINI_MODEL",
        "GOOGLE_CLIENT_ID",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def fake_backend():
    """Factory for scripted backends."""
    return FakeBackend


@pytest.fixture
def commit_types():
    """Serialized default commit type vocabulary."""
    return build_type_vocabulary(DEFAULT_COMMIT_TYPES)


@pytest.fixture
def sample_diff():
    """A small two-file staged diff."""
    return """diff --git a/pkg/ai/chunked.py b/pkg/ai/chunked.py
index 1234567..abcdefg 100644
--- a/pkg/ai/chunked.py
+++ b/pkg/ai/chunked.py
@@ -1,5 +1,8 @@
 def main():
-    print("old")
+    print("new")
+
+def helper():
+    return True
diff --git a/README.md b/README.md
new file mode 100644
index 0000000..e69de29
--- /dev/null
+++ b/README.md
@@ -0,0 +1,2 @@
+# Title
+Some docs
"""


@pytest.fixture
def file_diff():
    """Builder for exactly-sized single-file diffs."""
    return make_file_diff
