"""Commit message models, type vocabulary and rendering."""

import json
import re
from typing import Iterable, Optional

from pydantic import BaseModel, field_validator

from diffdraft.config import MAX_TITLE_LENGTH


class CommitResult(BaseModel):
    """A generated commit message.

    Attributes:
        message: The commit title line.
        body: Optional bullet-point elaboration (empty when absent).
    """

    message: str
    body: str = ""

    @field_validator("message")
    @classmethod
    def message_must_not_be_empty(cls, v: str) -> str:
        """Ensure message is not empty."""
        if not v or not v.strip():
            raise ValueError("Commit message cannot be empty")
        return v.strip()

    @field_validator("body")
    @classmethod
    def strip_body(cls, v: str) -> str:
        return (v or "").strip()


class CommitType(BaseModel):
    """One entry of the commit type vocabulary."""

    name: str
    description: str
    emoji: str = ""
    code: str = ""


DEFAULT_COMMIT_TYPES = [
    CommitType(name="feat", description="Introduce new features.", emoji="✨", code=":sparkles:"),
    CommitType(name="fix", description="Fix a bug.", emoji="🐛", code=":bug:"),
    CommitType(name="docs", description="Documentation change.", emoji="📚", code=":books:"),
    CommitType(name="refactor", description="Improve structure/format of the code.", emoji="🎨", code=":art:"),
    CommitType(name="chore", description="A chore change.", emoji="🧹", code=":broom:"),
    CommitType(name="test", description="Add a test.", emoji="🧪", code=":test_tube:"),
    CommitType(name="hotfix", description="Critical hotfix.", emoji="🚑️", code=":ambulance:"),
    CommitType(name="deprecate", description="Remove dead code.", emoji="⚰️", code=":coffin:"),
    CommitType(name="perf", description="Improve performance.", emoji="⚡️", code=":zap:"),
    CommitType(name="wip", description="Work in progress.", emoji="🚧", code=":construction:"),
    CommitType(name="package", description="Add or update compiled files or packages.", emoji="📦", code=":package:"),
]

# Matches "type(scope): description" and "type!: description"
CONVENTIONAL_PATTERN = re.compile(r"^([a-zA-Z]+)(\([^)]*\))?(!)?:\s*(.*)$")


def build_type_vocabulary(types: Iterable[CommitType]) -> str:
    """Serialize commit types to the JSON mapping sent to backends.

    Returns:
        A JSON object string mapping type name to description.
    """
    return json.dumps({t.name: t.description for t in types}, ensure_ascii=False)


def parse_type_vocabulary(commit_types: str) -> set[str]:
    """Return the type names of a serialized vocabulary.

    Anything that is not a JSON object yields an empty set; the vocabulary is
    only used as a hint for validation.
    """
    try:
        parsed = json.loads(commit_types)
    except (TypeError, ValueError):
        return set()
    if not isinstance(parsed, dict):
        return set()
    return {str(name) for name in parsed}


def load_commit_types(raw_types: Optional[list]) -> list[CommitType]:
    """Build the vocabulary from config entries, falling back to the defaults.

    Raises:
        pydantic.ValidationError: If an entry is not a valid CommitType.
    """
    if not raw_types:
        return list(DEFAULT_COMMIT_TYPES)
    return [CommitType.model_validate(entry) for entry in raw_types]


def sanitize_title(title: str, max_length: int = MAX_TITLE_LENGTH) -> str:
    """Sanitize and truncate the commit title to max_length characters.

    Args:
        title: The raw title string.
        max_length: Maximum allowed length (default 72, the usual git title limit).

    Returns:
        A sanitized single-line title, truncated if necessary.
    """
    # Strip whitespace and take only the first line
    title = title.strip().split("\n")[0].strip()

    if len(title) > max_length:
        title = title[: max_length - 3].rstrip() + "..."

    return title


def render_commit_message(result: CommitResult) -> str:
    """Render a CommitResult into a formatted commit message string.

    Example output:
        feat(auth): add user authentication system

        • Add JWT token generation and validation middleware
        • Implement login/logout endpoints
    """
    title = sanitize_title(result.message)
    if not result.body:
        return title
    return f"{title}\n\n{result.body}"


def apply_commit_style(
    message: str,
    commit_types: Iterable[CommitType] = (),
    no_emoji: bool = False,
    type_override: Optional[str] = None,
    scope_override: Optional[str] = None,
    detected_scope: Optional[str] = None,
) -> str:
    """Rebuild a conventional commit title with the caller's style choices.

    The scope is taken from ``scope_override`` first, then ``detected_scope``,
    then whatever scope the model wrote. The type's emoji from the vocabulary
    is inserted after the type unless ``no_emoji`` is set. Messages that are
    not in ``type(scope): description`` form are returned unchanged.

    Args:
        message: The generated commit title.
        commit_types: Vocabulary used to look up emoji.
        no_emoji: Leave emoji out.
        type_override: Replace the generated type.
        scope_override: Replace the generated scope.
        detected_scope: Scope inferred from the changed file paths.

    Returns:
        The styled title, e.g. "feat ✨ (auth): add login".
    """
    match = CONVENTIONAL_PATTERN.match(message.strip())
    if not match:
        return message

    commit_type, scope_part, breaking, description = match.groups()
    if type_override:
        commit_type = type_override

    if scope_override:
        scope_part = f"({scope_override})"
    elif detected_scope:
        scope_part = f"({detected_scope})"
    scope_part = scope_part or ""

    emoji = ""
    if not no_emoji:
        emoji = next((t.emoji for t in commit_types if t.name == commit_type), "")

    title = commit_type
    if emoji:
        title += f" {emoji}"
        if scope_part:
            title += " "
    title += scope_part
    if breaking:
        title += "!"
    return f"{title}: {description.strip()}"
