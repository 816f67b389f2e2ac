"""Extraction and validation of commit messages from raw backend output.

Contains:
- extract_commit_message: Pick the best single commit line from free-form text
- is_valid_commit_message: Structural check for "type(scope): description"
- parse_detailed_commit_message: Split "Title:" / "Body:" output
"""

from typing import Iterable, Optional

from diffdraft.config import MAX_TITLE_LENGTH
from diffdraft.formatters import CommitResult
from diffdraft.llm.exceptions import EmptyResponseError

FENCE = "```"
TITLE_MARKER = "Title:"
BODY_MARKER = "body:"


def _strip_markdown(line: str) -> str:
    """Remove surrounding code fences and backticks from a line."""
    line = line.strip()
    line = line.removeprefix(FENCE).removesuffix(FENCE).strip()
    if len(line) > 1 and line.startswith("`") and line.endswith("`"):
        line = line[1:-1]
    return line.strip()


def _is_content_line(line: str) -> bool:
    return bool(line) and not line.startswith("#") and not line.startswith(FENCE)


def is_valid_commit_message(
    message: str,
    known_types: Optional[Iterable[str]] = None,
    strict: bool = False,
) -> bool:
    """Check if a string looks like a valid conventional commit message.

    The message must be shorter than 72 characters and split on its first
    colon into a non-empty head and a non-empty description. The head minus
    any "(scope)" suffix and "!" marker is the type. Unknown types are
    accepted unless ``strict`` is set, in which case the type must be in
    ``known_types``.

    Args:
        message: The candidate commit title.
        known_types: Vocabulary of type names.
        strict: Reject types outside ``known_types``.

    Returns:
        True if the message is well-formed.
    """
    if len(message) >= MAX_TITLE_LENGTH:
        return False

    head, sep, description = message.partition(":")
    if not sep:
        return False

    head = head.strip()
    if not head or not description.strip():
        return False

    commit_type = head.split("(", 1)[0].removesuffix("!").strip()
    if not commit_type:
        return False

    if strict:
        return commit_type in set(known_types or ())

    return True


def extract_commit_message(
    raw_result: str,
    known_types: Optional[Iterable[str]] = None,
    strict: bool = False,
) -> str:
    """Extract the best single-line commit message from raw backend text.

    Strategies, in order:
        1. The first line that passes validation once fences, backticks and
           whitespace are stripped (blank and "#" lines skipped).
        2. The first non-empty line that is not a comment or a fence.
        3. The whole trimmed response, when it is at most 72 characters and
           holds at least one line that is not a comment or a fence.
        4. An empty string.

    Args:
        raw_result: The raw text returned by a backend.
        known_types: Vocabulary of type names, for strict validation.
        strict: Reject types outside ``known_types``.

    Returns:
        The extracted message, or "" if nothing usable was found.
    """
    lines = raw_result.split("\n")

    for line in lines:
        candidate = _strip_markdown(line)
        if not candidate or candidate.startswith("#"):
            continue
        if is_valid_commit_message(candidate, known_types, strict):
            return candidate

    for line in lines:
        trimmed = line.strip()
        if _is_content_line(trimmed):
            return trimmed

    trimmed_result = raw_result.strip()
    if trimmed_result and len(trimmed_result) <= MAX_TITLE_LENGTH:
        if any(_is_content_line(line.strip()) for line in trimmed_result.split("\n")):
            return trimmed_result

    return ""


def parse_detailed_commit_message(response: str) -> CommitResult:
    """Parse a response that contains both a title and a body.

    Expected format:
        Title: fix(api): resolve timeout

        Body:
        • retries added
        • timeout raised

    Without a "Title:" line the whole trimmed response becomes the message
    and the body is empty.

    Raises:
        EmptyResponseError: If the response holds no message at all.
    """
    title = ""
    body_lines: list[str] = []
    in_body = False

    for line in response.split("\n"):
        trimmed = line.strip()

        if trimmed.startswith(TITLE_MARKER):
            title = trimmed[len(TITLE_MARKER):].strip()
            continue

        if trimmed.lower().startswith(BODY_MARKER):
            in_body = True
            rest = trimmed[len(BODY_MARKER):].strip()
            if rest:
                body_lines.append(rest)
            continue

        if in_body and trimmed:
            body_lines.append(trimmed)

    if title:
        body = "\n".join(body_lines)
    else:
        title = response.strip()
        body = ""

    if not title:
        raise EmptyResponseError("No commit message found in response")

    return CommitResult(message=title, body=body)
