"""Diff summarization and size reduction.

Contains:
- summarize_diff: Parse a unified diff into FileChanges and a short synopsis
- create_optimized_diff: Shrink an oversized diff to headers plus key changes
- truncate_diff: Legacy head-and-tail truncation for non-chunking callers
- enhance_small_diff: Add a clarifying note to near-empty diffs
"""

from loguru import logger

from diffdraft.config import DEFAULT_MAX_DIFF_SIZE, DEFAULT_MIN_DIFF_SIZE
from diffdraft.diff.models import ChangeLine, DiffSummary, FileChange, byte_len

FILE_HEADER_PREFIX = "diff --git "
HEADER_PREFIXES = ("diff --git", "index ", "---", "+++", "@@")
DEFAULT_HEADER_LINES = 10

OPTIMIZED_MARKER = "... (diff optimized for size)"
TRUNCATED_MARKER = "... (diff truncated)"
SMALL_DIFF_NOTE = (
    "# Note: This is a very small change. "
    "Please focus on the specific modification shown above."
)


def parse_file_header(line: str) -> str | None:
    """Extract the file path from a ``diff --git a/<path> b/<path>`` line.

    Renames report the destination path.

    Args:
        line: A diff line starting with ``diff --git``.

    Returns:
        The repository-relative path, or None if the header is malformed.
    """
    parts = line.split()
    if len(parts) < 4:
        return None

    source = parts[2].removeprefix("a/")
    destination = parts[3].removeprefix("b/")
    return source if source == destination else destination


def compute_delta(changes: list[ChangeLine]) -> str:
    """Compute the net delta descriptor for a list of change lines."""
    additions = sum(1 for change in changes if change.is_addition)
    removals = sum(1 for change in changes if change.is_removal)

    if additions > removals:
        return f"+{additions - removals}"
    if removals > additions:
        return f"-{removals - additions}"
    return "="


def parse_file_changes(diff: str) -> list[FileChange]:
    """Group the lines of a unified diff by file.

    Lines before the first file header are ignored, so input with no
    recognizable headers yields an empty list.
    """
    file_changes: list[FileChange] = []
    current: dict | None = None

    def flush() -> None:
        if current is None:
            return
        file_changes.append(FileChange(
            path=current["path"],
            delta=compute_delta(current["changes"]),
            changes=tuple(current["changes"]),
            is_new_file=current["is_new_file"],
            is_deleted=current["is_deleted"],
            is_binary=current["is_binary"],
        ))

    for line_number, line in enumerate(diff.split("\n")):
        if line.startswith(FILE_HEADER_PREFIX):
            flush()
            path = parse_file_header(line)
            current = None if path is None else {
                "path": path,
                "changes": [],
                "is_new_file": False,
                "is_deleted": False,
                "is_binary": False,
            }
            continue

        if current is None:
            continue

        if line.startswith("new file mode"):
            current["is_new_file"] = True
        elif line.startswith("deleted file mode"):
            current["is_deleted"] = True
        elif line.startswith("Binary files"):
            current["is_binary"] = True
        elif line.startswith("+++") or line.startswith("---"):
            # File name lines, not content
            continue
        elif line.startswith("+") or line.startswith("-"):
            current["changes"].append(ChangeLine(line[0], line[1:], line_number))
        elif line.startswith(" "):
            current["changes"].append(ChangeLine(" ", line[1:], line_number))

    flush()
    return file_changes


def build_synopsis(file_changes: list[FileChange]) -> str:
    """Build the human-readable listing of changed files.

    Example output for several files:
        3 files changed
          pkg/ai/chunked.go (+12)
          pkg/ai/utils.go (-3)
          README.md (=)
    """
    if not file_changes:
        return ""

    if len(file_changes) == 1:
        change = file_changes[0]
        return f"Modified: {change.path} ({change.delta})"

    parts = [f"{len(file_changes)} files changed"]
    parts.extend(f"  {change.path} ({change.delta})" for change in file_changes)
    return "\n".join(parts)


def summarize_diff(diff: str, max_diff_size: int = DEFAULT_MAX_DIFF_SIZE) -> tuple[DiffSummary, str]:
    """Summarize a diff and decide what text to send downstream.

    Args:
        diff: The raw unified diff.
        max_diff_size: Byte size above which the diff is optimized.

    Returns:
        A (DiffSummary, optimized_diff) tuple. The optimized diff equals the
        input when it already fits ``max_diff_size``.
    """
    if not diff:
        return DiffSummary(), ""

    file_changes = parse_file_changes(diff)
    synopsis = build_synopsis(file_changes)
    original_size = byte_len(diff)

    if original_size <= max_diff_size:
        optimized = diff
    else:
        optimized = create_optimized_diff(diff, file_changes, max_diff_size)
        logger.debug(
            f"Optimized diff from {original_size} to {byte_len(optimized)} bytes "
            f"across {len(file_changes)} files"
        )

    summary = DiffSummary(
        original_size=original_size,
        summary_size=byte_len(synopsis) + byte_len(optimized),
        files_changed=tuple(file_changes),
        summary=synopsis,
    )
    return summary, optimized


def create_optimized_diff(
    original_diff: str,
    file_changes: list[FileChange],
    max_diff_size: int = DEFAULT_MAX_DIFF_SIZE,
) -> str:
    """Create a smaller version of a diff that keeps only the key changes.

    Keeps the header lines found in the first few lines of the diff, then an
    excerpt of each file's added and removed lines, sharing the byte budget
    evenly between files.
    """
    if byte_len(original_diff) <= max_diff_size:
        return original_diff

    lines = original_diff.split("\n")
    optimized_lines = [
        line for line in lines[:DEFAULT_HEADER_LINES] if line.startswith(HEADER_PREFIXES)
    ]
    size = sum(byte_len(line) + 1 for line in optimized_lines)
    per_file_budget = max_diff_size // (len(file_changes) + 1)
    cut = False

    for file_change in file_changes:
        heading = f"# Key changes in {file_change.path}:"
        kept = ["", heading]
        kept_size = byte_len(heading) + 2

        for change in file_change.changes:
            if change.sign == " ":
                continue
            text = change.sign + change.content
            line_size = byte_len(text) + 1
            if kept_size + line_size > per_file_budget:
                cut = True
                break
            kept.append(text)
            kept_size += line_size

        if len(kept) == 2:
            continue
        if size + kept_size > max_diff_size:
            cut = True
            break

        optimized_lines.extend(kept)
        size += kept_size

    result = "\n".join(optimized_lines)
    if cut:
        result += "\n" + OPTIMIZED_MARKER
    return result


def truncate_diff(
    diff: str,
    max_diff_size: int = DEFAULT_MAX_DIFF_SIZE,
    header_lines: int = DEFAULT_HEADER_LINES,
) -> str:
    """Truncate a diff to fit within API limits while preserving context.

    Keeps the first ``header_lines`` lines and as much of the tail of the
    diff as fits, separated by a truncation marker.
    """
    if byte_len(diff) <= max_diff_size:
        return diff

    lines = diff.split("\n")
    head = lines[:header_lines]
    tail_lines = lines[header_lines:]

    remaining = max_diff_size - byte_len("\n".join(head)) - byte_len(TRUNCATED_MARKER) - 2
    tail: list[str] = []
    for line in reversed(tail_lines):
        line_size = byte_len(line) + 1
        if line_size > remaining:
            break
        tail.append(line)
        remaining -= line_size
    tail.reverse()

    truncated = "\n".join(head + [TRUNCATED_MARKER] + tail)
    if byte_len(truncated) > max_diff_size:
        # Header lines alone are over budget
        encoded = truncated.encode("utf-8")[:max_diff_size]
        truncated = encoded.decode("utf-8", errors="ignore") + "\n" + TRUNCATED_MARKER

    logger.debug(f"Truncated diff from {byte_len(diff)} to {byte_len(truncated)} bytes")
    return truncated


def enhance_small_diff(diff: str, min_diff_size: int = DEFAULT_MIN_DIFF_SIZE) -> str:
    """Add context to very small diffs to make them more meaningful."""
    if byte_len(diff) >= min_diff_size:
        return diff
    return f"{diff}\n\n{SMALL_DIFF_NOTE}"
