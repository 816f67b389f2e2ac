"""Data models for parsed diffs, summaries and chunks.

Contains:
- ChangeLine: One signed line of a diff body
- FileChange: Changes grouped under one ``diff --git`` header
- DiffSummary: Compact synopsis of a whole diff
- Chunk: A size-bounded slice of a diff's text
- ChunkResult: Outcome of generating a message for one chunk
"""

from dataclasses import dataclass, field
from typing import Optional


def byte_len(text: str) -> int:
    """Return the UTF-8 encoded length of text."""
    return len(text.encode("utf-8"))


@dataclass(frozen=True)
class ChangeLine:
    """A single line of a diff body.

    Attributes:
        sign: "+" for additions, "-" for removals, " " for context.
        content: The line text without its sign.
        line_number: Zero-based line index within the original diff.
    """

    sign: str
    content: str
    line_number: int = 0

    @property
    def is_addition(self) -> bool:
        return self.sign == "+"

    @property
    def is_removal(self) -> bool:
        return self.sign == "-"


@dataclass(frozen=True)
class FileChange:
    """Changes to one file.

    Attributes:
        path: Repository-relative path of the file.
        delta: "+N" when additions win, "-N" when removals win, "=" when equal.
        changes: The file's change lines in diff order.
        is_new_file: File was created.
        is_deleted: File was removed.
        is_binary: Git reported a binary change.
    """

    path: str
    delta: str
    changes: tuple[ChangeLine, ...] = ()
    is_new_file: bool = False
    is_deleted: bool = False
    is_binary: bool = False

    @property
    def additions(self) -> int:
        return sum(1 for change in self.changes if change.is_addition)

    @property
    def removals(self) -> int:
        return sum(1 for change in self.changes if change.is_removal)


@dataclass(frozen=True)
class DiffSummary:
    """Synopsis of a diff.

    ``summary_size`` is the byte size of what is sent downstream (synopsis
    plus retained excerpt). When it is smaller than ``original_size`` the diff
    was compressed and the synopsis should be disclosed to the backend.
    """

    original_size: int = 0
    summary_size: int = 0
    files_changed: tuple[FileChange, ...] = ()
    summary: str = ""

    @property
    def is_compressed(self) -> bool:
        return self.summary_size < self.original_size


@dataclass(frozen=True)
class Chunk:
    """A contiguous slice of diff text."""

    index: int
    text: str

    @property
    def size(self) -> int:
        return byte_len(self.text)


@dataclass(frozen=True)
class ChunkResult:
    """Result of generating a partial message for one chunk."""

    chunk_index: int
    summary: str = ""
    files: list[str] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None
