"""Splitting of large diffs into size-bounded chunks.

Contains:
- split_diff_into_chunks: Split diff text on line boundaries under a byte budget
- extract_files_from_chunk: List the files whose headers appear in a chunk
"""

from diffdraft.config import DEFAULT_MAX_CHUNK_SIZE
from diffdraft.diff.models import Chunk, byte_len


def _split_lines(diff: str) -> list[str]:
    """Split on "\n" only, keeping line endings.

    Unlike str.splitlines, form feeds and lone "\r" stay inside their line.
    """
    lines = diff.split("\n")
    pieces = [line + "\n" for line in lines[:-1]]
    if lines[-1]:
        pieces.append(lines[-1])
    return pieces


def split_diff_into_chunks(diff: str, max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE) -> list[Chunk]:
    """Split a diff into chunks of at most ``max_chunk_size`` bytes.

    Chunks always end on a line boundary and their texts concatenate back to
    the input. A single line longer than the budget is kept whole in its own
    chunk rather than cut, so header lines are never corrupted.

    Args:
        diff: The diff text.
        max_chunk_size: Byte budget per chunk.

    Returns:
        A non-empty list of chunks in diff order.
    """
    if max_chunk_size <= 0:
        raise ValueError(f"max_chunk_size must be positive, got {max_chunk_size}")

    if byte_len(diff) <= max_chunk_size:
        return [Chunk(index=0, text=diff)]

    chunks: list[Chunk] = []
    buffer: list[str] = []
    buffer_size = 0

    for line in _split_lines(diff):
        line_size = byte_len(line)

        if buffer and buffer_size + line_size > max_chunk_size:
            chunks.append(Chunk(index=len(chunks), text="".join(buffer)))
            buffer = []
            buffer_size = 0

        buffer.append(line)
        buffer_size += line_size

    if buffer:
        chunks.append(Chunk(index=len(chunks), text="".join(buffer)))

    return chunks


def extract_files_from_chunk(chunk: str) -> list[str]:
    """Extract file paths from the ``diff --git`` headers in a chunk.

    The path is the header's source token with the ``a/`` prefix removed.
    """
    files = []
    for line in chunk.split("\n"):
        if line.startswith("diff --git"):
            parts = line.split()
            if len(parts) >= 4:
                files.append(parts[2].removeprefix("a/"))
    return files
