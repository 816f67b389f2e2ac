"""Diff parsing, summarization and chunking."""

from diffdraft.diff.chunker import extract_files_from_chunk, split_diff_into_chunks
from diffdraft.diff.models import ChangeLine, Chunk, ChunkResult, DiffSummary, FileChange
from diffdraft.diff.summarizer import (
    create_optimized_diff,
    enhance_small_diff,
    summarize_diff,
    truncate_diff,
)

__all__ = [
    "ChangeLine",
    "Chunk",
    "ChunkResult",
    "DiffSummary",
    "FileChange",
    "create_optimized_diff",
    "enhance_small_diff",
    "extract_files_from_chunk",
    "split_diff_into_chunks",
    "summarize_diff",
    "truncate_diff",
]
