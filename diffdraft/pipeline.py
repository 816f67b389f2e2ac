"""Chunked commit message generation.

Large diffs are split into chunks, each chunk is summarized by the backend,
and a final merge call turns the partial summaries into one message.

Contains:
- PipelineSettings: Size thresholds and concurrency for one run
- ChunkedDiffProcessor: Per-chunk generation and merging
- generate_commit: Entry point used by the CLI
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from loguru import logger
from pydantic import BaseModel, Field

from diffdraft.config import (
    DEFAULT_CHUNK_WORKERS,
    DEFAULT_MAX_CHUNK_SIZE,
    DEFAULT_MAX_DIFF_SIZE,
    DEFAULT_MIN_DIFF_SIZE,
)
from diffdraft.diff.chunker import extract_files_from_chunk, split_diff_into_chunks
from diffdraft.diff.models import Chunk, ChunkResult, byte_len
from diffdraft.diff.summarizer import truncate_diff
from diffdraft.formatters import CommitResult
from diffdraft.llm.base import BaseLLMProvider
from diffdraft.llm.exceptions import ChunkProcessingError, InvalidInputError, LLMError
from diffdraft.llm.parsing import parse_detailed_commit_message
from diffdraft.llm.prompts import build_detailed_merge_prompt, build_merge_prompt
from diffdraft.log import time_block


class PipelineSettings(BaseModel):
    """Thresholds for one pipeline run."""

    max_chunk_size: int = Field(default=DEFAULT_MAX_CHUNK_SIZE, gt=0)
    max_diff_size: int = Field(default=DEFAULT_MAX_DIFF_SIZE, gt=0)
    min_diff_size: int = Field(default=DEFAULT_MIN_DIFF_SIZE, ge=0)
    chunk_workers: int = Field(default=DEFAULT_CHUNK_WORKERS, ge=1)
    chunking: bool = True
    strict_types: bool = False


def get_pipeline_settings() -> PipelineSettings:
    """Build pipeline settings from the global config file."""
    from diffdraft.global_config import get_pipeline_config

    return PipelineSettings(**get_pipeline_config())


class ChunkedDiffProcessor:
    """Generates commit messages for diffs of any size.

    One processor serves one pipeline run. After a run, ``failed_chunks``
    holds the chunks whose generation failed but did not block the result.
    """

    def __init__(
        self,
        backend: BaseLLMProvider,
        max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
        max_workers: int = DEFAULT_CHUNK_WORKERS,
    ):
        self.backend = backend
        self.max_chunk_size = max_chunk_size
        self.max_workers = max(1, max_workers)
        self.failed_chunks: list[ChunkResult] = []

    def _validate(self, diff: str, commit_types: str) -> None:
        if not diff:
            raise InvalidInputError("empty diff provided")
        if not commit_types or not commit_types.strip():
            raise InvalidInputError("empty commit type vocabulary provided")

    def _fits(self, diff: str) -> bool:
        return byte_len(diff) <= self.max_chunk_size

    def process_chunked_diff(self, diff: str, commit_types: str, extra_context: str = "") -> str:
        """Generate a single-line commit message for a diff of any size.

        Args:
            diff: The diff text.
            commit_types: JSON mapping of commit type name to description.
            extra_context: Optional free-form hint for the model.

        Returns:
            The commit message.

        Raises:
            InvalidInputError: If the diff or the vocabulary is empty.
            ChunkProcessingError: If every chunk failed.
            LLMError: For backend failures on a diff that needed no chunking.
        """
        self._validate(diff, commit_types)
        self.failed_chunks = []

        if self._fits(diff):
            return self.backend.generate_commit_message(diff, commit_types, extra_context)

        results = self._process_chunks(diff, commit_types, extra_context)
        return self.merge_chunk_results(results, commit_types, extra_context)

    def process_chunked_detailed_commit(
        self, diff: str, commit_types: str, extra_context: str = ""
    ) -> CommitResult:
        """Generate a commit title and body for a diff of any size.

        Raises:
            InvalidInputError: If the diff or the vocabulary is empty.
            ChunkProcessingError: If every chunk failed.
            LLMError: For backend failures on a diff that needed no chunking.
        """
        self._validate(diff, commit_types)
        self.failed_chunks = []

        if self._fits(diff):
            return self.backend.generate_detailed_commit(diff, commit_types, extra_context)

        results = self._process_chunks(diff, commit_types, extra_context)
        return self.merge_detailed_chunk_results(results, commit_types, extra_context)

    def _process_chunks(self, diff: str, commit_types: str, extra_context: str) -> list[ChunkResult]:
        chunks = split_diff_into_chunks(diff, self.max_chunk_size)
        total = len(chunks)
        logger.debug(f"Split {byte_len(diff)} byte diff into {total} chunks")

        with time_block(f"processing {total} chunks"):
            if self.max_workers == 1 or total == 1:
                results = [self.process_chunk(c, total, commit_types, extra_context) for c in chunks]
            else:
                with ThreadPoolExecutor(max_workers=min(self.max_workers, total)) as executor:
                    futures = [
                        executor.submit(self.process_chunk, c, total, commit_types, extra_context)
                        for c in chunks
                    ]
                    results = [future.result() for future in futures]

        # Merge input must not depend on completion order
        return sorted(results, key=lambda result: result.chunk_index)

    def process_chunk(
        self, chunk: Chunk, total: int, commit_types: str, extra_context: str = ""
    ) -> ChunkResult:
        """Generate the partial message for one chunk.

        Backend failures are captured in the result rather than raised.
        """
        chunk_context = f"(Processing chunk {chunk.index + 1} of {total})"
        context = f"{extra_context} {chunk_context}" if extra_context else chunk_context

        try:
            summary = self.backend.generate_commit_message(chunk.text, commit_types, context)
        except LLMError as e:
            logger.warning(f"Chunk {chunk.index + 1} of {total} failed: {e}")
            return ChunkResult(chunk_index=chunk.index, error=e)

        return ChunkResult(
            chunk_index=chunk.index,
            summary=summary,
            files=extract_files_from_chunk(chunk.text),
        )

    def _split_results(self, results: list[ChunkResult]) -> tuple[list[str], list[str]]:
        """Separate successes from failures.

        Returns:
            (summaries, files) of the successful chunks; files de-duplicated
            in first-seen order.

        Raises:
            ChunkProcessingError: If no chunk succeeded.
        """
        successes = [r for r in results if r.ok]
        self.failed_chunks = [r for r in results if not r.ok]

        if not successes:
            raise ChunkProcessingError(self.failed_chunks)

        if self.failed_chunks:
            failed = ", ".join(str(r.chunk_index) for r in self.failed_chunks)
            logger.warning(
                f"Merging {len(successes)} of {len(results)} chunk results; failed chunks: {failed}"
            )

        summaries = [r.summary for r in successes]
        files = list(dict.fromkeys(f for r in successes for f in r.files))
        return summaries, files

    def merge_chunk_results(
        self, results: list[ChunkResult], commit_types: str, extra_context: str = ""
    ) -> str:
        """Merge per-chunk summaries into a single commit message.

        A single successful chunk is returned as-is. Otherwise one merge call
        is made; if it fails, the first successful summary is returned.
        """
        summaries, files = self._split_results(results)

        if len(summaries) == 1:
            return summaries[0]

        merge_prompt = build_merge_prompt(summaries, files)
        try:
            return self.backend.generate_commit_message(merge_prompt, commit_types, extra_context)
        except LLMError as e:
            logger.warning(f"Merge call failed, using first chunk summary: {e}")
            return summaries[0]

    def merge_detailed_chunk_results(
        self, results: list[ChunkResult], commit_types: str, extra_context: str = ""
    ) -> CommitResult:
        """Merge per-chunk summaries into a single title + body result."""
        summaries, files = self._split_results(results)

        if len(summaries) == 1:
            return parse_detailed_commit_message(summaries[0])

        merge_prompt = build_detailed_merge_prompt(summaries, files)
        try:
            return self.backend.generate_detailed_commit(merge_prompt, commit_types, extra_context)
        except LLMError as e:
            logger.warning(f"Merge call failed, using first chunk summary: {e}")
            return parse_detailed_commit_message(summaries[0])


def generate_commit(
    diff: str,
    commit_types: str,
    extra_context: str = "",
    detailed: bool = False,
    backend: Optional[BaseLLMProvider] = None,
    settings: Optional[PipelineSettings] = None,
) -> CommitResult:
    """Generate a commit message for a diff.

    Args:
        diff: The raw diff text.
        commit_types: JSON mapping of commit type name to description.
        extra_context: Optional free-form hint for the model.
        detailed: Generate a title and bullet-point body.
        backend: Backend to use; defaults to the configured one.
        settings: Thresholds; default values when omitted.

    Returns:
        The generated CommitResult.

    Raises:
        InvalidInputError: If the diff or the vocabulary is empty.
        ChunkProcessingError: If every chunk failed.
        LLMError: For backend failures.
    """
    settings = settings or PipelineSettings()
    if backend is None:
        from diffdraft.llm import get_provider

        backend = get_provider(
            max_diff_size=settings.max_diff_size,
            min_diff_size=settings.min_diff_size,
            strict_types=settings.strict_types,
        )

    if settings.chunking:
        processor = ChunkedDiffProcessor(backend, settings.max_chunk_size, settings.chunk_workers)
        if detailed:
            return processor.process_chunked_detailed_commit(diff, commit_types, extra_context)
        message = processor.process_chunked_diff(diff, commit_types, extra_context)
        return CommitResult(message=message)

    if not diff:
        raise InvalidInputError("empty diff provided")
    diff = truncate_diff(diff, settings.max_diff_size)
    if detailed:
        return backend.generate_detailed_commit(diff, commit_types, extra_context)
    return CommitResult(message=backend.generate_commit_message(diff, commit_types, extra_context))
