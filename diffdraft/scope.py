"""Scope inference for diffdraft.

Derives a short commit scope such as "llm" or "cli" from the staged file
paths. Strategies, in order:
- single directory: the last component of that directory
- common prefix: the last component of the shared directory prefix
- most common: the last component of the directory with the most files

Root-level files contribute their basename without extension, so a change
to only "README.md" gets the scope "README".
"""

import posixpath
from collections import Counter
from typing import Iterable, Optional


def normalize_path(path: str) -> str:
    """Normalize a file path for consistent processing.

    Args:
        path: The file path to normalize.

    Returns:
        Normalized path with forward slashes and no leading "./".
    """
    normalized = path.strip().replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized.strip("/")


def scope_key(path: str) -> str:
    """Return the directory a file is grouped under for scope inference.

    Args:
        path: A repository-relative file path.

    Returns:
        The file's directory, or the basename without extension for
        root-level files.
    """
    normalized = normalize_path(path)
    directory = posixpath.dirname(normalized)
    if directory:
        return directory
    stem, _ = posixpath.splitext(posixpath.basename(normalized))
    return stem or normalized


def _last_component(directory: str) -> str:
    return directory.rsplit("/", 1)[-1]


def _common_prefix(directories: list[str]) -> list[str]:
    common = directories[0].split("/")
    for directory in directories[1:]:
        parts = directory.split("/")
        length = 0
        for ours, theirs in zip(common, parts):
            if ours != theirs:
                break
            length += 1
        common = common[:length]
        if not common:
            break
    return common


def infer_scope_from_files(paths: Iterable[str]) -> Optional[str]:
    """Infer a commit scope from a list of changed file paths.

    Args:
        paths: Repository-relative file paths.

    Returns:
        The inferred scope, or None when there are no paths.
    """
    directories = [scope_key(p) for p in paths if p and p.strip()]
    if not directories:
        return None

    counts = Counter(directories)
    if len(counts) == 1:
        return _last_component(directories[0])

    common = _common_prefix(directories)
    if common:
        return common[-1]

    # Counter keeps first-seen order, so ties go to the earliest directory
    directory, _ = counts.most_common(1)[0]
    return _last_component(directory)
