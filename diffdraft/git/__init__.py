"""Git collaborator for diffdraft.

This package provides:
- exceptions: GitError, NoStagedChangesError
- runner: _run_git_command, get_repo_root
- diff: get_staged_files, get_staged_diff, commit
"""

from diffdraft.git.exceptions import (
    GitError,
    NoStagedChangesError,
)
from diffdraft.git.runner import (
    _run_git_command,
    get_repo_root,
)
from diffdraft.git.diff import (
    commit,
    get_staged_diff,
    get_staged_files,
)


__all__ = [
    # Exceptions
    "GitError",
    "NoStagedChangesError",
    # Runner
    "_run_git_command",
    "get_repo_root",
    # Diff
    "get_staged_files",
    "get_staged_diff",
    "commit",
]
