"""Git-related exception classes.

Contains:
- GitError: Base exception for git-related errors
- NoStagedChangesError: Raised when nothing is staged for commit
"""


class GitError(Exception):
    """Raised when a git command fails or git is unavailable."""

    pass


class NoStagedChangesError(GitError):
    """Raised when there are no staged changes."""

    pass
