"""Staged changes and committing.

Contains:
- get_staged_files: List the staged file paths
- get_staged_diff: Get the full staged diff
- commit: Create a commit from a title and optional body
"""

from pathlib import Path
from typing import Optional

from diffdraft.git.exceptions import NoStagedChangesError
from diffdraft.git.runner import _run_git_command

NO_STAGED_CHANGES = "No staged changes found. Stage your changes first with: git add <files>"


def get_staged_files(cwd: Optional[Path] = None) -> list[str]:
    """Get list of staged file paths.

    Returns:
        List of staged file paths, empty when nothing is staged.
    """
    output = _run_git_command(["diff", "--staged", "--name-only"], cwd=cwd)
    if not output:
        return []
    return [line for line in output.split("\n") if line.strip()]


def get_staged_diff(cwd: Optional[Path] = None) -> str:
    """Get the staged diff.

    The diff is returned untruncated; size handling belongs to the
    generation pipeline.

    Raises:
        NoStagedChangesError: If there are no staged changes.
    """
    diff = _run_git_command(["diff", "--staged"], cwd=cwd, strip=False)
    if not diff.strip():
        raise NoStagedChangesError(NO_STAGED_CHANGES)
    return diff


def commit(
    message: str,
    body: str = "",
    cwd: Optional[Path] = None,
    sign_off: bool = False,
) -> str:
    """Commit the staged changes.

    The message is passed on stdin with ``-F -`` so multi-line bodies and
    leading dashes survive unescaped.

    Args:
        message: The commit title.
        body: Optional body, separated from the title by a blank line.
        cwd: Repository directory.
        sign_off: Add a Signed-off-by trailer (``--signoff``).

    Returns:
        The output of ``git commit``.

    Raises:
        GitError: If the commit fails.
    """
    full_message = f"{message}\n\n{body}" if body else message
    args = ["commit", "-F", "-"]
    if sign_off:
        args.append("--signoff")
    return _run_git_command(args, cwd=cwd, input_text=full_message + "\n")
