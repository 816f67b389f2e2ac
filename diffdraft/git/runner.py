"""Git command runner and repository utilities.

Contains:
- _run_git_command: Run a git command and return its output
- get_repo_root: Get the root directory of the current git repository
"""

import subprocess
from pathlib import Path
from typing import Optional

from loguru import logger

from diffdraft.git.exceptions import GitError


def _run_git_command(
    args: list[str],
    cwd: Optional[Path] = None,
    strip: bool = True,
    input_text: Optional[str] = None,
) -> str:
    """Run a git command and return its output.

    Args:
        args: List of arguments to pass to git.
        cwd: Directory to run in (defaults to the current directory).
        strip: Strip surrounding whitespace from stdout. Diffs are read
            unstripped so their trailing newline survives.
        input_text: Text written to the command's stdin.

    Returns:
        The stdout of the git command.

    Raises:
        GitError: If the command fails or git is missing.
    """
    logger.debug(f"Running: git {' '.join(args)}")
    try:
        result = subprocess.run(
            ["git"] + args,
            cwd=cwd,
            input=input_text,
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        raise GitError(f"Git command failed: git {' '.join(args)}\n{stderr}") from e
    except FileNotFoundError as e:
        raise GitError("Git is not installed or not in PATH.") from e

    return result.stdout.strip() if strip else result.stdout


def get_repo_root(cwd: Optional[Path] = None) -> Path:
    """Get the root directory of the current git repository.

    Raises:
        GitError: If not in a git repository.
    """
    try:
        return Path(_run_git_command(["rev-parse", "--show-toplevel"], cwd=cwd))
    except GitError as e:
        raise GitError(
            "Not in a git repository. Please run this command from within a git repo."
        ) from e
