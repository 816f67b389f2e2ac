"""LLM-powered conventional commit message drafting for large diffs."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("diffdraft")
except PackageNotFoundError:
    # Fallback for development mode
    __version__ = "0.0.0-dev"
