"""CLI entry point for diffdraft.

Combines the draft command and the config subcommands into a single app.
"""

import typer

from diffdraft import __version__
from diffdraft.cli.config import config_app
from diffdraft.cli.draft import draft_command

# Main application
app = typer.Typer(
    name="diffdraft",
    help="diffdraft: commit messages drafted from staged changes",
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"diffdraft {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    """diffdraft: commit messages drafted from staged changes."""


app.add_typer(config_app, name="config")
app.command("draft")(draft_command)


__all__ = [
    "app",
    "config_app",
    "draft_command",
]
