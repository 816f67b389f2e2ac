"""CLI command for drafting a commit message from staged changes."""

from typing import Optional

import typer
from pydantic import ValidationError

from diffdraft import global_config
from diffdraft.config import LLMProvider, load_config
from diffdraft.formatters import (
    CommitResult,
    apply_commit_style,
    build_type_vocabulary,
    load_commit_types,
    render_commit_message,
    sanitize_title,
)
from diffdraft.git import (
    GitError,
    NoStagedChangesError,
    commit,
    get_repo_root,
    get_staged_diff,
    get_staged_files,
)
from diffdraft.global_config import GlobalConfigError
from diffdraft.llm import LLMError, MissingAPIKeyError, get_provider
from diffdraft.log import configure_logging
from diffdraft.pipeline import generate_commit, get_pipeline_settings
from diffdraft.scope import infer_scope_from_files


def draft_command(
    detailed: bool = typer.Option(
        False,
        "--detailed",
        "-d",
        help="Generate a title plus a bullet-point body",
    ),
    context: str = typer.Option(
        "",
        "--context",
        "-c",
        help="Extra context passed to the model",
    ),
    commit_type: Optional[str] = typer.Option(
        None,
        "--type",
        "-t",
        help="Force the commit type (e.g. feat, fix)",
    ),
    scope: Optional[str] = typer.Option(
        None,
        "--scope",
        "-s",
        help="Force the commit scope (inferred from staged files otherwise)",
    ),
    no_emoji: bool = typer.Option(
        False,
        "--no-emoji",
        help="Leave emoji out of the commit title",
    ),
    provider: Optional[str] = typer.Option(
        None,
        "--provider",
        help="Override the configured provider (openrouter, groq, gemini)",
    ),
    model: Optional[str] = typer.Option(
        None,
        "--model",
        help="Override the configured model",
    ),
    do_commit: bool = typer.Option(
        False,
        "--commit",
        "-y",
        help="Commit the staged changes with the generated message",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logs on stderr",
    ),
) -> None:
    """Draft a commit message for the staged changes."""
    configure_logging(verbose)

    llm_provider = None
    if provider:
        try:
            llm_provider = LLMProvider(provider.lower())
        except ValueError:
            typer.echo(f"Invalid provider: {provider}", err=True)
            typer.echo(f"Valid providers: {', '.join(p.value for p in LLMProvider)}", err=True)
            raise typer.Exit(1)

    try:
        load_config()

        settings = get_pipeline_settings()
        commit_types = load_commit_types(global_config.get_commit_types())
        no_emoji = no_emoji or global_config.get_no_emoji()
        sign_off = global_config.get_sign_off()
    except GlobalConfigError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(1)
    except ValidationError as e:
        typer.echo(f"Invalid configuration in ~/.diffdraft/config.yaml:\n{e}", err=True)
        raise typer.Exit(1)

    try:
        repo_root = get_repo_root()
        diff = get_staged_diff(repo_root)
        staged_files = get_staged_files(repo_root)

        backend = get_provider(
            llm_provider,
            model,
            max_diff_size=settings.max_diff_size,
            min_diff_size=settings.min_diff_size,
            strict_types=settings.strict_types,
        )

        typer.echo(f"Generating commit message with {backend.name} ({backend.get_model()})...", err=True)
        result = generate_commit(
            diff,
            build_type_vocabulary(commit_types),
            extra_context=context,
            detailed=detailed,
            backend=backend,
            settings=settings,
        )

        title = apply_commit_style(
            result.message,
            commit_types,
            no_emoji=no_emoji,
            type_override=commit_type,
            scope_override=scope,
            detected_scope=None if scope else infer_scope_from_files(staged_files),
        )
        # The printed and the committed title must match
        result = CommitResult(message=sanitize_title(title), body=result.body)
        typer.echo(render_commit_message(result))

        if do_commit:
            output = commit(result.message, result.body, cwd=repo_root, sign_off=sign_off)
            typer.echo("Commit successful!", err=True)
            if output:
                typer.echo(output, err=True)

    except NoStagedChangesError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    except GitError as e:
        typer.echo(f"Git error: {e}", err=True)
        raise typer.Exit(1)
    except MissingAPIKeyError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(1)
    except LLMError as e:
        typer.echo(f"Generation error: {e}", err=True)
        raise typer.Exit(1)
