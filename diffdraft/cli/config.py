"""CLI commands for global configuration management."""

from typing import Optional

import typer

from diffdraft import global_config
from diffdraft.config import API_KEY_ENV_VARS, DEFAULT_MODELS, LLMProvider
from diffdraft.global_config import GlobalConfigError

# Subcommand group for configuration management
config_app = typer.Typer(
    name="config",
    help="Manage global diffdraft configuration in ~/.diffdraft/",
    add_completion=False,
)


def _parse_provider(provider: str) -> LLMProvider:
    try:
        return LLMProvider(provider.lower())
    except ValueError:
        typer.echo(f"Invalid provider: {provider}", err=True)
        typer.echo(f"Valid providers: {', '.join(p.value for p in LLMProvider)}", err=True)
        raise typer.Exit(1)


def _mask(api_key: str) -> str:
    return api_key[:8] + "..." + api_key[-4:] if len(api_key) > 12 else "***"


@config_app.command("show")
def config_show() -> None:
    """Show current global configuration."""
    try:
        if not global_config.is_configured():
            typer.echo("No configuration found. Defaults are in use.")
            typer.echo("Run 'diffdraft config set-provider <provider>' to set one up.")
            return

        config = global_config.load_global_config()
    except GlobalConfigError as e:
        typer.echo(f"Error reading configuration: {e}", err=True)
        raise typer.Exit(1)

    typer.echo("Current diffdraft configuration (~/.diffdraft/config.yaml):")
    typer.echo()
    typer.echo(f"  Provider: {config.get('provider', 'not set')}")
    typer.echo(f"  Model: {config.get('model', 'backend default')}")
    for key in ("max_chunk_size", "max_diff_size", "min_diff_size", "chunk_workers"):
        if key in config:
            typer.echo(f"  {key}: {config[key]}")
    if config.get("no_emoji"):
        typer.echo("  Emoji: off")
    if config.get("sign_off"):
        typer.echo("  Sign-off: on")
    if config.get("types"):
        typer.echo(f"  Commit types: {', '.join(t.get('name', '?') for t in config['types'])}")
    typer.echo()

    provider_str = config.get("provider")
    if not provider_str:
        return
    try:
        env_var = API_KEY_ENV_VARS[LLMProvider(provider_str)]
    except (ValueError, KeyError):
        return

    api_key = global_config.get_credential(env_var)
    typer.echo(f"  API Key ({env_var}): {_mask(api_key) if api_key else 'not set'}")


@config_app.command("set-key")
def config_set_key(
    provider: str = typer.Argument(..., help="Provider name (openrouter, groq, gemini)"),
) -> None:
    """Set or update an API key for a provider."""
    llm_provider = _parse_provider(provider)
    env_var = API_KEY_ENV_VARS.get(llm_provider)
    if env_var is None:
        typer.echo(f"{llm_provider.value} does not use an API key.", err=True)
        raise typer.Exit(1)

    typer.echo(f"Setting API key for {llm_provider.value}")
    api_key = typer.prompt(f"Enter your {llm_provider.value} API key", hide_input=True)

    try:
        global_config.save_credential(env_var, api_key.strip())
    except GlobalConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"✓ API key saved for {llm_provider.value}")


@config_app.command("set-provider")
def config_set_provider(
    provider: str = typer.Argument(..., help="Provider name (openrouter, groq, gemini)"),
    model: Optional[str] = typer.Option(
        None,
        "--model",
        "-m",
        help="Model name (the backend default is used if not provided)",
    ),
) -> None:
    """Set the active provider and model."""
    llm_provider = _parse_provider(provider)
    if llm_provider == LLMProvider.PHIND:
        typer.echo("Warning: the phind backend is deprecated and cannot generate messages.", err=True)

    try:
        global_config.set_provider_and_model(llm_provider, model)
    except (GlobalConfigError, OSError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"✓ Provider set to: {llm_provider.value}")
    typer.echo(f"✓ Model set to: {model or DEFAULT_MODELS[llm_provider] + ' (default)'}")
