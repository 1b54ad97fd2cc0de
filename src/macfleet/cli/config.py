from __future__ import annotations

from typing import Annotated

import typer

from macfleet.config import (
    CONFIG_ENV_VAR,
    CREDENTIALS_ENV_VAR,
    Settings,
    cache_dir_from_settings,
    render_settings_toml,
    resolve_credentials_path,
    write_settings,
)

from .common import load_settings_or_exit, resolve_config_path_or_exit

app = typer.Typer(
    no_args_is_help=True, help="Show, locate or create the settings file."
)


@app.command("show")
def show_config() -> None:
    """Print the effective settings as TOML."""
    settings = load_settings_or_exit()
    path, exists = resolve_config_path_or_exit(allow_missing=True)

    typer.echo(f"# source: {path if exists else 'built-in defaults'}")
    typer.echo(render_settings_toml(settings))


@app.command("path")
def config_paths() -> None:
    """Print where settings, credentials and cached searches live."""
    settings = load_settings_or_exit()
    path, exists = resolve_config_path_or_exit(allow_missing=True)

    typer.echo(f"settings:    {path}{'' if exists else ' (missing)'}")
    typer.echo(f"credentials: {resolve_credentials_path()}")
    typer.echo(f"cache:       {cache_dir_from_settings(settings)}")
    typer.echo(f"Override with ${CONFIG_ENV_VAR} and ${CREDENTIALS_ENV_VAR}.")


@app.command("init")
def init_config(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Replace an existing settings file"),
    ] = False,
) -> None:
    """Write a settings file with the default cache, dispatch and HTTP values."""
    path, exists = resolve_config_path_or_exit(allow_missing=True)

    if exists and not force:
        typer.echo(f"Settings already exist at {path}; use --force to replace")
        raise typer.Exit(1)

    write_settings(Settings(), path)
    typer.echo(f"Wrote default settings to {path}")
