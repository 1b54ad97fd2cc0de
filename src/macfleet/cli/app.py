from __future__ import annotations

from typing import Annotated

import typer

from macfleet.utils.logging import setup_logging

from . import config as config_cmd
from .info import register as register_info
from .inventory import register as register_inventory
from .login import register as register_login
from .menu import register as register_menu
from .update import register as register_update

app = typer.Typer(
    help="macfleet - Jamf Pro inventory and macOS update tool", no_args_is_help=True
)

app.add_typer(config_cmd.app, name="config")

register_login(app)
register_info(app)
register_inventory(app)
register_update(app)
register_menu(app)


@app.callback(invoke_without_command=True)
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit"),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option("--debug", "-d", help="Log HTTP requests and retries"),
    ] = False,
) -> None:
    """macfleet CLI."""
    setup_logging("DEBUG" if debug else None)

    if version:
        from importlib.metadata import version as get_version

        typer.echo(f"macfleet version {get_version('macfleet')}")
        raise typer.Exit()
