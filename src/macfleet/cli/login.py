from __future__ import annotations

import logging
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console

from macfleet.config import (
    load_credentials,
    resolve_credentials_path,
    save_credentials,
    update_default_search_id,
)
from macfleet.core import AuthManager, BackendClient
from macfleet.errors import AuthError
from macfleet.models import Credentials

from . import common
from .common import fail, load_settings_or_exit

logger = logging.getLogger(__name__)


def _existing_credentials() -> Credentials | None:
    try:
        return load_credentials(resolve_credentials_path())
    except ValueError as exc:
        logger.warning("Ignoring unreadable credentials file: %s", exc)
        return None


def register(app: typer.Typer) -> None:
    @app.command()
    def login(
        url: Annotated[
            str | None,
            typer.Option(
                "--url", help="Jamf Pro URL, e.g. https://company.jamfcloud.com"
            ),
        ] = None,
        client_id: Annotated[
            str | None, typer.Option("--client-id", help="API client ID")
        ] = None,
        search_id: Annotated[
            str | None,
            typer.Option(
                "--search-id", "-i", help="Default Advanced Computer Search ID"
            ),
        ] = None,
        verify: Annotated[
            bool,
            typer.Option(
                "--verify/--no-verify", help="Test the details before saving"
            ),
        ] = True,
    ) -> None:
        """Store Jamf Pro connection details."""
        console = Console()
        existing = _existing_credentials()

        console.print("[yellow]Please enter your Jamf Pro connection details:[/yellow]")
        url = url or typer.prompt(
            "Jamf Pro URL",
            default=existing.backend_url if existing else None,
        )
        client_id = client_id or typer.prompt("API Client ID")
        secret = typer.prompt("API Client Secret", hide_input=True)
        search_id = search_id or typer.prompt(
            "Default Advanced Computer Search ID",
            default=existing.default_search_id if existing else "113",
        )

        try:
            credentials = Credentials(
                backend_url=url,
                client_id=client_id,
                client_secret=secret,
                default_search_id=search_id,
            )
        except ValidationError as exc:
            fail(f"Invalid connection details:\n{exc}")

        if verify:
            settings = load_settings_or_exit()
            client = BackendClient(
                credentials.backend_url,
                common.http_factory(),
                timeout=settings.http.timeout,
            )
            auth = AuthManager(client)
            try:
                if not auth.check_server():
                    fail(f"{credentials.backend_url} did not answer like Jamf Pro")
                token = auth.acquire_token(credentials)
                auth.invalidate_token(token)
            except AuthError as exc:
                fail(str(exc))
            finally:
                client.close()

        path = resolve_credentials_path()
        save_credentials(credentials, path)
        console.print(f"[green]✓[/green] Configuration saved to {path}")

    @app.command("default-search")
    def default_search(
        search_id: Annotated[str, typer.Argument(help="New default search ID")],
    ) -> None:
        """Change the default Advanced Computer Search ID."""
        path = resolve_credentials_path()
        try:
            updated = update_default_search_id(path, search_id)
        except FileNotFoundError:
            fail(f"No credentials at {path}. Run 'macfleet login' first.")
        except ValueError as exc:
            fail(f"{exc}. Please enter a valid number.")

        Console().print(
            "[green]✓[/green] Default Search ID updated successfully to: "
            f"{updated.default_search_id}"
        )
