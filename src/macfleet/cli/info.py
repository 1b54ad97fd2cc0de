from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from macfleet.config import load_credentials, resolve_credentials_path

from .common import build_cache, load_settings_or_exit, resolve_config_path_or_exit


def register(app: typer.Typer) -> None:
    @app.command()
    def info(
        clear_cache: Annotated[
            bool, typer.Option("--clear-cache", help="Delete cached search results")
        ] = False,
    ) -> None:
        """Show macfleet paths, connection and cache info."""
        settings = load_settings_or_exit()
        cache = build_cache(settings)
        config_path, config_exists = resolve_config_path_or_exit(allow_missing=True)
        credentials_path = resolve_credentials_path()

        console = Console()

        console.print("[bold]macfleet Info[/bold]\n")
        console.print(f"Config file: {config_path if config_exists else 'defaults'}")
        console.print(f"Credentials file: {credentials_path}")
        console.print(f"Cache directory: {cache.path}")

        console.print("\n[bold]Connection[/bold]")
        try:
            credentials = load_credentials(credentials_path)
        except ValueError as exc:
            console.print(f"[red]✗[/red] {exc}")
            credentials = None
        if credentials is None:
            console.print("Not configured. Run 'macfleet login'.")
        else:
            console.print(f"Jamf Pro URL: {credentials.backend_url}")
            console.print(f"Client ID: {credentials.client_id}")
            console.print(f"Default search ID: {credentials.default_search_id}")

        console.print("\n[bold]Settings[/bold]")
        console.print(f"Cache TTL: {settings.cache.ttl_seconds:.0f}s")
        console.print(f"Inactive after: {settings.inventory.inactive_days} days")
        console.print(
            f"Dispatch: {settings.dispatch.max_attempts} attempts, "
            f"{settings.dispatch.rate_limit_backoff:.0f}s rate-limit backoff, "
            f"{settings.dispatch.inter_device_delay:.0f}s between devices"
        )

        console.print("\n[bold]Cache[/bold]")
        if clear_cache:
            removed = cache.clear()
            console.print(f"[green]✓[/green] Removed {removed} cached search(es)")
        entries = cache.entries()
        if not entries:
            console.print("No cached searches")
        for entry in entries:
            console.print(f"  • {entry.name}")
