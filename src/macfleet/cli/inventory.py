from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from macfleet.config import default_export_dir
from macfleet.core import (
    FleetSession,
    find_inactive,
    os_distribution,
    search_by_user,
)
from macfleet.errors import AuthError, FetchError
from macfleet.models import DeviceRecord
from macfleet.storage import default_export_name, export_csv
from macfleet.utils.redaction import Redactor

from .common import (
    Services,
    fail,
    load_inventory_or_exit,
    load_settings_or_exit,
    open_session,
)
from .options import RedactOption, SearchIdOption
from .render import print_devices, print_distribution, print_searches


def show_devices(
    console: Console,
    services: Services,
    session: FleetSession,
    devices: list[DeviceRecord],
    redactor: Redactor,
) -> None:
    print_devices(
        console,
        devices,
        f"Advanced Computer Search Results (ID: {session.search_id})",
        datetime.now(),
        services.inactive_after,
        redactor=redactor,
    )
    console.print(f"[magenta]Total Devices: {len(devices)}[/magenta]")


def show_inactive(
    console: Console,
    services: Services,
    devices: list[DeviceRecord],
    redactor: Redactor,
) -> None:
    now = datetime.now()
    inactive = find_inactive(devices, now, services.inactive_after)
    print_devices(
        console,
        inactive,
        f"Inactive Machines (No check-in > {services.inactive_after.days} days)",
        now,
        services.inactive_after,
        redactor=redactor,
    )
    console.print(f"{len(inactive)} inactive device(s)")


def show_matches(
    console: Console,
    services: Services,
    devices: list[DeviceRecord],
    term: str,
    redactor: Redactor,
) -> None:
    print_devices(
        console,
        search_by_user(devices, term),
        f"Search Results for: {term}",
        datetime.now(),
        services.inactive_after,
        redactor=redactor,
    )


def write_export(
    console: Console,
    services: Services,
    devices: list[DeviceRecord],
    out: Path | None = None,
) -> Path:
    now = datetime.now()
    path = out or default_export_dir() / default_export_name(now)
    count = export_csv(devices, path, now, services.inactive_after)
    console.print(f"[green]✓[/green] Exported {count} device(s) to {path}")
    return path


def register(app: typer.Typer) -> None:
    @app.command()
    def searches() -> None:
        """List the available Advanced Computer Searches."""
        console = Console()
        settings = load_settings_or_exit()
        with open_session(settings) as (session, services):
            try:
                found = services.inventory.list_searches(session)
            except (FetchError, AuthError) as exc:
                fail(f"Failed to fetch Advanced Computer Searches: {exc}")

        if not found:
            console.print("No Advanced Search Groups found.")
            return
        print_searches(console, found)

    @app.command()
    def devices(search_id: SearchIdOption = None, redact: RedactOption = False) -> None:
        """Show every device of a saved search."""
        console = Console()
        settings = load_settings_or_exit()
        with open_session(settings, search_id) as (session, services):
            records = load_inventory_or_exit(services, session)
            show_devices(console, services, session, records, Redactor(enabled=redact))

    @app.command()
    def distribution(search_id: SearchIdOption = None) -> None:
        """Show how many devices run each macOS version."""
        console = Console()
        settings = load_settings_or_exit()
        with open_session(settings, search_id) as (session, services):
            records = load_inventory_or_exit(services, session)
        print_distribution(console, os_distribution(records))

    @app.command()
    def inactive(
        search_id: SearchIdOption = None, redact: RedactOption = False
    ) -> None:
        """Show devices that have not checked in recently."""
        console = Console()
        settings = load_settings_or_exit()
        with open_session(settings, search_id) as (session, services):
            records = load_inventory_or_exit(services, session)
            show_inactive(console, services, records, Redactor(enabled=redact))

    @app.command()
    def find(
        term: Annotated[str, typer.Argument(help="Username or email fragment")],
        search_id: SearchIdOption = None,
        redact: RedactOption = False,
    ) -> None:
        """Find devices by username or email address."""
        console = Console()
        settings = load_settings_or_exit()
        with open_session(settings, search_id) as (session, services):
            records = load_inventory_or_exit(services, session)
            show_matches(console, services, records, term, Redactor(enabled=redact))

    @app.command()
    def export(
        search_id: SearchIdOption = None,
        out: Annotated[
            Path | None,
            typer.Option("--out", "-o", help="CSV file (default: ~/Downloads/...)"),
        ] = None,
    ) -> None:
        """Export a saved search to CSV."""
        console = Console()
        settings = load_settings_or_exit()
        with open_session(settings, search_id) as (session, services):
            records = load_inventory_or_exit(services, session)
            write_export(console, services, records, out)
