"""Interactive menu over a single loaded saved search."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import typer
from rich.console import Console

from macfleet.config import resolve_credentials_path, update_default_search_id
from macfleet.core import FleetSession, os_distribution
from macfleet.errors import AuthError, FetchError
from macfleet.models import DeviceRecord
from macfleet.utils.redaction import Redactor

from .common import (
    Services,
    fail,
    load_inventory_or_exit,
    load_settings_or_exit,
    open_session,
)
from .inventory import show_devices, show_inactive, show_matches, write_export
from .options import RedactOption, SearchIdOption
from .render import print_distribution, print_searches
from .update import resolve_latest, review_outdated

logger = logging.getLogger(__name__)


class MenuCommand(str, Enum):
    DISTRIBUTION = "1"
    OUTDATED = "2"
    INACTIVE = "3"
    EXPORT = "4"
    FIND = "5"
    SHOW = "6"
    SWITCH_SEARCH = "7"
    CHANGE_DEFAULT = "8"
    HELP = "h"
    QUIT = "q"


MENU_LABELS = {
    MenuCommand.DISTRIBUTION: "Show macOS version distribution",
    MenuCommand.OUTDATED: "Show outdated systems",
    MenuCommand.INACTIVE: "Show inactive machines",
    MenuCommand.EXPORT: "Export to CSV",
    MenuCommand.FIND: "Search by user",
    MenuCommand.SHOW: "Show full device table",
    MenuCommand.SWITCH_SEARCH: "Change Advanced Search ID",
    MenuCommand.CHANGE_DEFAULT: "Change default Advanced Search ID",
    MenuCommand.HELP: "Show help",
    MenuCommand.QUIT: "Quit",
}


def parse_menu_choice(text: str) -> MenuCommand | None:
    try:
        return MenuCommand(text.strip().lower())
    except ValueError:
        return None


@dataclass
class MenuState:
    console: Console
    services: Services
    session: FleetSession
    devices: list[DeviceRecord]
    latest: str
    redactor: Redactor


def print_menu(console: Console, search_id: str) -> None:
    console.print(f"\n[bold]Jamf Pro Inventory[/bold] (search {search_id})")
    for command, label in MENU_LABELS.items():
        console.print(f"  {command.value}. {label}")


def print_help(state: MenuState) -> None:
    state.console.print(
        "Pick an option by number. Option 2 can send scheduled DDM update "
        "commands to every outdated device.\n"
        f"Devices without a check-in for more than "
        f"{state.services.inactive_after.days} days count as inactive. "
        "Search results are cached for "
        f"{state.services.settings.cache.ttl_seconds:.0f} seconds."
    )


def _distribution(state: MenuState) -> None:
    print_distribution(state.console, os_distribution(state.devices))


def _outdated(state: MenuState) -> None:
    review_outdated(
        state.console,
        state.services,
        state.session,
        state.devices,
        state.latest,
        state.redactor,
    )


def _inactive(state: MenuState) -> None:
    show_inactive(state.console, state.services, state.devices, state.redactor)


def _export(state: MenuState) -> None:
    write_export(state.console, state.services, state.devices)


def _find(state: MenuState) -> None:
    term = typer.prompt("Enter username or email to search")
    show_matches(state.console, state.services, state.devices, term, state.redactor)


def _show(state: MenuState) -> None:
    show_devices(
        state.console, state.services, state.session, state.devices, state.redactor
    )


def _load_search(state: MenuState, search_id: str) -> None:
    try:
        devices = state.services.inventory.fetch_with_retry(state.session, search_id)
    except FetchError as exc:
        state.console.print(f"[red]Could not load search {search_id}: {exc}[/red]")
        return
    state.session.search_id = search_id
    state.devices = devices
    state.console.print(
        f"[green]✓[/green] Switched to search {search_id} ({len(devices)} devices)"
    )


def _switch_search(state: MenuState) -> None:
    try:
        searches = state.services.inventory.list_searches(state.session)
    except (FetchError, AuthError) as exc:
        state.console.print(f"[yellow]Could not list saved searches: {exc}[/yellow]")
    else:
        print_searches(state.console, searches)

    search_id = typer.prompt("Enter new Advanced Search ID").strip()
    if not search_id.isdigit():
        state.console.print("[red]Invalid ID. Please enter a number.[/red]")
        return
    _load_search(state, search_id)


def _change_default(state: MenuState) -> None:
    search_id = typer.prompt("Enter new default Advanced Search ID")
    path = resolve_credentials_path()
    try:
        updated = update_default_search_id(path, search_id)
    except FileNotFoundError:
        state.console.print(f"[red]No credentials at {path}[/red]")
        return
    except ValueError as exc:
        state.console.print(f"[red]{exc}. Please enter a valid number.[/red]")
        return
    state.console.print(
        "[green]✓[/green] Default Search ID updated successfully to: "
        f"{updated.default_search_id}"
    )
    if updated.default_search_id == state.session.search_id:
        return
    if typer.confirm(
        f"Switch to search {updated.default_search_id} now?", default=False
    ):
        _load_search(state, updated.default_search_id)


HANDLERS: dict[MenuCommand, Callable[[MenuState], None]] = {
    MenuCommand.DISTRIBUTION: _distribution,
    MenuCommand.OUTDATED: _outdated,
    MenuCommand.INACTIVE: _inactive,
    MenuCommand.EXPORT: _export,
    MenuCommand.FIND: _find,
    MenuCommand.SHOW: _show,
    MenuCommand.SWITCH_SEARCH: _switch_search,
    MenuCommand.CHANGE_DEFAULT: _change_default,
    MenuCommand.HELP: print_help,
}


def reload_devices(state: MenuState) -> None:
    """Drop the cached search, refresh the token and fetch the search again."""
    state.services.inventory.invalidate(state.session.search_id)
    try:
        state.services.auth.ensure_valid(state.session)
        state.devices = state.services.inventory.fetch_with_retry(state.session)
    except (FetchError, AuthError) as exc:
        fail(f"Failed to refresh data: {exc}")


def run_menu(state: MenuState, read: Callable[[], str] | None = None) -> None:
    read = read or (lambda: typer.prompt("Select an option", default="h"))
    while True:
        print_menu(state.console, state.session.search_id)
        command = parse_menu_choice(read())
        if command is None:
            state.console.print("[red]Invalid option. Please try again.[/red]")
            continue
        if command is MenuCommand.QUIT:
            state.console.print("Goodbye!")
            return

        try:
            HANDLERS[command](state)
        except (FetchError, AuthError) as exc:
            logger.warning("%s; refreshing token and data", exc)
            reload_devices(state)


def register(app: typer.Typer) -> None:
    @app.command()
    def menu(
        search_id: SearchIdOption = None,
        redact: RedactOption = False,
    ) -> None:
        """Browse a saved search interactively."""
        console = Console()
        settings = load_settings_or_exit()
        with open_session(settings, search_id) as (session, services):
            devices = load_inventory_or_exit(services, session)
            latest = resolve_latest(services, None)
            console.print(
                f"Loaded {len(devices)} devices. "
                f"Latest macOS public release: [bold]{latest}[/bold]"
            )
            state = MenuState(
                console=console,
                services=services,
                session=session,
                devices=devices,
                latest=latest,
                redactor=Redactor(enabled=redact),
            )
            run_menu(state)
