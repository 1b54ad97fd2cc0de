from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Annotated

import typer
from rich.console import Console

from macfleet.core import FleetSession, find_outdated, parse_schedule, summarize
from macfleet.core.versions import parse_version
from macfleet.errors import AuthError, InvalidVersionError, ScheduleFormatError
from macfleet.models import (
    DeviceRecord,
    DeviceResult,
    DeviceStatus,
    DispatchOutcome,
    UpdatePlan,
)
from macfleet.utils.redaction import Redactor

from .common import (
    Services,
    fail,
    load_inventory_or_exit,
    load_settings_or_exit,
    open_session,
)
from .options import RedactOption, SearchIdOption
from .render import print_devices, print_outcome


def prompt_schedule(
    console: Console,
    initial: str | None = None,
    now: Callable[[], datetime] = datetime.now,
) -> datetime:
    """Ask until the user gives a valid future ``YYYY-MM-DD HH:MM``."""
    text = initial
    while True:
        if text is None:
            console.print(
                "\n[yellow]Enter scheduled date and time for the update "
                "(format: YYYY-MM-DD HH:MM)[/yellow]"
            )
            console.print("[yellow]Example: 2026-02-14 03:30[/yellow]")
            text = typer.prompt("Schedule")
        try:
            return parse_schedule(text, now=now())
        except ScheduleFormatError as exc:
            console.print(f"[red]{exc}[/red]")
            text = None


def resolve_latest(services: Services, latest: str | None) -> str:
    version = latest or services.feed.latest_version()
    try:
        parse_version(version)
    except InvalidVersionError as exc:
        fail(str(exc))
    return version


def run_update(
    console: Console,
    services: Services,
    session: FleetSession,
    device_ids: Sequence[str],
    schedule_text: str | None = None,
) -> DispatchOutcome | None:
    """Schedule updates for ``device_ids``.

    An ``AuthError`` from the pre-batch token check propagates.
    """
    if not device_ids:
        console.print("No devices selected for update.")
        return None

    schedule = prompt_schedule(console, schedule_text)
    plan = UpdatePlan(device_ids=device_ids, schedule_time=schedule)

    console.print(
        f"\n[magenta]Sending DDM update commands to {len(plan.device_ids)} "
        "devices...[/magenta]"
    )
    console.print(f"[yellow]Update scheduled for: {plan.schedule_string}[/yellow]")

    def report(result: DeviceResult) -> None:
        if result.status is DeviceStatus.SUCCEEDED:
            console.print(f"[green]✓[/green] Device {result.device_id}")
        else:
            console.print(
                f"[red]✗[/red] Device {result.device_id} failed after "
                f"{result.attempts} attempt(s)"
            )

    outcome = services.dispatcher.dispatch(session, plan, on_result=report)
    print_outcome(console, outcome)
    return outcome


def review_outdated(
    console: Console,
    services: Services,
    session: FleetSession,
    devices: list[DeviceRecord],
    latest: str,
    redactor: Redactor,
    update: bool | None = None,
    schedule_text: str | None = None,
) -> DispatchOutcome | None:
    now = datetime.now()
    stale = find_outdated(devices, latest)
    print_devices(
        console,
        stale,
        f"Outdated Systems (< {latest})",
        now,
        services.inactive_after,
        redactor=redactor,
        status_override="Outdated",
    )

    summary = summarize(devices, latest, now, services.inactive_after)
    console.print(
        f"Current: {summary.current}  Outdated: {summary.outdated}  "
        f"Inactive: {summary.inactive}  Total: {summary.total}"
    )

    if not stale:
        console.print("\n[green]No outdated devices found.[/green]")
        return None

    console.print(f"\n[yellow]Found {len(stale)} outdated device(s)[/yellow]")
    if update is None:
        update = typer.confirm(
            "Would you like to send DDM update commands to these devices?",
            default=False,
        )
    elif not update:
        console.print("Pass --update to send update plans to these devices.")
    if not update:
        return None
    return run_update(
        console, services, session, [str(device.id) for device in stale], schedule_text
    )


def register(app: typer.Typer) -> None:
    @app.command()
    def outdated(
        search_id: SearchIdOption = None,
        latest: Annotated[
            str | None,
            typer.Option("--latest", help="Compare against this version"),
        ] = None,
        update: Annotated[
            bool,
            typer.Option("--update", help="Send update plans to outdated devices"),
        ] = False,
        schedule: Annotated[
            str | None,
            typer.Option("--schedule", help="Update time, YYYY-MM-DD HH:MM"),
        ] = None,
        redact: RedactOption = False,
    ) -> None:
        """List devices behind the latest macOS release and optionally update them."""
        console = Console()
        settings = load_settings_or_exit()
        with open_session(settings, search_id) as (session, services):
            records = load_inventory_or_exit(services, session)
            version = resolve_latest(services, latest)
            console.print(f"Latest macOS public release: [bold]{version}[/bold]")
            try:
                review_outdated(
                    console,
                    services,
                    session,
                    records,
                    version,
                    Redactor(enabled=redact),
                    update=update,
                    schedule_text=schedule,
                )
            except AuthError as exc:
                fail(f"Failed to refresh API token: {exc}")
