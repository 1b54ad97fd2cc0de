from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta

from rich.console import Console
from rich.table import Table

from macfleet.core import CheckInStatus, checkin_status
from macfleet.models import DeviceRecord, DispatchOutcome, SearchSummary
from macfleet.models.devices import CHECK_IN_FORMAT
from macfleet.utils.redaction import Redactor

MODEL_WIDTH = 25
EMAIL_WIDTH = 35

_STATUS_STYLES = {
    CheckInStatus.ACTIVE: "green",
    CheckInStatus.INACTIVE: "red",
    CheckInStatus.UNKNOWN: "yellow",
}


def truncate(value: str, width: int) -> str:
    if len(value) <= width:
        return value
    return value[: width - 3] + "..."


def device_table(
    devices: Sequence[DeviceRecord],
    title: str,
    now: datetime,
    inactive_after: timedelta,
    redactor: Redactor | None = None,
    status_override: str | None = None,
) -> Table:
    redactor = redactor or Redactor(enabled=False)

    table = Table(title=title, title_justify="left")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Serial No.")
    table.add_column("Email Address")
    table.add_column("macOS")
    table.add_column("Status")
    table.add_column("Last Check-in")
    table.add_column("Model")

    for device in devices:
        status = checkin_status(device, now, inactive_after)
        if status_override:
            status_cell = f"[yellow]{status_override}[/yellow]"
        else:
            status_cell = f"[{_STATUS_STYLES[status]}]{status.label}[/]"
        last_check_in = (
            device.last_check_in.strftime(CHECK_IN_FORMAT)
            if device.last_check_in
            else ""
        )
        table.add_row(
            str(device.id),
            redactor.redact_serial(device.serial_number),
            truncate(redactor.redact_email(device.email_address), EMAIL_WIDTH),
            device.os_version,
            status_cell,
            last_check_in,
            truncate(device.model, MODEL_WIDTH),
        )
    return table


def print_devices(
    console: Console,
    devices: Sequence[DeviceRecord],
    title: str,
    now: datetime,
    inactive_after: timedelta,
    redactor: Redactor | None = None,
    status_override: str | None = None,
) -> None:
    console.print(
        device_table(
            devices,
            title,
            now,
            inactive_after,
            redactor=redactor,
            status_override=status_override,
        )
    )


def print_distribution(console: Console, rows: Sequence[tuple[str, int]]) -> None:
    table = Table(title="macOS Version Distribution", title_justify="left")
    table.add_column("Version", style="cyan")
    table.add_column("Devices", justify="right")
    for version, count in rows:
        table.add_row(f"macOS {version}", str(count))
    console.print(table)


def print_searches(console: Console, searches: Sequence[SearchSummary]) -> None:
    table = Table(title="Available Advanced Computer Searches", title_justify="left")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Name")
    for search in searches:
        table.add_row(str(search.id), search.name)
    console.print(table)


def print_outcome(console: Console, outcome: DispatchOutcome) -> None:
    console.print("\n[green]Update Command Results:[/green]")
    console.print(f"Successfully sent: {outcome.succeeded}")
    console.print(f"Failed: {outcome.failed}")
    console.print(f"Total processed: {outcome.total}")
    for error in outcome.failures:
        console.print(f"  [red]•[/red] device {error.device_id}: {error.reason}")
