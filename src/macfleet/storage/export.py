from __future__ import annotations

import csv
from collections.abc import Iterable
from datetime import datetime, timedelta
from pathlib import Path

from macfleet.core.classify import checkin_status
from macfleet.models import DeviceRecord
from macfleet.models.devices import CHECK_IN_FORMAT

CSV_HEADER = [
    "ID",
    "Serial Number",
    "Email Address",
    "macOS Version",
    "Status",
    "Last Check-in",
    "Model",
]


def default_export_name(now: datetime) -> str:
    return f"jamf_inventory_{now:%Y%m%d_%H%M%S}.csv"


def export_csv(
    devices: Iterable[DeviceRecord],
    path: Path,
    now: datetime,
    inactive_after: timedelta,
) -> int:
    """Write devices to ``path``; returns the number of rows written."""
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with path.open("w", newline="") as handle:
        writer = csv.writer(handle)
        writer.writerow(CSV_HEADER)
        for device in devices:
            last_check_in = (
                device.last_check_in.strftime(CHECK_IN_FORMAT)
                if device.last_check_in
                else ""
            )
            writer.writerow(
                [
                    device.id,
                    device.serial_number,
                    device.email_address,
                    device.os_version,
                    checkin_status(device, now, inactive_after).label,
                    last_check_in,
                    device.model,
                ]
            )
            count += 1
    return count
