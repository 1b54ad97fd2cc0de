from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from macfleet.errors import InvalidVersionError
from macfleet.models import DeviceRecord

from .versions import is_outdated

logger = logging.getLogger(__name__)

DEFAULT_INACTIVE_AFTER = timedelta(days=30)


class CheckInStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    UNKNOWN = "unknown"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class DeviceClass(str, Enum):
    CURRENT = "current"
    OUTDATED = "outdated"
    INACTIVE = "inactive"


@dataclass
class FleetSummary:
    current: int
    outdated: int
    inactive: int

    @property
    def total(self) -> int:
        return self.current + self.outdated + self.inactive


def checkin_status(
    device: DeviceRecord,
    now: datetime,
    inactive_after: timedelta = DEFAULT_INACTIVE_AFTER,
) -> CheckInStatus:
    if device.last_check_in is None:
        return CheckInStatus.UNKNOWN
    if now - device.last_check_in > inactive_after:
        return CheckInStatus.INACTIVE
    return CheckInStatus.ACTIVE


def _is_device_outdated(device: DeviceRecord, latest: str) -> bool:
    if not device.os_version:
        logger.debug("Device %s has no OS version, skipping", device.id)
        return False
    try:
        return is_outdated(device.os_version, latest)
    except InvalidVersionError as exc:
        logger.warning("Device %s: %s", device.id, exc)
        return False


def find_outdated(devices: Iterable[DeviceRecord], latest: str) -> list[DeviceRecord]:
    return sorted(
        (device for device in devices if _is_device_outdated(device, latest)),
        key=lambda device: device.id,
    )


def find_inactive(
    devices: Iterable[DeviceRecord],
    now: datetime,
    inactive_after: timedelta = DEFAULT_INACTIVE_AFTER,
) -> list[DeviceRecord]:
    return sorted(
        (
            device
            for device in devices
            if checkin_status(device, now, inactive_after) is CheckInStatus.INACTIVE
        ),
        key=lambda device: device.id,
    )


def classify(
    device: DeviceRecord,
    latest: str,
    now: datetime,
    inactive_after: timedelta = DEFAULT_INACTIVE_AFTER,
) -> DeviceClass:
    """Inactive takes precedence over outdated."""
    if checkin_status(device, now, inactive_after) is CheckInStatus.INACTIVE:
        return DeviceClass.INACTIVE
    if _is_device_outdated(device, latest):
        return DeviceClass.OUTDATED
    return DeviceClass.CURRENT


def summarize(
    devices: Iterable[DeviceRecord],
    latest: str,
    now: datetime,
    inactive_after: timedelta = DEFAULT_INACTIVE_AFTER,
) -> FleetSummary:
    counts = Counter(
        classify(device, latest, now, inactive_after) for device in devices
    )
    return FleetSummary(
        current=counts[DeviceClass.CURRENT],
        outdated=counts[DeviceClass.OUTDATED],
        inactive=counts[DeviceClass.INACTIVE],
    )


def os_distribution(devices: Iterable[DeviceRecord]) -> list[tuple[str, int]]:
    counts = Counter(device.os_version or "Unknown" for device in devices)
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))


def search_by_user(devices: Iterable[DeviceRecord], term: str) -> list[DeviceRecord]:
    needle = term.strip().lower()
    return [device for device in devices if needle in device.email_address.lower()]
