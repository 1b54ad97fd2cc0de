from __future__ import annotations

from .auth import AuthManager
from .classify import (
    CheckInStatus,
    DeviceClass,
    FleetSummary,
    checkin_status,
    classify,
    find_inactive,
    find_outdated,
    os_distribution,
    search_by_user,
    summarize,
)
from .client import BackendClient
from .dispatcher import RetryPolicy, UpdateDispatcher, build_plan_request
from .feed import LatestVersionFeed
from .inventory import InventoryFetcher
from .schedule import parse_schedule
from .session import FleetSession
from .versions import VersionOrder, compare, is_outdated, parse_version

__all__ = [
    "AuthManager",
    "BackendClient",
    "CheckInStatus",
    "DeviceClass",
    "FleetSession",
    "FleetSummary",
    "InventoryFetcher",
    "LatestVersionFeed",
    "RetryPolicy",
    "UpdateDispatcher",
    "VersionOrder",
    "build_plan_request",
    "checkin_status",
    "classify",
    "compare",
    "find_inactive",
    "find_outdated",
    "is_outdated",
    "os_distribution",
    "parse_schedule",
    "parse_version",
    "search_by_user",
    "summarize",
]
