"""Data models for macfleet."""

from macfleet.models.auth import Credentials, Token
from macfleet.models.devices import (
    AdvancedSearch,
    DeviceRecord,
    SearchResponse,
    SearchSummary,
    is_valid_search_payload,
    parse_search_payload,
)
from macfleet.models.dispatch import (
    DeviceResult,
    DeviceStatus,
    DispatchError,
    DispatchOutcome,
    UpdatePlan,
)

__all__ = [
    "AdvancedSearch",
    "Credentials",
    "DeviceRecord",
    "DeviceResult",
    "DeviceStatus",
    "DispatchError",
    "DispatchOutcome",
    "SearchResponse",
    "SearchSummary",
    "Token",
    "UpdatePlan",
    "is_valid_search_payload",
    "parse_search_payload",
]
