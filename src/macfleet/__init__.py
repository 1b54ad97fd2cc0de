"""macfleet - Jamf Pro inventory reports and scheduled macOS updates."""

from __future__ import annotations

from importlib.metadata import version

from .config import Settings, get_settings
from .core import AuthManager, InventoryFetcher, UpdateDispatcher
from .models import Credentials, DeviceRecord, UpdatePlan
from .storage import CacheStore

__all__ = [
    "AuthManager",
    "CacheStore",
    "Credentials",
    "DeviceRecord",
    "InventoryFetcher",
    "Settings",
    "UpdateDispatcher",
    "UpdatePlan",
    "__version__",
    "get_settings",
]

__version__ = version("macfleet")
