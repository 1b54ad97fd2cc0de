from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, field_validator


class DeviceStatus(str, Enum):
    PENDING = "pending"
    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (DeviceStatus.SUCCEEDED, DeviceStatus.FAILED)


class UpdatePlan(BaseModel):
    """Devices to update and when the update should be forced."""

    model_config = {"frozen": True}

    device_ids: tuple[str, ...]
    schedule_time: datetime

    @field_validator("device_ids", mode="before")
    @classmethod
    def _dedupe(cls, value: Iterable[object]) -> tuple[str, ...]:
        return tuple(dict.fromkeys(str(item) for item in value))

    @field_validator("schedule_time")
    @classmethod
    def _whole_seconds(cls, value: datetime) -> datetime:
        return value.replace(microsecond=0)

    @property
    def schedule_string(self) -> str:
        return self.schedule_time.strftime("%Y-%m-%dT%H:%M:%S")


@dataclass(frozen=True)
class DispatchError:
    """Why a single device could not be given an update plan."""

    device_id: str
    reason: str
    status_code: int | None = None


@dataclass(frozen=True)
class DeviceResult:
    device_id: str
    status: DeviceStatus
    attempts: int
    last_status_code: int | None = None
    error: DispatchError | None = None


@dataclass(frozen=True)
class DispatchOutcome:
    results: tuple[DeviceResult, ...]

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.status is DeviceStatus.SUCCEEDED)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.status is DeviceStatus.FAILED)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def failures(self) -> list[DispatchError]:
        return [r.error for r in self.results if r.error is not None]
