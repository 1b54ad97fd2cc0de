from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

CHECK_IN_FORMAT = "%Y-%m-%d %H:%M:%S"


class DeviceRecord(BaseModel):
    """One computer entry of an Advanced Computer Search."""

    model_config = {"frozen": True, "populate_by_name": True}

    id: int
    serial_number: str = Field(default="", alias="Serial_Number")
    email_address: str = Field(default="", alias="Email_Address")
    os_version: str = Field(default="", alias="Operating_System_Version")
    last_check_in: datetime | None = Field(default=None, alias="Last_Check_in")
    model: str = Field(default="", alias="Model")

    @field_validator(
        "serial_number", "email_address", "os_version", "model", mode="before"
    )
    @classmethod
    def _text(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @field_validator("last_check_in", mode="before")
    @classmethod
    def _check_in(cls, value: Any) -> datetime | None:
        if isinstance(value, datetime):
            return value
        if not value or not isinstance(value, str):
            return None
        try:
            return datetime.strptime(value.strip(), CHECK_IN_FORMAT)
        except ValueError:
            return None


class AdvancedSearch(BaseModel):
    id: int | None = None
    name: str = ""
    computers: list[DeviceRecord]


class SearchResponse(BaseModel):
    advanced_computer_search: AdvancedSearch

    @property
    def devices(self) -> list[DeviceRecord]:
        return self.advanced_computer_search.computers


class SearchSummary(BaseModel):
    """Entry of the saved search listing."""

    model_config = {"frozen": True}

    id: int
    name: str = ""


def parse_search_payload(payload: Any) -> SearchResponse:
    """Validate a raw search payload; raises ``ValidationError`` on mismatch."""
    return SearchResponse.model_validate(payload)


def is_valid_search_payload(payload: Any) -> bool:
    try:
        parse_search_payload(payload)
    except ValidationError:
        return False
    return True
