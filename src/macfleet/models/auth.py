from __future__ import annotations

from pydantic import BaseModel, Field, SecretStr, field_validator


class Credentials(BaseModel):
    """Connection details for one Jamf Pro instance."""

    model_config = {"frozen": True, "extra": "forbid"}

    backend_url: str = Field(min_length=1)
    client_id: str = Field(min_length=1)
    client_secret: SecretStr
    default_search_id: str = Field(default="113", pattern=r"^\d+$")

    @field_validator("backend_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @field_validator("client_secret")
    @classmethod
    def _secret_not_empty(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value():
            raise ValueError("client secret must not be empty")
        return value


class Token(BaseModel):
    model_config = {"frozen": True}

    value: str = Field(repr=False)
