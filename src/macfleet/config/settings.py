from __future__ import annotations

import json
import os
import tomllib
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from .paths import default_cache_dir, default_config_path, expand_path

CONFIG_ENV_VAR = "MACFLEET_CONFIG"

SOFA_FEED_URL = "https://sofafeed.macadmins.io/v1/macos_data_feed.json"


class CacheConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    path: str = Field(default_factory=lambda: str(default_cache_dir()))
    ttl_seconds: float = Field(default=300.0, gt=0)


class DispatchConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    max_attempts: int = Field(default=3, ge=1, le=10)
    rate_limit_backoff: float = Field(default=30.0, ge=0)
    inter_device_delay: float = Field(default=5.0, ge=0)


class InventoryConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    inactive_days: int = Field(default=30, ge=1)
    latest_feed_url: str = SOFA_FEED_URL
    fallback_version: str = "15.3.1"


class HttpConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    timeout: float = Field(default=30.0, gt=0)


class Settings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    cache: CacheConfig = Field(default_factory=CacheConfig)
    dispatch: DispatchConfig = Field(default_factory=DispatchConfig)
    inventory: InventoryConfig = Field(default_factory=InventoryConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)


def resolve_config_path(allow_missing: bool = False) -> tuple[Path, bool]:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = expand_path(env_path)
        if not allow_missing and not path.exists():
            raise FileNotFoundError(f"{CONFIG_ENV_VAR} points to missing file: {path}")
        return path, path.exists()

    path = default_config_path()
    return path, path.exists()


def load_settings(path: Path) -> Settings:
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in config file: {path}\n{exc}") from exc

    try:
        return Settings.model_validate(data or {})
    except ValidationError as exc:
        raise ValueError(f"Invalid config file: {path}\n{exc}") from exc


@lru_cache
def get_settings() -> Settings:
    path, exists = resolve_config_path(allow_missing=False)
    if exists:
        return load_settings(path)
    return Settings()


def cache_dir_from_settings(settings: Settings) -> Path:
    return expand_path(settings.cache.path)


def _toml_string(value: str) -> str:
    return json.dumps(value)


def render_settings_toml(settings: Settings) -> str:
    lines = [
        "# macfleet configuration",
        "",
        "[cache]",
        f"path = {_toml_string(settings.cache.path)}",
        f"ttl_seconds = {settings.cache.ttl_seconds}",
        "",
        "[dispatch]",
        f"max_attempts = {settings.dispatch.max_attempts}",
        f"rate_limit_backoff = {settings.dispatch.rate_limit_backoff}",
        f"inter_device_delay = {settings.dispatch.inter_device_delay}",
        "",
        "[inventory]",
        f"inactive_days = {settings.inventory.inactive_days}",
        f"latest_feed_url = {_toml_string(settings.inventory.latest_feed_url)}",
        f"fallback_version = {_toml_string(settings.inventory.fallback_version)}",
        "",
        "[http]",
        f"timeout = {settings.http.timeout}",
        "",
    ]
    return "\n".join(lines)


def write_settings(settings: Settings, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_settings_toml(settings))
