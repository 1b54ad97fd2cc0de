from __future__ import annotations

from .credentials import (
    CREDENTIALS_ENV_VAR,
    backup_path,
    load_credentials,
    render_credentials,
    resolve_credentials_path,
    save_credentials,
    update_default_search_id,
)
from .paths import (
    APP_NAME,
    CONFIG_FILENAME,
    default_cache_dir,
    default_config_path,
    default_credentials_path,
    default_export_dir,
    expand_path,
)
from .settings import (
    CONFIG_ENV_VAR,
    CacheConfig,
    DispatchConfig,
    HttpConfig,
    InventoryConfig,
    Settings,
    cache_dir_from_settings,
    get_settings,
    load_settings,
    render_settings_toml,
    resolve_config_path,
    write_settings,
)

__all__ = [
    "APP_NAME",
    "CONFIG_ENV_VAR",
    "CONFIG_FILENAME",
    "CREDENTIALS_ENV_VAR",
    "CacheConfig",
    "DispatchConfig",
    "HttpConfig",
    "InventoryConfig",
    "Settings",
    "backup_path",
    "cache_dir_from_settings",
    "default_cache_dir",
    "default_config_path",
    "default_credentials_path",
    "default_export_dir",
    "expand_path",
    "get_settings",
    "load_credentials",
    "load_settings",
    "render_credentials",
    "render_settings_toml",
    "resolve_config_path",
    "resolve_credentials_path",
    "save_credentials",
    "update_default_search_id",
    "write_settings",
]
