import pytest

from macfleet.config import (
    CacheConfig,
    DispatchConfig,
    Settings,
    get_settings,
    load_settings,
    resolve_config_path,
    write_settings,
)


def test_defaults():
    settings = Settings()

    assert settings.cache.ttl_seconds == 300
    assert settings.dispatch.max_attempts == 3
    assert settings.dispatch.rate_limit_backoff == 30
    assert settings.dispatch.inter_device_delay == 5
    assert settings.inventory.inactive_days == 30


def test_write_and_load_round_trip(tmp_path):
    path = tmp_path / "config.toml"
    settings = Settings(
        cache=CacheConfig(path=str(tmp_path / "cache"), ttl_seconds=60),
        dispatch=DispatchConfig(inter_device_delay=0),
    )

    write_settings(settings, path)

    assert load_settings(path) == settings


def test_partial_file_keeps_defaults(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[dispatch]\nmax_attempts = 5\n")

    settings = load_settings(path)

    assert settings.dispatch.max_attempts == 5
    assert settings.cache.ttl_seconds == 300


@pytest.mark.parametrize(
    "text",
    ["[cache\n", "[cache]\nttl_seconds = -1\n", "[unknown]\nkey = 1\n"],
)
def test_invalid_files_raise_value_error(tmp_path, text):
    path = tmp_path / "config.toml"
    path.write_text(text)

    with pytest.raises(ValueError):
        load_settings(path)


def test_env_var_selects_config(tmp_path, monkeypatch):
    path = tmp_path / "custom.toml"
    path.write_text("[inventory]\ninactive_days = 7\n")
    monkeypatch.setenv("MACFLEET_CONFIG", str(path))

    assert get_settings().inventory.inactive_days == 7


def test_env_var_pointing_to_missing_file(tmp_path, monkeypatch):
    monkeypatch.setenv("MACFLEET_CONFIG", str(tmp_path / "missing.toml"))

    with pytest.raises(FileNotFoundError):
        resolve_config_path()
    assert resolve_config_path(allow_missing=True) == (
        tmp_path / "missing.toml",
        False,
    )


def test_missing_default_config_uses_defaults():
    assert get_settings() == Settings()
