from __future__ import annotations

import pytest

import macfleet.cli.common as common
from macfleet.config import (
    CONFIG_ENV_VAR,
    CREDENTIALS_ENV_VAR,
    CacheConfig,
    DispatchConfig,
    Settings,
    get_settings,
    save_credentials,
    write_settings,
)
from macfleet.core import AuthManager, BackendClient, FleetSession
from macfleet.core.auth import INVALIDATE_PATH, PROBE_PATH, TOKEN_PATH
from macfleet.models import Credentials
from macfleet.storage import CacheStore

from fakes import (
    SEARCH_113,
    FakeHttp,
    FakeResponse,
    computer,
    search_payload,
    token_response,
)


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch, tmp_path):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.setenv(CREDENTIALS_ENV_VAR, str(tmp_path / "credentials"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FakeClock:
    def __init__(self, now: float = 1_800_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(
        backend_url="https://example.jamfcloud.com/",
        client_id="client-id",
        client_secret="s3cret",
        default_search_id="113",
    )


@pytest.fixture
def http() -> FakeHttp:
    return FakeHttp()


@pytest.fixture
def client(http: FakeHttp, credentials: Credentials) -> BackendClient:
    return BackendClient(credentials.backend_url, http)  # type: ignore[arg-type]


@pytest.fixture
def auth(client: BackendClient) -> AuthManager:
    return AuthManager(client)


@pytest.fixture
def session(credentials: Credentials) -> FleetSession:
    return FleetSession.from_credentials(credentials)


@pytest.fixture
def cache(tmp_path, clock: FakeClock) -> CacheStore:
    return CacheStore(tmp_path / "cache", ttl_seconds=300, clock=clock)


@pytest.fixture
def configured(tmp_path, monkeypatch, credentials):
    """Config with a temp cache and no dispatch delays, plus stored credentials."""
    config_path = tmp_path / "config.toml"
    write_settings(
        Settings(
            cache=CacheConfig(path=str(tmp_path / "cache")),
            dispatch=DispatchConfig(rate_limit_backoff=0, inter_device_delay=0),
        ),
        config_path,
    )
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_path))
    monkeypatch.setenv("COLUMNS", "200")
    save_credentials(credentials, tmp_path / "credentials")
    return tmp_path


@pytest.fixture
def jamf(monkeypatch) -> FakeHttp:
    """Jamf Pro stand-in serving search 113 with one current and one old Mac."""
    http = FakeHttp()
    http.add("POST", TOKEN_PATH, token_response("t"))
    http.add("GET", PROBE_PATH, FakeResponse(200))
    http.add("POST", INVALIDATE_PATH, FakeResponse(204))
    http.add(
        "GET",
        SEARCH_113,
        FakeResponse(
            200,
            search_payload(
                computer(1, "15.3.1", email="jane@example.com", serial="SERIALA1111"),
                computer(2, "14.7.2", email="john@example.com", serial="SERIALB2222"),
            ),
        ),
    )
    monkeypatch.setattr(common, "http_factory", lambda: http)
    return http
