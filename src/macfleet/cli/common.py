from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import NoReturn

import requests
import typer
from rich.console import Console

from macfleet.config import (
    Settings,
    cache_dir_from_settings,
    get_settings,
    load_credentials,
    resolve_config_path,
    resolve_credentials_path,
)
from macfleet.core import (
    AuthManager,
    BackendClient,
    FleetSession,
    InventoryFetcher,
    LatestVersionFeed,
    RetryPolicy,
    UpdateDispatcher,
)
from macfleet.errors import AuthError, FetchError
from macfleet.models import Credentials, DeviceRecord
from macfleet.storage import CacheStore

logger = logging.getLogger(__name__)

BOOTSTRAP_ATTEMPTS = 2

http_factory: Callable[[], requests.Session] = requests.Session

err_console = Console(stderr=True)


@dataclass
class Services:
    settings: Settings
    client: BackendClient
    auth: AuthManager
    cache: CacheStore
    inventory: InventoryFetcher
    dispatcher: UpdateDispatcher
    feed: LatestVersionFeed

    @property
    def inactive_after(self) -> timedelta:
        return timedelta(days=self.settings.inventory.inactive_days)

    def close(self) -> None:
        self.client.close()


def fail(message: str) -> NoReturn:
    err_console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(1)


def load_settings_or_exit() -> Settings:
    try:
        return get_settings()
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def resolve_config_path_or_exit(allow_missing: bool = False) -> tuple[Path, bool]:
    try:
        return resolve_config_path(allow_missing=allow_missing)
    except FileNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def load_credentials_or_exit() -> Credentials:
    path = resolve_credentials_path()
    try:
        credentials = load_credentials(path)
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc

    if credentials is None:
        fail(f"No credentials at {path}. Run 'macfleet login' first.")
    return credentials


def build_cache(settings: Settings) -> CacheStore:
    return CacheStore(
        cache_dir_from_settings(settings), ttl_seconds=settings.cache.ttl_seconds
    )


def build_services(settings: Settings, credentials: Credentials) -> Services:
    http = http_factory()
    client = BackendClient(
        credentials.backend_url, http, timeout=settings.http.timeout
    )
    auth = AuthManager(client)
    cache = build_cache(settings)
    return Services(
        settings=settings,
        client=client,
        auth=auth,
        cache=cache,
        inventory=InventoryFetcher(client, auth, cache),
        dispatcher=UpdateDispatcher(
            client, auth, RetryPolicy.from_config(settings.dispatch)
        ),
        feed=LatestVersionFeed(
            settings.inventory, http, timeout=settings.http.timeout
        ),
    )


def bootstrap_token(auth: AuthManager, session: FleetSession) -> None:
    """Acquire the first token, allowing a single retry before giving up."""
    error: AuthError | None = None
    for attempt in range(1, BOOTSTRAP_ATTEMPTS + 1):
        try:
            auth.refresh(session)
            return
        except AuthError as exc:
            error = exc
            logger.warning(
                "Token request failed (attempt %d/%d): %s",
                attempt,
                BOOTSTRAP_ATTEMPTS,
                exc,
            )
    fail(f"{error}. Check the connection details with 'macfleet login'.")


@contextmanager
def open_session(
    settings: Settings, search_id: str | None = None
) -> Iterator[tuple[FleetSession, Services]]:
    credentials = load_credentials_or_exit()
    services = build_services(settings, credentials)
    session = FleetSession.from_credentials(credentials, search_id)
    try:
        bootstrap_token(services.auth, session)
        yield session, services
    finally:
        services.auth.end_session(session)
        services.close()


def load_inventory_or_exit(
    services: Services, session: FleetSession, search_id: str | None = None
) -> list[DeviceRecord]:
    try:
        return services.inventory.fetch_with_retry(session, search_id)
    except (FetchError, AuthError) as exc:
        fail(
            f"Failed to get Advanced Computer Search "
            f"{search_id or session.search_id}: {exc}"
        )
