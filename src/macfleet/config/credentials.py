"""Credentials file handling.

The file holds one ``KEY=value`` line per setting, the same shape a shell
script can ``source``. Values may be bare or quoted; macfleet always writes
them double-quoted with JSON escapes::

    JAMF_URL="https://company.jamfcloud.com"
    JAMF_CLIENT_ID="..."
    JAMF_CLIENT_SECRET="..."
    DEFAULT_SEARCH_ID="113"

Writes keep a ``.backup`` copy of the previous file and replace the target
atomically, so an interrupted write never leaves a truncated file behind.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path

from pydantic import ValidationError

from macfleet.models import Credentials

from .paths import default_credentials_path, expand_path

logger = logging.getLogger(__name__)

CREDENTIALS_ENV_VAR = "MACFLEET_CREDENTIALS"
FILE_MODE = 0o600

_KEYS = {
    "JAMF_URL": "backend_url",
    "JAMF_CLIENT_ID": "client_id",
    "JAMF_CLIENT_SECRET": "client_secret",
    "DEFAULT_SEARCH_ID": "default_search_id",
}


def resolve_credentials_path() -> Path:
    env_path = os.environ.get(CREDENTIALS_ENV_VAR)
    if env_path:
        return expand_path(env_path)
    return default_credentials_path()


def backup_path(path: Path) -> Path:
    return path.with_name(path.name + ".backup")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        decoded = json.loads(value)
        if not isinstance(decoded, str):
            raise ValueError(f"not a string: {value}")
        return decoded
    if len(value) >= 2 and value[0] == value[-1] == "'":
        return value[1:-1]
    return value


def parse_credentials_text(text: str) -> dict[str, str]:
    """Read ``KEY=value`` lines, skipping blanks, comments and ``export``."""
    data: dict[str, str] = {}
    for number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        line = line.removeprefix("export ").lstrip()
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key.isidentifier():
            raise ValueError(f"line {number}: expected KEY=value")
        data[key] = _unquote(value.strip())
    return data


def load_credentials(path: Path) -> Credentials | None:
    if not path.exists():
        return None

    try:
        data = parse_credentials_text(path.read_text())
    except ValueError as exc:
        raise ValueError(f"Invalid credentials file: {path}\n{exc}") from exc

    fields = {_KEYS[key]: value for key, value in data.items() if key in _KEYS}
    if not fields.get("default_search_id"):
        fields.pop("default_search_id", None)

    try:
        return Credentials.model_validate(fields)
    except ValidationError as exc:
        raise ValueError(f"Incomplete credentials file: {path}\n{exc}") from exc


def render_credentials(credentials: Credentials) -> str:
    values = {
        "JAMF_URL": credentials.backend_url,
        "JAMF_CLIENT_ID": credentials.client_id,
        "JAMF_CLIENT_SECRET": credentials.client_secret.get_secret_value(),
        "DEFAULT_SEARCH_ID": credentials.default_search_id,
    }
    return "".join(f"{key}={json.dumps(value)}\n" for key, value in values.items())


def _atomic_write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists():
        shutil.copy2(path, backup_path(path))
        logger.debug("Backed up %s", path)

    fd, tmp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.chmod(tmp_path, FILE_MODE)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def save_credentials(credentials: Credentials, path: Path) -> None:
    _atomic_write(path, render_credentials(credentials))
    logger.info("Saved credentials to %s", path)


def update_default_search_id(path: Path, search_id: str) -> Credentials:
    """Persist a new default search id, keeping the other settings."""
    current = load_credentials(path)
    if current is None:
        raise FileNotFoundError(f"No credentials file at {path}")

    try:
        updated = Credentials.model_validate(
            {**current.model_dump(), "default_search_id": search_id}
        )
    except ValidationError as exc:
        raise ValueError(f"Invalid search id: {search_id!r}") from exc

    save_credentials(updated, path)
    return updated
