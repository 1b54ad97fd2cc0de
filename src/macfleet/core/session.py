from __future__ import annotations

from dataclasses import dataclass

from macfleet.models import Credentials, Token


@dataclass
class FleetSession:
    """Per-run state shared by the auth, inventory and dispatch components."""

    credentials: Credentials
    search_id: str
    token: Token | None = None

    @classmethod
    def from_credentials(
        cls, credentials: Credentials, search_id: str | None = None
    ) -> FleetSession:
        return cls(
            credentials=credentials,
            search_id=search_id or credentials.default_search_id,
        )
