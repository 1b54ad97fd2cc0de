from __future__ import annotations

import logging

import requests

from macfleet.errors import AuthError, AuthErrorKind
from macfleet.models import Credentials, Token

from .client import BackendClient
from .session import FleetSession

logger = logging.getLogger(__name__)

TOKEN_PATH = "/api/oauth/token"
PROBE_PATH = "/api/v1/auth"
CURRENT_AUTH_PATH = "/api/v1/auth/current"
INVALIDATE_PATH = "/api/v1/auth/invalidate-token"


class AuthManager:
    """Bearer token lifecycle against the client-credentials endpoint.

    Nothing here retries on its own; callers decide when to refresh.
    """

    def __init__(self, client: BackendClient) -> None:
        self._client = client

    def acquire_token(self, credentials: Credentials) -> Token:
        form = {
            "client_id": credentials.client_id,
            "client_secret": credentials.client_secret.get_secret_value(),
            "grant_type": "client_credentials",
        }
        try:
            response = self._client.post(
                TOKEN_PATH,
                data=form,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except requests.RequestException as exc:
            raise AuthError(
                AuthErrorKind.CONNECTION_FAILED,
                f"Could not reach {self._client.base_url}: {exc}",
            ) from exc

        if response.status_code == 200:
            try:
                value = response.json()["access_token"]
            except (ValueError, KeyError, TypeError) as exc:
                raise AuthError(
                    AuthErrorKind.CONNECTION_FAILED,
                    "Token response did not contain an access token",
                ) from exc
            logger.debug("Acquired API token")
            return Token(value=value)

        if response.status_code == 401:
            raise AuthError(
                AuthErrorKind.UNAUTHORIZED, "Could not authenticate to Jamf Pro"
            )
        if response.status_code == 429:
            raise AuthError(
                AuthErrorKind.RATE_LIMITED,
                "Too many requests - rate limit exceeded, wait a few minutes",
            )
        raise AuthError(
            AuthErrorKind.CONNECTION_FAILED,
            f"Could not authenticate to Jamf Pro (HTTP {response.status_code}); "
            "the connection details are missing or incorrect",
        )

    def validate_token(self, token: Token) -> bool:
        try:
            response = self._client.get(PROBE_PATH, token=token)
        except requests.RequestException as exc:
            logger.debug("Token probe failed: %s", exc)
            return False
        return response.status_code == 200

    def invalidate_token(self, token: Token) -> None:
        try:
            response = self._client.post(INVALIDATE_PATH, token=token)
        except requests.RequestException as exc:
            logger.warning("Token invalidation failed: %s", exc)
            return
        logger.debug("Token invalidation response: HTTP %s", response.status_code)

    def check_server(self) -> bool:
        """True when the base URL answers like a Jamf Pro server (200 or 401)."""
        try:
            response = self._client.get(CURRENT_AUTH_PATH)
        except requests.RequestException as exc:
            logger.debug("Server check failed: %s", exc)
            return False
        return response.status_code in (200, 401)

    def refresh(self, session: FleetSession) -> Token:
        session.token = self.acquire_token(session.credentials)
        return session.token

    def ensure_valid(self, session: FleetSession) -> Token:
        if session.token is not None and self.validate_token(session.token):
            return session.token

        logger.debug("Token missing or expired, refreshing")
        token = self.refresh(session)
        if not self.validate_token(token):
            raise AuthError(
                AuthErrorKind.UNAUTHORIZED, "Failed to refresh API token"
            )
        return token

    def end_session(self, session: FleetSession) -> None:
        if session.token is None:
            return
        self.invalidate_token(session.token)
        session.token = None
