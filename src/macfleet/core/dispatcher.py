"""Scheduled managed-software-update dispatch.

Plans are sent one device at a time. Each device gets up to
``RetryPolicy.max_attempts`` attempts:

* HTTP 200/201 marks the device as succeeded.
* HTTP 429 sleeps ``rate_limit_backoff`` seconds and tries again. On the last
  attempt there is no sleep; the device fails straight away.
* HTTP 401 refreshes the bearer token and tries again.
* Any other status, or a transport error, fails the device at once.

A fixed ``inter_device_delay`` separates consecutive devices. Failures never
abort the batch; they are recorded on the device's result.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import requests

from macfleet.config import DispatchConfig
from macfleet.errors import AuthError
from macfleet.models import (
    DeviceResult,
    DeviceStatus,
    DispatchError,
    DispatchOutcome,
    UpdatePlan,
)

from .auth import AuthManager
from .client import BackendClient
from .session import FleetSession

logger = logging.getLogger(__name__)

PLANS_PATH = "/api/v1/managed-software-updates/plans"

UPDATE_ACTION = "DOWNLOAD_INSTALL_SCHEDULE"
VERSION_TYPE = "LATEST_ANY"
OBJECT_TYPE = "COMPUTER"

SUCCESS_CODES = frozenset({200, 201})
RATE_LIMITED = 429
UNAUTHORIZED = 401

Sleeper = Callable[[float], None]
ProgressCallback = Callable[[DeviceResult], None]


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    rate_limit_backoff: float = 30.0
    inter_device_delay: float = 5.0

    @classmethod
    def from_config(cls, config: DispatchConfig) -> RetryPolicy:
        return cls(
            max_attempts=config.max_attempts,
            rate_limit_backoff=config.rate_limit_backoff,
            inter_device_delay=config.inter_device_delay,
        )


def build_plan_request(device_id: str, plan: UpdatePlan) -> dict[str, Any]:
    return {
        "devices": [{"objectType": OBJECT_TYPE, "deviceId": device_id}],
        "config": {
            "updateAction": UPDATE_ACTION,
            "versionType": VERSION_TYPE,
            "forceInstallLocalDateTime": plan.schedule_string,
        },
    }


class UpdateDispatcher:
    def __init__(
        self,
        client: BackendClient,
        auth: AuthManager,
        policy: RetryPolicy | None = None,
        sleeper: Sleeper = time.sleep,
    ) -> None:
        self._client = client
        self._auth = auth
        self._policy = policy or RetryPolicy()
        self._sleep = sleeper

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def dispatch(
        self,
        session: FleetSession,
        plan: UpdatePlan,
        on_result: ProgressCallback | None = None,
    ) -> DispatchOutcome:
        """Send one update plan per device in ``plan``.

        Validates the session token once before the first device; an
        ``AuthError`` from that check propagates and nothing is sent.
        """
        if not plan.device_ids:
            return DispatchOutcome(results=())

        self._auth.ensure_valid(session)
        logger.info(
            "Sending update plans to %d device(s), scheduled for %s",
            len(plan.device_ids),
            plan.schedule_string,
        )

        results: list[DeviceResult] = []
        last_index = len(plan.device_ids) - 1
        for index, device_id in enumerate(plan.device_ids):
            result = self._dispatch_device(session, plan, device_id)
            results.append(result)
            if on_result is not None:
                on_result(result)

            if index < last_index and self._policy.inter_device_delay > 0:
                logger.debug(
                    "Waiting %.0fs before next device", self._policy.inter_device_delay
                )
                self._sleep(self._policy.inter_device_delay)

        outcome = DispatchOutcome(results=tuple(results))
        logger.info(
            "Update plans sent: %d succeeded, %d failed, %d total",
            outcome.succeeded,
            outcome.failed,
            outcome.total,
        )
        return outcome

    def _dispatch_device(
        self, session: FleetSession, plan: UpdatePlan, device_id: str
    ) -> DeviceResult:
        body = build_plan_request(device_id, plan)
        status = DeviceStatus.PENDING
        attempts = 0
        last_code: int | None = None
        reason = "no attempts made"

        while attempts < self._policy.max_attempts:
            attempts += 1
            status = DeviceStatus.ATTEMPTING
            logger.debug(
                "Device %s: attempt %d/%d",
                device_id,
                attempts,
                self._policy.max_attempts,
            )

            try:
                response = self._client.post(
                    PLANS_PATH,
                    token=session.token,
                    json=body,
                    headers={"Content-Type": "application/json"},
                )
            except requests.RequestException as exc:
                reason = f"request failed: {exc}"
                last_code = None
                break

            last_code = response.status_code
            if last_code in SUCCESS_CODES:
                status = DeviceStatus.SUCCEEDED
                break

            if last_code == RATE_LIMITED:
                reason = "rate limited"
                if attempts < self._policy.max_attempts:
                    logger.warning(
                        "Rate limit hit for device %s, waiting %.0fs before retry",
                        device_id,
                        self._policy.rate_limit_backoff,
                    )
                    self._sleep(self._policy.rate_limit_backoff)
                continue

            if last_code == UNAUTHORIZED:
                reason = "token rejected"
                logger.warning("Token expired while updating %s, refreshing", device_id)
                try:
                    self._auth.refresh(session)
                except AuthError as exc:
                    logger.warning("Token refresh failed: %s", exc)
                continue

            reason = f"unexpected response HTTP {last_code}: {_body_excerpt(response)}"
            break

        if status is DeviceStatus.SUCCEEDED:
            logger.info("Update plan created for device %s", device_id)
            return DeviceResult(
                device_id=device_id,
                status=status,
                attempts=attempts,
                last_status_code=last_code,
            )

        logger.error(
            "Failed to send update command to device %s after %d attempt(s): %s",
            device_id,
            attempts,
            reason,
        )
        return DeviceResult(
            device_id=device_id,
            status=DeviceStatus.FAILED,
            attempts=attempts,
            last_status_code=last_code,
            error=DispatchError(
                device_id=device_id, reason=reason, status_code=last_code
            ),
        )


def _body_excerpt(response: requests.Response, limit: int = 200) -> str:
    text = response.text or ""
    return text[:limit]
