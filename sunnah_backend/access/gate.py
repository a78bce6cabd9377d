"""Access gate for the geocoding route.

The gate runs four checks in order and stops at the first failure:

1. the client signature header must fully match the expected pattern (401)
2. the client version header must be present (401)
3. the client version must not be below the current version (426)
4. the client must be within its request budget for the window (429)

Storage faults during the rate limit check fail open: the request is let
through as ``StorageUnavailable`` so a Redis outage never blocks clients.
"""

import re
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from starlette.requests import Request
from starlette.status import (
    HTTP_401_UNAUTHORIZED,
    HTTP_426_UPGRADE_REQUIRED,
    HTTP_429_TOO_MANY_REQUESTS,
)

from sunnah_backend.access.fingerprint import client_fingerprint
from sunnah_backend.access.store import (
    RateLimitRecord,
    RateLimitStore,
    RateLimitStoreError,
    rate_limit_key,
)
from sunnah_backend.core.config import Settings
from sunnah_backend.core.logging import get_logger
from sunnah_backend.core.metrics import ACCESS_GATE_DECISIONS
from sunnah_backend.notifications import LoggingNotifier, NotificationPolicy, Notifier

logger = get_logger(__name__)

GATED_PATH_PREFIX = "/geocoding-data"
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class RejectReason(str, Enum):
    MISSING_SIGNATURE = "missing_signature"
    INVALID_SIGNATURE = "invalid_signature"
    MISSING_VERSION = "missing_version"
    OUTDATED_VERSION = "outdated_version"
    RATE_LIMITED = "rate_limited"


@dataclass(frozen=True)
class Allowed:
    """The request may proceed."""

    record: RateLimitRecord | None = None
    allowed: bool = field(default=True, init=False)


@dataclass(frozen=True)
class StorageUnavailable:
    """The counter store failed; the request proceeds unthrottled."""

    error: str
    allowed: bool = field(default=True, init=False)


@dataclass(frozen=True)
class Rejected:
    """The request is refused with ``status_code``."""

    status_code: int
    reason: RejectReason
    headers: dict[str, str] = field(default_factory=dict)
    allowed: bool = field(default=False, init=False)


GateDecision = Allowed | StorageUnavailable | Rejected


def parse_version(value: str | None) -> int | None:
    """Parse the leading integer of a version string, ``None`` if there is none."""
    if value is None:
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


class AccessGate:
    """Authenticate, version-check and rate limit geocoding requests."""

    def __init__(
        self,
        store: RateLimitStore,
        expected_user_agent: str,
        current_app_version: str,
        limit: int = 15,
        window_seconds: int = 3600,
        user_agent_header: str = "User-Agent",
        app_version_header: str = "App-Version",
        client_ip_headers: Sequence[str] = (
            "CF-Connecting-IP",
            "X-Forwarded-For",
            "X-Real-IP",
        ),
        notifier: Notifier | None = None,
        policy: NotificationPolicy | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize the gate.

        Args:
            store: Counter store shared by all application instances
            expected_user_agent: Regular expression the signature header must match
            current_app_version: Oldest accepted client version
            limit: Requests allowed per client and window
            window_seconds: Window length, also the TTL of counter records
            user_agent_header: Header carrying the client signature
            app_version_header: Header carrying the client version
            client_ip_headers: Origin headers used for fingerprinting, by priority
            notifier: Operator notification channel
            policy: Which events are reported through ``notifier``
            clock: Source of the current unix time
        """
        self.store = store
        self.signature = re.compile(expected_user_agent)
        self.current_app_version = current_app_version
        self.limit = limit
        self.window = window_seconds
        self.user_agent_header = user_agent_header
        self.app_version_header = app_version_header
        self.client_ip_headers = tuple(client_ip_headers)
        self.notifier = notifier or LoggingNotifier()
        self.policy = policy or NotificationPolicy()
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: RateLimitStore,
        notifier: Notifier | None = None,
        clock: Callable[[], float] = time.time,
    ) -> "AccessGate":
        return cls(
            store=store,
            expected_user_agent=settings.EXPECTED_USER_AGENT,
            current_app_version=settings.CURRENT_APP_VERSION,
            limit=settings.RATE_LIMIT,
            window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
            user_agent_header=settings.USER_AGENT_HEADER,
            app_version_header=settings.APP_VERSION_HEADER,
            client_ip_headers=settings.CLIENT_IP_HEADERS,
            notifier=notifier,
            policy=NotificationPolicy.from_settings(settings),
            clock=clock,
        )

    @staticmethod
    def applies_to(path: str) -> bool:
        return path.startswith(GATED_PATH_PREFIX)

    async def evaluate(self, request: Request) -> GateDecision:
        """Decide whether ``request`` may reach the geocoding route."""
        if not self.applies_to(request.url.path):
            return Allowed()

        decision = self._check_client(request)
        if decision is None:
            decision = await self._check_rate_limit(request)

        ACCESS_GATE_DECISIONS.labels(outcome=self._outcome(decision)).inc()
        return decision

    def _check_client(self, request: Request) -> Rejected | None:
        user_agent = request.headers.get(self.user_agent_header)
        if not user_agent:
            return self._reject(HTTP_401_UNAUTHORIZED, RejectReason.MISSING_SIGNATURE)
        if not self.signature.fullmatch(user_agent):
            return self._reject(
                HTTP_401_UNAUTHORIZED,
                RejectReason.INVALID_SIGNATURE,
                user_agent=user_agent,
            )

        app_version = request.headers.get(self.app_version_header)
        if not app_version:
            return self._reject(HTTP_401_UNAUTHORIZED, RejectReason.MISSING_VERSION)

        client_version = parse_version(app_version)
        current_version = parse_version(self.current_app_version)
        if (
            client_version is not None
            and current_version is not None
            and client_version < current_version
        ):
            return self._reject(
                HTTP_426_UPGRADE_REQUIRED,
                RejectReason.OUTDATED_VERSION,
                app_version=app_version,
            )
        return None

    async def _check_rate_limit(self, request: Request) -> GateDecision:
        fingerprint = client_fingerprint(request, self.client_ip_headers)
        key = rate_limit_key(fingerprint)
        now = int(self._clock())

        try:
            record = await self.store.get(key)

            if record is None or record.is_expired(now, self.window):
                fresh = RateLimitRecord(count=1, timestamp=now)
                await self.store.put(key, fresh, self.window)
                return Allowed(record=fresh)

            if record.count >= self.limit:
                retry_after = record.retry_after(now, self.window)
                if self.policy.notify_on_rate_limit:
                    self.notifier.notify(f"Too many requests {fingerprint}")
                return self._reject(
                    HTTP_429_TOO_MANY_REQUESTS,
                    RejectReason.RATE_LIMITED,
                    headers={"Retry-After": str(retry_after)},
                    fingerprint=fingerprint,
                )

            incremented = RateLimitRecord(
                count=record.count + 1, timestamp=record.timestamp
            )
            await self.store.put(key, incremented, self.window)
            return Allowed(record=incremented)

        except RateLimitStoreError as e:
            logger.error("rate_limit_storage_error", key=key, error=str(e))
            return StorageUnavailable(error=str(e))

    def _reject(
        self,
        status_code: int,
        reason: RejectReason,
        headers: dict[str, str] | None = None,
        **context: str,
    ) -> Rejected:
        logger.warning(
            "access_rejected",
            status_code=status_code,
            reason=reason.value,
            **context,
        )
        return Rejected(status_code=status_code, reason=reason, headers=headers or {})

    @staticmethod
    def _outcome(decision: GateDecision) -> str:
        if isinstance(decision, Rejected):
            return decision.reason.value
        if isinstance(decision, StorageUnavailable):
            return "storage_unavailable"
        return "allowed"
