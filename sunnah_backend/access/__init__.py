"""Access control for the geocoding route: client checks and rate limiting."""

from sunnah_backend.access.fingerprint import client_fingerprint
from sunnah_backend.access.gate import (
    AccessGate,
    Allowed,
    GateDecision,
    Rejected,
    RejectReason,
    StorageUnavailable,
)
from sunnah_backend.access.store import (
    RateLimitRecord,
    RateLimitStore,
    RateLimitStoreError,
    RedisRateLimitStore,
    rate_limit_key,
)

__all__ = [
    "AccessGate",
    "Allowed",
    "GateDecision",
    "RateLimitRecord",
    "RateLimitStore",
    "RateLimitStoreError",
    "RedisRateLimitStore",
    "Rejected",
    "RejectReason",
    "StorageUnavailable",
    "client_fingerprint",
    "rate_limit_key",
]
