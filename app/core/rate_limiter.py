"""
=============================================================================
PORTFOLIO CONTACT RELAY - RATE LIMITER MODULE
=============================================================================
Sliding-window rate limiting for the contact endpoint, keyed by client IP.

Features:
- In-memory sliding log (deque of admit times per key, lock-guarded)
- Redis sorted-set backend for multi-instance deployments
- Automatic fallback to in-memory when Redis is unavailable
- Trusted-proxy validation for X-Forwarded-For

No key is ever admitted more than `max_requests` times in any interval of
`window_seconds`; rejected hits are not recorded.

Usage:
    limiter = RateLimiter(max_requests=5, window_seconds=900)
    decision = limiter.hit(get_client_ip(request))
    if not decision.allowed:
        ...
=============================================================================
"""

import ipaddress
import logging
import math
import time
import uuid
from abc import ABC, abstractmethod
from collections import defaultdict, deque
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Deque, Dict, List, Optional, Tuple, Union

from fastapi import Request

from app.core.config import Settings

logger = logging.getLogger(__name__)

IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    retry_after: int  # seconds until the oldest admit leaves the window


# =============================================================================
# BACKEND ABSTRACTION
# =============================================================================


class _RateLimitBackend(ABC):
    """Abstract rate-limit storage backend."""

    @abstractmethod
    def hit(
        self, key: str, now: float, limit: int, window_seconds: int
    ) -> Tuple[bool, int, float]:
        """Record a hit if under limit.

        Returns (admitted, admits in window after this call, oldest admit time).
        """

    @abstractmethod
    def reset(self) -> None:
        """Clear all state (for tests)."""

    @abstractmethod
    def stats(self) -> dict:
        """Return debugging stats."""


class _InMemoryBackend(_RateLimitBackend):
    """Thread-safe in-memory backend (single-instance only)."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._windows: Dict[str, Deque[float]] = defaultdict(deque)

    def hit(
        self, key: str, now: float, limit: int, window_seconds: int
    ) -> Tuple[bool, int, float]:
        window_start = now - window_seconds
        with self._lock:
            window = self._windows[key]
            while window and window[0] <= window_start:
                window.popleft()

            admitted = len(window) < limit
            if admitted:
                window.append(now)
            count = len(window)
            oldest = window[0] if window else now
            if not window:
                del self._windows[key]
            return admitted, count, oldest

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def stats(self) -> dict:
        with self._lock:
            return {
                "backend": "in_memory",
                "tracked_keys": len(self._windows),
                "counts": {key: len(w) for key, w in self._windows.items()},
            }


class _RedisBackend(_RateLimitBackend):
    """Redis sorted-set sliding log for multi-instance deployments."""

    KEY_PREFIX = "rl:contact:"

    def __init__(self, redis_client) -> None:  # type: ignore[type-arg]
        self._redis = redis_client

    def hit(
        self, key: str, now: float, limit: int, window_seconds: int
    ) -> Tuple[bool, int, float]:
        rkey = f"{self.KEY_PREFIX}{key}"
        member = f"{now:.6f}:{uuid.uuid4().hex}"

        # Prune, add and count in one MULTI so concurrent hits are ordered.
        pipe = self._redis.pipeline(transaction=True)
        pipe.zremrangebyscore(rkey, "-inf", now - window_seconds)
        pipe.zadd(rkey, {member: now})
        pipe.zcard(rkey)
        pipe.expire(rkey, window_seconds)
        results = pipe.execute()
        count = int(results[2])

        admitted = count <= limit
        if not admitted:
            self._redis.zrem(rkey, member)
            count -= 1

        oldest = self._redis.zrange(rkey, 0, 0, withscores=True)
        oldest_ts = float(oldest[0][1]) if oldest else now
        return admitted, count, oldest_ts

    def reset(self) -> None:
        cursor = 0
        while True:
            cursor, keys = self._redis.scan(cursor, match=f"{self.KEY_PREFIX}*", count=500)
            if keys:
                self._redis.delete(*keys)
            if cursor == 0:
                break

    def stats(self) -> dict:
        counts = {}
        cursor = 0
        while True:
            cursor, keys = self._redis.scan(cursor, match=f"{self.KEY_PREFIX}*", count=500)
            for k in keys:
                key_str = k if isinstance(k, str) else k.decode()
                counts[key_str] = int(self._redis.zcard(k))
            if cursor == 0:
                break
        return {"backend": "redis", "counts": counts}


# =============================================================================
# LIMITER
# =============================================================================


class RateLimiter:
    """Per-key admission gate over a sliding window."""

    def __init__(
        self,
        max_requests: int = 5,
        window_seconds: int = 15 * 60,
        backend: Optional[_RateLimitBackend] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be at least 1")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.backend = backend or _InMemoryBackend()
        self._clock = clock

    def hit(self, key: str) -> RateLimitDecision:
        now = self._clock()
        admitted, count, oldest = self.backend.hit(
            key, now, self.max_requests, self.window_seconds
        )
        retry_after = max(0, math.ceil(oldest + self.window_seconds - now))
        return RateLimitDecision(
            allowed=admitted,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - count),
            retry_after=retry_after,
        )

    def describe(self) -> str:
        minutes, seconds = divmod(self.window_seconds, 60)
        if seconds == 0:
            span = "1 minute" if minutes == 1 else f"{minutes} minutes"
        else:
            span = f"{self.window_seconds} seconds"
        return f"Limit of {self.max_requests} requests per {span} exceeded."

    def reset(self) -> None:
        self.backend.reset()

    def stats(self) -> dict:
        stats = self.backend.stats()
        stats["limit"] = self.max_requests
        stats["window_seconds"] = self.window_seconds
        return stats


def _init_backend(settings: Settings) -> _RateLimitBackend:
    """Use Redis when configured and reachable, otherwise in-memory."""
    if not settings.REDIS_URL:
        return _InMemoryBackend()
    try:
        import redis as _redis_lib

        client = _redis_lib.Redis.from_url(
            settings.REDIS_URL, decode_responses=True, socket_connect_timeout=2
        )
        client.ping()
        logger.info("Rate limiter using Redis backend (%s)", settings.REDIS_URL)
        return _RedisBackend(client)
    except Exception as exc:
        logger.warning(
            "Redis unavailable for rate limiter, using in-memory fallback: %s", exc
        )
        return _InMemoryBackend()


def build_rate_limiter(settings: Settings) -> RateLimiter:
    return RateLimiter(
        max_requests=settings.CONTACT_RATE_LIMIT_MAX,
        window_seconds=settings.CONTACT_RATE_LIMIT_WINDOW_SECONDS,
        backend=_init_backend(settings),
    )


# =============================================================================
# IP EXTRACTION
# =============================================================================


def parse_trusted_networks(entries: List[str]) -> List[IPNetwork]:
    """Parse TRUSTED_PROXIES setting into network objects."""
    nets = []
    for entry in entries:
        try:
            nets.append(ipaddress.ip_network(entry, strict=False))
        except ValueError:
            logger.warning("Invalid TRUSTED_PROXIES entry ignored: %s", entry)
    return nets


def _is_trusted_proxy(ip_str: str, networks: List[IPNetwork]) -> bool:
    """Check if an IP belongs to the configured trusted proxy ranges."""
    try:
        addr = ipaddress.ip_address(ip_str)
    except ValueError:
        return False
    return any(addr in net for net in networks)


def get_client_ip(request: Request, networks: List[IPNetwork]) -> str:
    """Extract client IP, trusting X-Forwarded-For only from trusted proxies."""
    direct_ip = request.client.host if request.client else "unknown"

    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded and _is_trusted_proxy(direct_ip, networks):
        # Rightmost untrusted IP is the real client
        parts = [p.strip() for p in forwarded.split(",") if p.strip()]
        for ip in reversed(parts):
            if not _is_trusted_proxy(ip, networks):
                return ip
        # All IPs in chain are trusted, use leftmost
        if parts:
            return parts[0]

    return direct_ip
