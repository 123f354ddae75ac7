"""
Per-credential rate limiting.

Every access token (or anonymous token) gets its own token bucket. Buckets
live in a TTL cache so that a large, churning population of tokens does not
grow memory without bound; LimiterJanitor sweeps expired buckets periodically.

Two ways to plug the limiter into an Executor:

    limiter = RateLimiter.from_config(config)
    executor.http_request_hook(limiter.handle())           # as a hook
    client = httpx.AsyncClient(transport=LimiterTransport(limiter))  # as a transport
"""

import asyncio
import logging
import threading
import time
from typing import TYPE_CHECKING, Callable, Optional, Protocol

import httpx
from cachetools import TTLCache

from apiexecutor.core.call_scope import get_request
from apiexecutor.core.exceptions import RequestContextMissingError

if TYPE_CHECKING:
    from apiexecutor.config import ExecutorConfig
    from apiexecutor.models.request import ApiRequest

logger = logging.getLogger("apiexecutor.limiter")


class WaitLimiter(Protocol):
    async def wait(self) -> None: ...


class NoopLimiter:
    """Limiter used for requests without a credential: never waits."""

    async def wait(self) -> None:
        return None


NOOP_LIMITER = NoopLimiter()


class TokenBucket:
    """
    Token bucket: ``burst`` tokens at most, refilled at ``rate`` tokens per second.

    ``wait`` reserves a token first and then sleeps until the reservation is
    due, so concurrent waiters on one bucket are served in arrival order.
    Bucket state is guarded by a threading.Lock; only the waiting task sleeps.
    """

    def __init__(
        self,
        rate: float,
        burst: int = 1,
        clock: Callable[[], float] = time.monotonic,
    ):
        if rate <= 0:
            raise ValueError("rate must be positive")
        if burst < 1:
            raise ValueError("burst must be at least 1")
        self.rate = rate
        self.burst = burst
        self._clock = clock
        self._tokens = float(burst)
        self._last_refill = clock()
        self._lock = threading.Lock()

    def _refill(self, now: float) -> None:
        elapsed = max(0.0, now - self._last_refill)
        self._tokens = min(float(self.burst), self._tokens + elapsed * self.rate)
        self._last_refill = now

    @property
    def tokens(self) -> float:
        """Current token level; negative while reservations are queued."""
        with self._lock:
            self._refill(self._clock())
            return self._tokens

    def try_acquire(self) -> bool:
        """Take a token if one is available right now."""
        with self._lock:
            self._refill(self._clock())
            if self._tokens >= 1:
                self._tokens -= 1
                return True
            return False

    def reserve(self) -> float:
        """Take a token, possibly in advance, and return the seconds to wait for it."""
        with self._lock:
            self._refill(self._clock())
            self._tokens -= 1
            if self._tokens >= 0:
                return 0.0
            return -self._tokens / self.rate

    def cancel_reservation(self) -> None:
        """Give back a token taken by ``reserve`` that will not be used."""
        with self._lock:
            self._refill(self._clock())
            self._tokens = min(float(self.burst), self._tokens + 1)

    async def wait(self) -> None:
        """
        Wait until a token is available.

        Cancelling the waiting task returns the reserved token and propagates
        asyncio.CancelledError.
        """
        delay = self.reserve()
        if delay <= 0:
            return
        try:
            await asyncio.sleep(delay)
        except asyncio.CancelledError:
            self.cancel_reservation()
            raise


def credential_of(request: Optional["ApiRequest"]) -> str:
    """Return the key used to pick a limiter: access token, else anonymous token."""
    if request is None or request.params is None:
        return ""
    return request.params.access_token or request.params.anonymous_token


class LimiterStore(Protocol):
    def get_limiter(self, request: "ApiRequest") -> WaitLimiter: ...


class TtlLimiterStore:
    """
    TTL cache of token buckets keyed by credential, using cachetools.

    Each access re-inserts the bucket, so a bucket expires ``expiration``
    seconds after it was last used. Guarded by a lock: cachetools caches are
    not thread-safe.
    """

    def __init__(
        self,
        rps: float,
        expiration: float = 600.0,
        maxsize: int = 100_000,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.rps = rps
        self.expiration = expiration
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=expiration, timer=timer)
        self._lock = threading.Lock()

    def get_limiter(self, request: "ApiRequest") -> WaitLimiter:
        token = credential_of(request)
        if not token:
            return NOOP_LIMITER

        with self._lock:
            limiter = self._cache.get(token)
            if limiter is None:
                limiter = TokenBucket(self.rps, burst=1)
                logger.debug("Token limiter created", extra={"rps": self.rps})
            # Re-inserting restarts the expiration countdown.
            self._cache[token] = limiter
        return limiter

    def expire(self) -> int:
        """Remove expired limiters and return how many were removed."""
        with self._lock:
            before = len(self._cache)
            self._cache.expire()
            return before - len(self._cache)

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)


class RateLimiter:
    """Throttles outgoing HTTP requests with limiters from a LimiterStore."""

    def __init__(self, store: LimiterStore):
        self.store = store

    @classmethod
    def from_config(cls, config: "ExecutorConfig") -> "RateLimiter":
        return cls(
            TtlLimiterStore(
                rps=config.LIMITER_RPS,
                expiration=config.LIMITER_EXPIRATION,
                maxsize=config.LIMITER_CACHE_SIZE,
            )
        )

    async def acquire(self, http_request: httpx.Request) -> None:
        """Wait for the limiter of the API request bound to ``http_request``."""
        api_request = get_request(http_request)
        if api_request is None:
            raise RequestContextMissingError()
        limiter = self.store.get_limiter(api_request)
        await limiter.wait()

    def handle(self):
        """Return an http_request hook that waits for the limiter before the send."""

        async def rate_limit_hook(next, http_request: httpx.Request):
            await self.acquire(http_request)
            return await next(http_request)

        return rate_limit_hook


class LimiterTransport(httpx.AsyncBaseTransport):
    """Transport decorator: waits for the limiter, then delegates the exchange."""

    def __init__(
        self,
        limiter: RateLimiter,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.limiter = limiter
        self.transport = transport if transport is not None else httpx.AsyncHTTPTransport()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        await self.limiter.acquire(request)
        return await self.transport.handle_async_request(request)

    async def aclose(self) -> None:
        await self.transport.aclose()


class LimiterJanitor:
    """Periodic sweep of expired limiters from a TtlLimiterStore."""

    def __init__(self, store: TtlLimiterStore, interval: float = 3600.0):
        self.store = store
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @classmethod
    def from_config(cls, store: TtlLimiterStore, config: "ExecutorConfig") -> "LimiterJanitor":
        return cls(store, interval=config.LIMITER_CLEANUP_INTERVAL)

    async def start(self) -> None:
        """Start the sweep loop."""
        self._task = asyncio.create_task(self._loop())
        logger.info(f"Limiter Janitor started (interval: {self.interval}s)")

    async def stop(self) -> None:
        """Stop the sweep loop."""
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        logger.info("Limiter Janitor stopped")

    async def _loop(self) -> None:
        """Periodic execution loop."""
        while True:
            try:
                await asyncio.sleep(self.interval)
                self.sweep()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Limiter sweep failed: {e}")

    def sweep(self) -> int:
        removed = self.store.expire()
        if removed:
            logger.debug(f"Swept {removed} expired limiters ({len(self.store)} left)")
        return removed
