# contact_api/managers/rate_limiter.py

"""
Rate limiting for the service.

Two limiters live here:

* ``ContactRateLimiter`` - the fixed-window, per-client counter guarding
  contact submissions (5 per hour by default). It owns its store and a
  background sweep task with an explicit start/shutdown lifecycle.
* ``limiter`` - a slowapi ``Limiter`` for the admin endpoints, where the
  standard decorator-based limits are enough.
"""

from asyncio import CancelledError, Lock, Task, create_task
from asyncio import sleep as asyncio_sleep
from collections.abc import Callable, Iterator
from contextlib import suppress
from dataclasses import dataclass
from logging import DEBUG, getLogger
from math import ceil
from time import time
from typing import cast

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from starlette.status import HTTP_429_TOO_MANY_REQUESTS

from contact_api.clients.protocols import RateLimitStore
from contact_api.configs import LimiterConfig, file_logger, settings
from contact_api.errors import error_response
from contact_api.utils.helpers import client_identifier

logger = file_logger(getLogger(__name__))


@dataclass(slots=True)
class RateLimitRecord:
    """Counter for one client identifier inside its current window."""

    count: int
    reset_time: float

    def is_expired(self, now: float) -> bool:
        return now > self.reset_time


@dataclass(frozen=True, slots=True)
class RateLimitDecision:
    """Outcome of one ``ContactRateLimiter.hit`` call."""

    allowed: bool
    count: int
    reset_time: float
    retry_after: int = 0


class MemoryRateLimitStore:
    """Process-local ``RateLimitStore`` backed by a dict."""

    def __init__(self) -> None:
        self._records: dict[str, RateLimitRecord] = {}

    def get(self, identifier: str) -> RateLimitRecord | None:
        return self._records.get(identifier)

    def set(self, identifier: str, record: RateLimitRecord) -> None:
        self._records[identifier] = record

    def delete(self, *identifiers: str) -> int:
        count = 0
        for identifier in identifiers:
            if self._records.pop(identifier, None) is not None:
                count += 1
        return count

    def items(self) -> Iterator[tuple[str, RateLimitRecord]]:
        return iter(list(self._records.items()))

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)


class ContactRateLimiter:
    """
    Fixed-window rate limiter keyed by client identifier.

    A record is created with ``count=1`` on the first request, incremented on
    each accepted request, and reset once ``now > reset_time``. A request
    arriving while ``count >= max_requests`` is rejected and leaves the record
    untouched. Expired records are also purged by a periodic sweep so
    abandoned identifiers do not accumulate.

    Being fixed-window, a client can spend up to twice the limit across a
    window boundary. State is per process: with N workers the effective
    global limit is N times ``max_requests``.
    """

    def __init__(
        self,
        max_requests: int = settings.RATE_LIMIT_MAX_REQUESTS,
        window: float = settings.RATE_LIMIT_WINDOW,
        sweep_interval: float = settings.RATE_LIMIT_SWEEP_INTERVAL,
        store: RateLimitStore | None = None,
        clock: Callable[[], float] = time,
    ) -> None:
        """
        Initialize the limiter.

        Args:
            max_requests: Accepted requests per identifier per window.
            window: Window length in seconds.
            sweep_interval: Seconds between expiry sweeps.
            store: Record store, in-memory when omitted.
            clock: Source of the current time in epoch seconds.
        """
        self.max_requests = max_requests
        self.window = window
        self.sweep_interval = sweep_interval
        self._store: RateLimitStore = store if store is not None else MemoryRateLimitStore()
        self._clock = clock
        self._lock = Lock()
        self._sweep_task: Task[None] | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    def get_record(self, identifier: str) -> RateLimitRecord | None:
        return self._store.get(identifier)

    def __len__(self) -> int:
        return len(self._store)

    async def hit(self, identifier: str) -> RateLimitDecision:
        """
        Count one request for ``identifier``.

        Returns:
            The decision; ``allowed`` is False once the window is used up.
        """
        async with self._lock:
            now = self._clock()
            record = self._store.get(identifier)

            if record is None or record.is_expired(now):
                record = RateLimitRecord(count=1, reset_time=now + self.window)
                self._store.set(identifier, record)
                return RateLimitDecision(allowed=True, count=1, reset_time=record.reset_time)

            if record.count >= self.max_requests:
                return RateLimitDecision(
                    allowed=False,
                    count=record.count,
                    reset_time=record.reset_time,
                    retry_after=max(1, ceil(record.reset_time - now)),
                )

            record.count += 1
            self._store.set(identifier, record)
            return RateLimitDecision(
                allowed=True,
                count=record.count,
                reset_time=record.reset_time,
            )

    async def sweep(self) -> int:
        """Remove every record whose window has ended. Returns the count removed."""
        async with self._lock:
            now = self._clock()
            expired = [key for key, record in self._store.items() if record.is_expired(now)]
            count = self._store.delete(*expired) if expired else 0

        if count and logger.isEnabledFor(DEBUG):
            logger.debug("Rate limit sweep: removed %d expired records.", count)
        return count

    async def start(self) -> None:
        """Start the background sweep task."""
        async with self._lock:
            if not self.is_running:
                self._running = True
                self._sweep_task = create_task(self._sweep_loop())
                logger.info("Contact rate limiter sweep task started.")

    async def _sweep_loop(self) -> None:
        while self._running:
            try:
                await asyncio_sleep(self.sweep_interval)
                await self.sweep()
            except CancelledError:
                break
            except Exception:
                logger.exception("Error in rate limit sweep loop")

    async def shutdown(self) -> None:
        """Cancel the sweep task and drop all records."""
        self._running = False
        if task := self._sweep_task:
            task.cancel()
            with suppress(CancelledError):
                await task
            self._sweep_task = None

        async with self._lock:
            self._store.clear()
        logger.info("✓ Contact rate limiter shutdown complete")


def get_identifier(request: Request) -> str:
    """Key function for the slowapi limiter."""
    return f"ip:{client_identifier(request)}"


limiter = Limiter(**LimiterConfig().model_dump(), key_func=get_identifier)


async def rate_limit_exceeded_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Handle slowapi rate limit exceeded exceptions.

    Args:
        request: FastAPI request object.
        exc: RateLimitExceeded exception.

    Returns:
        JSON response in the service's error envelope.
    """
    http_exc = cast(RateLimitExceeded, exc)
    logger.warning(
        f"Rate limit {http_exc.detail} exceeded for {client_identifier(request)} "
        f"on {request.url.path}",
    )
    return error_response(
        f"Rate limit exceeded: {http_exc.detail}",
        HTTP_429_TOO_MANY_REQUESTS,
    )
