"""
Per-client request throttling.

Two interchangeable sliding-window limiters:
- RedisRateLimiter: shared counters in Redis, safe for multiple instances
- InMemoryRateLimiter: per-process fallback with its own sweep task

The active limiter is created in the application lifespan and kept on
``app.state.rate_limiter``; routes reach it through the ``rate_limit``
dependency.
"""
import asyncio
import logging
import math
import time
import uuid
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Optional, Tuple

import redis.asyncio as redis
from fastapi import Depends, Request

from app.config import RATE_LIMITS, RATE_LIMIT_SWEEP_SECONDS, REDIS_URL, TRUST_PROXY_HEADERS
from app.features.notes.errors import RateLimited

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGES = {
    "verify_password": "Too many password attempts. Please try again later.",
}


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int
    retry_after: int = 0


class RateLimiter(ABC):
    """Sliding-window limiter keyed by (bucket, client key)"""

    async def start(self) -> None:
        pass

    async def close(self) -> None:
        pass

    @abstractmethod
    async def hit(self, bucket: str, key: str, limit: int, window: float) -> RateLimitResult:
        """Record one request and report whether it is within the limit"""


class InMemoryRateLimiter(RateLimiter):
    """
    Process-local sliding window log.

    Not shared between workers or instances. ``start`` launches a periodic
    sweep that drops keys whose hits have all expired; ``close`` stops it.
    """

    def __init__(self, sweep_interval: float = RATE_LIMIT_SWEEP_SECONDS, clock=time.monotonic):
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._hits: Dict[Tuple[str, str], Deque[float]] = {}
        self._windows: Dict[Tuple[str, str], float] = {}
        self._lock = asyncio.Lock()
        self._sweeper: Optional[asyncio.Task] = None

    async def start(self) -> None:
        if self._sweeper is None:
            self._sweeper = asyncio.create_task(self._sweep_loop())
            logger.info(f"In-memory rate limiter started (sweep every {self.sweep_interval}s)")

    async def close(self) -> None:
        if self._sweeper is not None:
            self._sweeper.cancel()
            try:
                await self._sweeper
            except asyncio.CancelledError:
                pass
            self._sweeper = None
        self._hits.clear()
        self._windows.clear()

    async def hit(self, bucket: str, key: str, limit: int, window: float) -> RateLimitResult:
        now = self._clock()
        async with self._lock:
            hits = self._hits.setdefault((bucket, key), deque())
            self._windows[(bucket, key)] = window
            while hits and hits[0] <= now - window:
                hits.popleft()

            if len(hits) >= limit:
                retry_after = max(1, math.ceil(hits[0] + window - now))
                return RateLimitResult(allowed=False, remaining=0, retry_after=retry_after)

            hits.append(now)
            return RateLimitResult(allowed=True, remaining=limit - len(hits))

    async def sweep(self) -> int:
        """Evict keys with no hits left inside their window; returns how many were removed"""
        now = self._clock()
        removed = 0
        async with self._lock:
            for bucket_key in list(self._hits):
                hits = self._hits[bucket_key]
                window = self._windows.get(bucket_key, 0)
                if not hits or hits[-1] <= now - window:
                    del self._hits[bucket_key]
                    self._windows.pop(bucket_key, None)
                    removed += 1
        return removed

    def __len__(self) -> int:
        return len(self._hits)

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            removed = await self.sweep()
            if removed:
                logger.debug(f"Rate limiter sweep evicted {removed} keys")


class RedisRateLimiter(RateLimiter):
    """Sliding window on a Redis sorted set per (bucket, key)"""

    def __init__(self, redis_url: Optional[str] = None, client=None, prefix: str = "ratelimit", clock=time.time):
        self.redis_url = redis_url or REDIS_URL
        self.prefix = prefix
        self._redis = client
        self._clock = clock

    async def start(self) -> None:
        if self._redis is None:
            self._redis = redis.from_url(self.redis_url, decode_responses=True)
            await self._redis.ping()
            logger.info("Redis rate limiter connected")

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

    async def hit(self, bucket: str, key: str, limit: int, window: float) -> RateLimitResult:
        redis_key = f"{self.prefix}:{bucket}:{key}"
        now = self._clock()
        member = f"{now}:{uuid.uuid4().hex}"

        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.zremrangebyscore(redis_key, 0, now - window)
            pipe.zadd(redis_key, {member: now})
            pipe.zcard(redis_key)
            pipe.zrange(redis_key, 0, 0, withscores=True)
            pipe.expire(redis_key, int(window) + 1)
            _, _, count, oldest, _ = await pipe.execute()

        if count > limit:
            # Rejected requests do not consume the window
            await self._redis.zrem(redis_key, member)
            oldest_score = oldest[0][1] if oldest else now
            retry_after = max(1, math.ceil(oldest_score + window - now))
            return RateLimitResult(allowed=False, remaining=0, retry_after=retry_after)

        return RateLimitResult(allowed=True, remaining=limit - count)


def create_rate_limiter() -> RateLimiter:
    """Centralized limiter when REDIS_URL is configured, otherwise the process-local fallback"""
    if REDIS_URL:
        return RedisRateLimiter(REDIS_URL)
    logger.warning("REDIS_URL not set - using in-memory rate limiting (single instance only)")
    return InMemoryRateLimiter()


def get_client_ip(request: Request, trust_proxy_headers: bool = TRUST_PROXY_HEADERS) -> str:
    """
    Client address from proxy headers, falling back to the socket peer.

    With ``trust_proxy_headers`` off the headers are ignored, so clients
    reaching the app directly cannot pick their own rate limit key.
    """
    if trust_proxy_headers:
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            first = forwarded_for.split(",")[0].strip()
            if first:
                return first

        for header in ("x-real-ip", "cf-connecting-ip"):
            value = request.headers.get(header)
            if value:
                return value.strip()

    if request.client and request.client.host:
        return request.client.host

    return "unknown"


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def rate_limit(bucket: str):
    """
    FastAPI dependency factory enforcing the configured limit for ``bucket``.

    Usage:
        @router.post("/notes", dependencies=[Depends(rate_limit("create_note"))])
    """
    limit, window = RATE_LIMITS[bucket]

    async def dependency(request: Request, limiter: RateLimiter = Depends(get_rate_limiter)) -> None:
        client_ip = get_client_ip(request)
        result = await limiter.hit(bucket, client_ip, limit, window)
        if not result.allowed:
            logger.warning(f"Rate limit exceeded for {client_ip} on {bucket}")
            raise RateLimited(
                RATE_LIMIT_MESSAGES.get(bucket),
                retry_after=result.retry_after,
                remaining=result.remaining,
            )

    return dependency
