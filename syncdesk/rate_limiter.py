"""
Fixed-window rate limiting for the /api routes.

Counters live in process memory keyed by client IP. When REDIS_URL is set
they are also mirrored to Redis every few seconds so a restarted worker
can pick its window back up. Redis trouble never blocks a request.
"""

import logging
import time
from datetime import datetime, timezone
from threading import Lock
from typing import Callable, Optional

import redis
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from . import config
from .config import ServerSettings

logger = logging.getLogger(__name__)

KEY_PREFIX = "rate_limit"
RATE_LIMIT_MESSAGE = "Too many requests, please try again later"

# Redis connection, False once a connection attempt has failed
redis_client = None

# Format: {key: {'count': int, 'reset_time': float, 'last_redis_sync': float}}
memory_cache: dict[str, dict] = {}
cache_lock = Lock()

MEMORY_CACHE_SYNC_INTERVAL = 10
last_cleanup_time = 0.0


def get_redis_client() -> Optional[redis.Redis]:
    """Lazily connect to REDIS_URL; None when unset or unreachable."""
    global redis_client

    if not config.REDIS_URL or redis_client is False:
        return None

    if redis_client is None:
        logger.info("🔄 Initializing Redis connection for rate limiting...")
        try:
            client = redis.from_url(
                config.REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30,
            )
            client.ping()
            redis_client = client
            logger.info("✅ Redis connected for rate limiting")
        except redis.RedisError as e:
            logger.error(f"❌ Failed to connect to Redis: {e}")
            logger.warning("⚠️ Rate limiting continues in memory only")
            redis_client = False
            return None

    return redis_client


def reset_rate_limits() -> None:
    """Drop every counter (startup and tests)."""
    global last_cleanup_time
    with cache_lock:
        memory_cache.clear()
    last_cleanup_time = 0.0


def cleanup_expired_cache(sweep_seconds: int, now: Optional[float] = None) -> int:
    """Remove windows that have ended; runs at most once per sweep interval."""
    global last_cleanup_time
    now = time.time() if now is None else now

    if now - last_cleanup_time < sweep_seconds:
        return 0

    with cache_lock:
        expired_keys = [k for k, v in memory_cache.items() if v["reset_time"] < now]
        for k in expired_keys:
            del memory_cache[k]

    last_cleanup_time = now
    if expired_keys:
        logger.debug(f"🧹 Cleaned up {len(expired_keys)} expired rate limit entries")
    return len(expired_keys)


def _load_from_redis(client: redis.Redis, key: str, now: float) -> Optional[dict]:
    try:
        count = client.get(key)
        ttl = client.ttl(key)
    except redis.RedisError as e:
        logger.warning(f"⚠️ Failed to load {key} from Redis, using memory only: {e}")
        return None
    if count and ttl and ttl > 0:
        return {"count": int(count), "reset_time": now + ttl, "last_redis_sync": now}
    return None


def _sync_to_redis(client: redis.Redis, key: str, entry: dict, now: float) -> None:
    ttl = max(1, int(entry["reset_time"] - now))
    try:
        client.set(key, entry["count"], ex=ttl)
        entry["last_redis_sync"] = now
    except redis.RedisError as e:
        logger.warning(f"⚠️ Failed to sync {key} to Redis: {e}")


def check_rate_limit(
    key: str, limit: int, window_seconds: int, now: Optional[float] = None
) -> tuple[bool, int, float]:
    """
    Count one request against ``key``.

    Every request is counted, rejected ones included; the request is allowed
    while the count stays within ``limit``.

    Returns:
        Tuple of (is_allowed, current_count, reset_time)
    """
    now = time.time() if now is None else now
    client = get_redis_client()

    with cache_lock:
        entry = memory_cache.get(key)
        if entry is None and client is not None:
            entry = _load_from_redis(client, key, now)
        if entry is None or entry["reset_time"] < now:
            entry = {"count": 0, "reset_time": now + window_seconds, "last_redis_sync": 0.0}
        memory_cache[key] = entry

        entry["count"] += 1

        if client is not None and now - entry["last_redis_sync"] >= MEMORY_CACHE_SYNC_INTERVAL:
            _sync_to_redis(client, key, entry, now)

        return entry["count"] <= limit, entry["count"], entry["reset_time"]


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def _iso(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat().replace("+00:00", "Z")


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Apply the per-IP window to requests under ``path_prefix``."""

    def __init__(self, app, settings: ServerSettings, path_prefix: str = "/api"):
        super().__init__(app)
        self.limit = settings.rate_limit_max_requests
        self.window_seconds = settings.rate_limit_window_seconds
        self.sweep_seconds = settings.rate_limit_sweep_seconds
        self.path_prefix = path_prefix
        logger.info(f"🚦 Rate limiting {path_prefix}: {self.limit} requests per {self.window_seconds}s")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        cleanup_expired_cache(self.sweep_seconds)

        ip = client_ip(request)
        allowed, count, reset_time = check_rate_limit(f"{KEY_PREFIX}:{ip}", self.limit, self.window_seconds)
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(max(0, self.limit - count)),
            "X-RateLimit-Reset": _iso(reset_time),
        }

        if not allowed:
            logger.warning(f"🚫 Rate limit EXCEEDED for {ip} - {count}/{self.limit} requests")
            headers["Retry-After"] = str(max(0, int(reset_time - time.time())))
            return JSONResponse(
                status_code=429,
                content={
                    "success": False,
                    "error": {
                        "code": "RATE_LIMIT_EXCEEDED",
                        "message": RATE_LIMIT_MESSAGE,
                        "retryAfter": _iso(reset_time),
                    },
                },
                headers=headers,
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response
