import hashlib
import logging
import time

from fastapi import Request, status
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware

from collabhub.config import settings

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60


def client_key(request: Request) -> str:
    """Bearer token fingerprint when present, otherwise the client address."""
    auth = request.headers.get("authorization", "")
    if auth.lower().startswith("bearer "):
        digest = hashlib.sha256(auth[7:].encode("utf-8")).hexdigest()[:32]
        return f"rate_limit:token:{digest}"
    client_ip = request.client.host if request.client else "unknown"
    return f"rate_limit:ip:{client_ip}"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Redis-backed sliding window rate limiter."""

    async def dispatch(self, request: Request, call_next):
        if request.url.path == "/health":
            return await call_next(request)

        redis_client = getattr(request.app.state, "redis", None)
        if redis_client is None:
            return await call_next(request)

        key = client_key(request)
        try:
            now = time.time()
            pipe = redis_client.pipeline()
            pipe.zremrangebyscore(key, 0, now - WINDOW_SECONDS)
            pipe.zadd(key, {str(now): now})
            pipe.zcard(key)
            pipe.expire(key, WINDOW_SECONDS)
            results = await pipe.execute()
            request_count = results[2]
        except (RedisError, OSError) as e:
            # Redis trouble never blocks traffic
            logger.warning("Rate limiter unavailable: %s", e)
            return await call_next(request)

        if request_count > settings.RATE_LIMIT_PER_MINUTE:
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"detail": "Rate limit exceeded. Try again later."},
            )
        return await call_next(request)
