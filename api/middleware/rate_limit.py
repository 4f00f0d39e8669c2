"""
Rate limiting for dashboard reads and gate checks.

Limits are shared through Redis when ``REDIS_HOST`` is set and reachable, and
kept per process otherwise. The event endpoint is deliberately not limited.
"""

import redis
from fastapi import Request, status
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from core.config import Config, get_config
from core.logger import get_logger

logger = get_logger(__name__)

MEMORY_STORAGE = "memory://"
DEFAULT_RETRY_AFTER = 60


def redis_uri(config: Config) -> str:
    auth = f":{config.redis_password}@" if config.redis_password else ""
    return f"redis://{auth}{config.redis_host}:{config.redis_port}/{config.redis_db}"


def get_storage_uri(config: Config) -> str:
    """Redis storage URI if Redis answers a ping, else in-memory storage."""
    if not (config.redis_host or "").strip():
        logger.info("Using in-memory storage for rate limiting")
        return MEMORY_STORAGE

    uri = redis_uri(config)
    try:
        redis.Redis.from_url(uri, socket_connect_timeout=2).ping()
    except redis.RedisError as e:
        logger.warning(
            "Redis unreachable, falling back to in-memory rate limiting",
            host=config.redis_host,
            error=str(e)
        )
        return MEMORY_STORAGE

    logger.info("Using Redis for rate limiting", host=config.redis_host, port=config.redis_port)
    return uri


limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=get_storage_uri(get_config())
)


def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Answer 429 in the shared error envelope."""
    logger.warning(
        "Rate limit exceeded",
        path=request.url.path,
        ip=get_remote_address(request),
        limit=str(exc.detail)
    )
    retry_after = getattr(exc, "retry_after", None) or DEFAULT_RETRY_AFTER

    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "error": {
                "message": "Rate limit exceeded. Please try again later.",
                "error_code": "rate_limit_exceeded",
                "retry_after": retry_after
            }
        },
        headers={"Retry-After": str(retry_after)}
    )
