"""
Rate limiting using slowapi
"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse
import structlog

from app import config

logger = structlog.get_logger()

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["1000/hour", "100/minute"],
    enabled=config.RATE_LIMIT_ENABLED,
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """Render rate limit errors in the API's error shape"""
    client_ip = request.client.host if request.client else "unknown"
    logger.warning("rate_limit_exceeded", client_ip=client_ip, limit=str(exc.detail))
    return JSONResponse(
        status_code=429,
        content={"success": False, "error": f"Rate limit exceeded: {exc.detail}. Please try again later."},
    )


def ai_generation_limit():
    """Rate limit for AI generation endpoints"""
    return limiter.limit(config.AI_RATE_LIMIT)


def general_api_limit():
    """Rate limit for general API endpoints"""
    return limiter.limit("60/minute")
