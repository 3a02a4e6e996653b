"""CORS and per-API-key rate limiting"""
import logging
from fastapi import Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from momentum import config

logger = logging.getLogger(__name__)


def rate_limit_key(request: Request) -> str:
    """Bucket requests by bearer API key, falling back to the client address"""
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return f"key:{token.strip()}"
    return get_remote_address(request)


# Limits per route come from READ_RATE_LIMIT / WRITE_RATE_LIMIT
limiter = Limiter(key_func=rate_limit_key, enabled=config.RATE_LIMIT_ENABLED)


def setup_cors(app):
    origins = [origin.strip() for origin in config.CORS_ORIGINS.split(",") if origin.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Authorization", "Content-Type"],
    )
    logger.info(f"CORS origins: {origins}")


def setup_rate_limiting(app):
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    logger.info(
        f"Rate limiting {'enabled' if limiter.enabled else 'disabled'} "
        f"(reads {config.READ_RATE_LIMIT}, writes {config.WRITE_RATE_LIMIT})"
    )
