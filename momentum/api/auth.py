"""Bearer API-key authentication for the progress API"""
import logging
import secrets
from fastapi import HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from momentum import config

logger = logging.getLogger(__name__)

security = HTTPBearer()


def get_api_keys() -> list[str]:
    """Comma-separated API_KEYS, read at call time so key rotation needs no restart"""
    if not config.API_KEYS:
        logger.warning("No API_KEYS configured")
        return []
    return [key.strip() for key in config.API_KEYS.split(",") if key.strip()]


def mask_key(api_key: str) -> str:
    return f"{api_key[:4]}***" if len(api_key) > 4 else "***"


def is_valid_key(api_key: str, valid_keys: list[str]) -> bool:
    # compare against every key so timing does not reveal which one matched
    matches = [secrets.compare_digest(api_key.encode(), key.encode()) for key in valid_keys]
    return any(matches)


async def verify_api_key(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """
    Verify the bearer API key

    Raises:
        HTTPException: 503 when no keys are configured, 401 for an unknown key
    """
    api_key = credentials.credentials
    valid_keys = get_api_keys()

    if not valid_keys:
        logger.error("Rejecting request: API authentication not configured")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="API authentication not configured"
        )

    if not is_valid_key(api_key, valid_keys):
        logger.warning(f"Invalid API key attempt: {mask_key(api_key)}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key"
        )

    return api_key
