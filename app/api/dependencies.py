"""
app/api/dependencies.py

Shared FastAPI dependencies.

Authentication itself lives outside this service; admin routes only check
a bearer token shared with the gateway (``ADMIN_API_TOKEN``).
"""

import secrets
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import settings
from app.core.logger import get_logger

logger = get_logger(__name__)

_bearer = HTTPBearer(auto_error=False)


def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> None:
    """
    Reject the request unless it carries the admin bearer token.

    Raises:
        HTTPException 401: No bearer token was sent.
        HTTPException 403: The token is wrong, or no admin token is configured.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    expected = settings.admin_api_token
    if not expected or not secrets.compare_digest(credentials.credentials, expected):
        logger.warning("Rejected admin request with an invalid token.")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required.",
        )
