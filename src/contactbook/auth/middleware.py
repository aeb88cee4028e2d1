"""
Authentication dependency for bearer-token protected routes.

This module exposes:
- CurrentUser
- get_current_user
- CurrentUserDep (FastAPI dependency alias)
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ConfigDict, Field

from contactbook.auth.jwt import JWTService
from contactbook.config import Settings, get_settings
from contactbook.shared.exceptions import InvalidTokenError, TokenExpiredError
from contactbook.shared.logging import get_logger

logger = get_logger(__name__)
security = HTTPBearer(auto_error=False)


class CurrentUser(BaseModel):
    """Current authenticated caller."""

    model_config = ConfigDict(frozen=True)

    subject: str = Field(..., description="Token subject")
    email: str | None = Field(None, description="Caller email")


def _unauthorized(code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"code": code, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> CurrentUser:
    """Extract and validate the caller from the bearer token."""
    if credentials is None:
        logger.warning(
            "Missing authentication credentials",
            extra={
                "endpoint": str(request.url.path),
                "method": request.method,
                "client_ip": request.client.host if request.client else "unknown",
            },
        )
        raise _unauthorized("MISSING_CREDENTIALS", "Authentication credentials required")

    try:
        payload = JWTService(settings).verify_access_token(credentials.credentials)
    except TokenExpiredError:
        logger.info(
            "Token expired",
            extra={"endpoint": str(request.url.path), "method": request.method},
        )
        raise _unauthorized("TOKEN_EXPIRED", "Token has expired")
    except InvalidTokenError as e:
        logger.warning(
            "Invalid token",
            extra={
                "endpoint": str(request.url.path),
                "method": request.method,
                "error": e.message,
            },
        )
        raise _unauthorized(e.code, e.message)

    user = CurrentUser(subject=payload.sub, email=payload.email)
    request.state.user = user
    return user


# Dependency alias
CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]
