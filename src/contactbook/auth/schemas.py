"""
Pydantic schemas for authentication.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class TokenPayload(BaseModel):
    """JWT token payload schema."""

    sub: str = Field(..., description="Subject (caller identity)")
    exp: datetime = Field(..., description="Expiration time")
    iat: datetime = Field(..., description="Issued at time")
    type: Literal["access", "refresh"] = Field(..., description="Token type")
    email: str | None = Field(None, description="Caller email")


class TokenPair(BaseModel):
    """Access/refresh token pair issued by the token provider."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field(default="Bearer", description="Token type")
    expires_in: int = Field(..., description="Access token expiration in seconds")
