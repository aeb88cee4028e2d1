"""
JWT bearer-token provider: issue, verify and refresh.
"""

from datetime import datetime, timedelta, timezone

import jwt
from pydantic import ValidationError

from contactbook.auth.schemas import TokenPair, TokenPayload
from contactbook.config import Settings, get_settings
from contactbook.shared.exceptions import InvalidTokenError, TokenExpiredError
from contactbook.shared.logging import get_logger

logger = get_logger(__name__)


class JWTService:
    """Service for creating and verifying JWT tokens."""

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize JWT service.

        Args:
            settings: Application settings. Uses default if not provided.
        """
        self._settings = settings or get_settings()

    def create_access_token(self, subject: str, email: str | None = None) -> str:
        """Create a new access token.

        Args:
            subject: Caller identity.
            email: Optional caller email claim.

        Returns:
            Encoded JWT access token.
        """
        now = datetime.now(timezone.utc)
        expires = now + timedelta(minutes=self._settings.jwt_access_token_expire_minutes)

        payload = {
            "sub": subject,
            "exp": expires,
            "iat": now,
            "type": "access",
        }
        if email is not None:
            payload["email"] = email

        return jwt.encode(
            payload,
            self._settings.jwt_secret_key,
            algorithm=self._settings.jwt_algorithm,
        )

    def create_refresh_token(self, subject: str) -> str:
        """Create a new refresh token.

        Args:
            subject: Caller identity.

        Returns:
            Encoded JWT refresh token.
        """
        now = datetime.now(timezone.utc)
        expires = now + timedelta(days=self._settings.jwt_refresh_token_expire_days)

        payload = {
            "sub": subject,
            "exp": expires,
            "iat": now,
            "type": "refresh",
        }

        return jwt.encode(
            payload,
            self._settings.jwt_secret_key,
            algorithm=self._settings.jwt_algorithm,
        )

    def issue(self, subject: str, email: str | None = None) -> TokenPair:
        """Issue a fresh access/refresh pair for a caller."""
        return TokenPair(
            access_token=self.create_access_token(subject, email),
            refresh_token=self.create_refresh_token(subject),
            expires_in=self.get_token_expiry_seconds(),
        )

    def verify_token(self, token: str) -> TokenPayload:
        """Verify and decode a JWT token.

        Args:
            token: Encoded JWT token.

        Returns:
            Decoded token payload.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is invalid.
        """
        try:
            payload = jwt.decode(
                token,
                self._settings.jwt_secret_key,
                algorithms=[self._settings.jwt_algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
            return TokenPayload.model_validate(payload)

        except jwt.ExpiredSignatureError as e:
            logger.warning("Token expired", extra={"error": str(e)})
            raise TokenExpiredError() from e

        except jwt.InvalidTokenError as e:
            logger.warning("Invalid token", extra={"error": str(e)})
            raise InvalidTokenError(details={"error": str(e)}) from e

        except ValidationError as e:
            logger.warning("Token payload validation failed", extra={"error": str(e)})
            raise InvalidTokenError(
                message="Token payload validation failed",
                details={"error": str(e)},
            ) from e

    def verify_access_token(self, token: str) -> TokenPayload:
        """Verify a token and require it to be an access token."""
        payload = self.verify_token(token)
        if payload.type != "access":
            raise InvalidTokenError(
                message="Invalid token type",
                details={"expected": "access", "got": payload.type},
            )
        return payload

    def refresh(self, refresh_token: str) -> TokenPair:
        """Rotate both tokens using a valid refresh token.

        Raises:
            TokenExpiredError: If the refresh token has expired.
            InvalidTokenError: If the token is invalid or not a refresh token.
        """
        payload = self.verify_token(refresh_token)
        if payload.type != "refresh":
            raise InvalidTokenError(message="Invalid token type for refresh")

        logger.info("Tokens refreshed", extra={"subject": payload.sub})
        return self.issue(payload.sub)

    def get_token_expiry_seconds(self) -> int:
        """Get access token expiry in seconds."""
        return self._settings.jwt_access_token_expire_minutes * 60
