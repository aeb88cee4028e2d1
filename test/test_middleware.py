"""
Tests for the bearer-token authentication dependency.
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi import status
from httpx import AsyncClient

from contactbook.config import Settings


@pytest.fixture
def expired_access_token(test_settings: Settings) -> str:
    now = datetime.now(timezone.utc)
    return jwt.encode(
        {
            "sub": "user-123",
            "exp": now - timedelta(minutes=1),
            "iat": now - timedelta(minutes=61),
            "type": "access",
        },
        test_settings.jwt_secret_key,
        algorithm=test_settings.jwt_algorithm,
    )


class TestAuthMiddleware:
    """Tests for authentication middleware."""

    async def test_protected_endpoint_without_token(self, client: AsyncClient) -> None:
        """Test that protected endpoints require authentication."""
        response = await client.delete("/api/contact/1")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"]["code"] == "MISSING_CREDENTIALS"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    async def test_protected_endpoint_with_valid_token(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
    ) -> None:
        """Test that valid tokens pass through to the handler."""
        response = await client.delete("/api/contact/1", headers=auth_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    async def test_protected_endpoint_with_expired_token(
        self,
        client: AsyncClient,
        expired_access_token: str,
    ) -> None:
        """Test that expired tokens are rejected."""
        response = await client.delete(
            "/api/contact/1",
            headers={"Authorization": f"Bearer {expired_access_token}"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"]["code"] == "TOKEN_EXPIRED"

    async def test_protected_endpoint_with_foreign_signature(
        self,
        client: AsyncClient,
    ) -> None:
        """Test that tokens signed with another key are rejected."""
        token = jwt.encode(
            {
                "sub": "user-123",
                "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
                "iat": datetime.now(timezone.utc),
                "type": "access",
            },
            "some-other-secret",
            algorithm="HS256",
        )

        response = await client.delete(
            "/api/contact/1",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"]["code"] == "INVALID_TOKEN"

    async def test_public_reads_need_no_token(self, client: AsyncClient) -> None:
        response = await client.get("/api/contact")

        assert response.status_code == status.HTTP_200_OK
