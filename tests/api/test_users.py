"""Tests for user endpoints."""
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.user import User


async def test_get_me_in_dev_mode_returns_dev_user(client: AsyncClient) -> None:
    """Test that /users/me returns dev user when DEV_MODE=true."""
    response = await client.get("/users/me")
    assert response.status_code == 200

    data = response.json()
    assert data["auth0_id"] == "dev|local-development-user"
    assert data["email"] == "dev@localhost"
    assert data["name"] == "Developer"
    assert data["email_verified"] is True


async def test_get_me_creates_user_on_first_request(
    client: AsyncClient,
    db_session: AsyncSession,
) -> None:
    """Test that user is created in database on first authenticated request."""
    response = await client.get("/users/me")
    assert response.status_code == 200

    result = await db_session.execute(
        select(User).where(User.auth0_id == "dev|local-development-user"),
    )
    user = result.scalar_one_or_none()
    assert user is not None
    assert str(user.id) == response.json()["id"]


async def test_get_me_returns_same_user_on_subsequent_requests(
    client: AsyncClient,
) -> None:
    """Test that the same user is returned on multiple requests."""
    first = await client.get("/users/me")
    second = await client.get("/users/me")
    assert first.json()["id"] == second.json()["id"]
