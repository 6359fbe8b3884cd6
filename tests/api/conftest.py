"""Shared fixtures for API tests."""
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from api.main import app
from core.auth import get_current_user
from db.session import get_async_session
from models.user import User


@asynccontextmanager
async def create_user2_client(
    db_session: AsyncSession,
    auth0_id: str,
    email: str,
) -> AsyncGenerator[AsyncClient]:
    """
    Create an AsyncClient acting as a second user.

    Adds the user to the test transaction and overrides get_current_user to
    return it. Restores the session override used by the main `client` fixture
    on exit, so both clients can be used within the same test.
    """
    user2 = User(auth0_id=auth0_id, email=email)
    db_session.add(user2)
    await db_session.flush()

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        yield db_session

    async def override_get_current_user() -> User:
        return user2

    previous_overrides = dict(app.dependency_overrides)
    app.dependency_overrides[get_async_session] = override_get_async_session

    @asynccontextmanager
    async def _as_user2() -> AsyncGenerator[None]:
        app.dependency_overrides[get_current_user] = override_get_current_user
        try:
            yield
        finally:
            app.dependency_overrides.pop(get_current_user, None)

    class _User2Transport(ASGITransport):
        async def handle_async_request(self, request):  # noqa: ANN001, ANN202
            async with _as_user2():
                return await super().handle_async_request(request)

    try:
        async with AsyncClient(
            transport=_User2Transport(app=app),
            base_url="http://test",
        ) as user2_client:
            yield user2_client
    finally:
        app.dependency_overrides.clear()
        app.dependency_overrides.update(previous_overrides)


# Constant for non-existent entity ID
FAKE_UUID = "00000000-0000-0000-0000-000000000000"
