"""Tests for database connection and session handling."""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from db.session import get_async_session


async def test_database_connection(db_session: AsyncSession) -> None:
    """Test that we can connect to the database."""
    result = await db_session.execute(text("SELECT 1"))
    assert result.scalar() == 1


def _fake_factory(session: MagicMock) -> MagicMock:
    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=session)
    context.__aexit__ = AsyncMock(return_value=None)
    return MagicMock(return_value=MagicMock(return_value=context))


async def test_get_async_session_commits_at_end() -> None:
    """The request session commits once after the handler finishes."""
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()

    with patch("db.session.get_session_factory", _fake_factory(session)):
        generator = get_async_session()
        assert await generator.__anext__() is session
        with pytest.raises(StopAsyncIteration):
            await generator.__anext__()

    session.commit.assert_awaited_once()
    session.rollback.assert_not_awaited()


async def test_get_async_session_rolls_back_on_error() -> None:
    """Exceptions raised by the handler roll back and propagate."""
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()

    with patch("db.session.get_session_factory", _fake_factory(session)):
        generator = get_async_session()
        await generator.__anext__()
        with pytest.raises(RuntimeError, match="boom"):
            await generator.athrow(RuntimeError("boom"))

    session.rollback.assert_awaited_once()
    session.commit.assert_not_awaited()
