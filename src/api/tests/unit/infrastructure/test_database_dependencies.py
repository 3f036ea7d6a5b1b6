"""Unit tests for database dependency injection."""

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from infrastructure.database.dependencies import (
    close_database_connections,
    get_engine,
    get_session,
)


@pytest.mark.asyncio
async def test_get_engine_is_singleton():
    """The engine is created once and reused."""
    engine = get_engine()

    assert isinstance(engine, AsyncEngine)
    assert engine is get_engine()

    await close_database_connections()


@pytest.mark.asyncio
async def test_get_session_yields_session():
    """get_session yields an AsyncSession bound to the engine."""
    async for session in get_session():
        assert isinstance(session, AsyncSession)
        assert session.bind is not None

    await close_database_connections()


@pytest.mark.asyncio
async def test_close_allows_reinitialization():
    """Closing connections resets the engine singleton."""
    engine_1 = get_engine()
    await close_database_connections()
    engine_2 = get_engine()

    assert engine_1 is not engine_2

    await close_database_connections()
