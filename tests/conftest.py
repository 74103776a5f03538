"""Shared fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient

from quotes_api.main import app
from quotes_api.services.quotes import get_quote_service
from quotes_api.stores.likes import LikeStore
from quotes_api.stores.postgres import close_db, create_tables, init_db


@pytest.fixture
async def like_store(tmp_path):
    """LikeStore backed by a throwaway SQLite file."""
    await init_db(f"sqlite+aiosqlite:///{tmp_path / 'quotes.db'}")
    await create_tables()
    try:
        yield LikeStore()
    finally:
        await close_db()


@pytest.fixture
async def client():
    """Create test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.pop(get_quote_service, None)
