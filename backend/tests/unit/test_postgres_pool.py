import pytest

from app.infra import postgres


@pytest.mark.asyncio
async def test_get_pool_returns_installed_pool():
    pool = object()
    postgres.set_pool(pool)
    assert await postgres.get_pool() is pool


@pytest.mark.asyncio
async def test_get_pool_without_pool_fails_fast():
    with pytest.raises(AssertionError):
        await postgres.get_pool()
