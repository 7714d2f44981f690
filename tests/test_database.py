"""Tests for session management."""

from datetime import date

import pytest

from cardledger.db.database import build_engine, session_scope
from cardledger.db.operations import get_valuation_keys, insert_valuation
from cardledger.models.money import PriceGuide

DAY = date(2025, 12, 25)


@pytest.fixture
def scoped_sessions(session_factory, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr("cardledger.db.database.async_session_factory", session_factory)
    return session_factory


class TestSessionScope:
    async def test_commits_on_success(self, scoped_sessions) -> None:
        async with session_scope() as session:
            await insert_valuation(session, DAY, "u1", PriceGuide.empty())

        async with scoped_sessions() as other:
            assert await get_valuation_keys(other) == {(DAY, "u1")}

    async def test_rolls_back_on_error(self, scoped_sessions) -> None:
        with pytest.raises(RuntimeError):
            async with session_scope() as session:
                await insert_valuation(session, DAY, "u1", PriceGuide.empty())
                raise RuntimeError("job failed")

        async with scoped_sessions() as other:
            assert await get_valuation_keys(other) == set()


class TestBuildEngine:
    async def test_explicit_url(self) -> None:
        engine = build_engine("sqlite+aiosqlite:///:memory:")

        assert engine.dialect.name == "sqlite"
        await engine.dispose()
