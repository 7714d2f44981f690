from collections.abc import Callable
from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cardledger.db.database import get_session
from cardledger.main import app
from cardledger.models.card import Card, CardId, LanguageCode, SetCode
from cardledger.models.db import Base
from cardledger.models.errors import RepositoryError
from cardledger.models.money import FullPriceGuide, PriceGuide
from cardledger.models.valuation import ValuationKey, ValuationSnapshot
from cardledger.services.ports import OwnershipStore, PriceStore, SnapshotStore

EXPORT_HEADER = (
    "Binder Name,Binder Type,Name,Set code,Set name,Collector number,Foil,Rarity,"
    "Quantity,ManaBox ID,Scryfall ID,Purchase price,Misprint,Altered,Condition,"
    "Language,Purchase price currency"
)

ELVES_LINE = (
    "Main,binder,Llanowar Elves,FDN,Foundations,87,normal,common,3,12345,"
    "6a0d8f1e-1234-4c5d-9e8f-0a1b2c3d4e5f,0.08,false,false,near_mint,fr,EUR"
)

SHEOLDRED_LINE = (
    'Main,binder,"Sheoldred, the Apocalypse",DMU,Dominaria United,107,foil,mythic,1,'
    "67890,,45.50,false,false,near_mint,en,EUR"
)


class InMemoryOwnershipStore(OwnershipStore):
    def __init__(self) -> None:
        self.cards: dict[str, list[Card]] = {}

    async def get_owned_cards(self, user_id: str) -> list[Card]:
        return list(self.cards.get(user_id, []))

    async def replace_all(self, user_id: str, cards: list[Card]) -> None:
        self.cards[user_id] = list(cards)

    async def distinct_users(self) -> list[str]:
        return sorted(user_id for user_id, cards in self.cards.items() if cards)


class InMemoryPriceStore(PriceStore):
    def __init__(self) -> None:
        self.guides: dict[tuple[int, date], FullPriceGuide] = {}

    async def save(self, price_date: date, guides) -> int:
        count = 0
        for guide in guides:
            self.guides[(guide.product_id, price_date)] = guide
            count += 1
        return count

    async def distinct_dates(self) -> list[date]:
        return sorted({price_date for _, price_date in self.guides})

    async def lookup(self, product_id: int, price_date: date) -> FullPriceGuide | None:
        return self.guides.get((product_id, price_date))

    def add_date(self, price_date: date, *guides: FullPriceGuide) -> None:
        for guide in guides:
            self.guides[(guide.product_id, price_date)] = guide


class InMemorySnapshotStore(SnapshotStore):
    def __init__(self) -> None:
        self.snapshots: dict[ValuationKey, PriceGuide] = {}
        self.fail_on: set[ValuationKey] = set()
        self.insert_calls = 0

    async def existing_keys(self) -> set[ValuationKey]:
        return set(self.snapshots)

    async def insert(self, valuation_date: date, user_id: str, total: PriceGuide) -> None:
        self.insert_calls += 1
        key = (valuation_date, user_id)
        if key in self.fail_on:
            raise RepositoryError(f"insert of {key} failed")
        if key in self.snapshots:
            raise RepositoryError(f"valuation {key} already exists")
        self.snapshots[key] = total

    async def list_for_user(self, user_id: str) -> list[ValuationSnapshot]:
        return [
            ValuationSnapshot(date=valuation_date, user_id=owner, total=total)
            for (valuation_date, owner), total in sorted(self.snapshots.items())
            if owner == user_id
        ]


@pytest.fixture
def export_text() -> str:
    """Collection export with a non-foil and a foil card."""
    return "\n".join([EXPORT_HEADER, ELVES_LINE, SHEOLDRED_LINE])


@pytest.fixture
def make_card() -> Callable[..., Card]:
    """Factory for owned cards with sensible defaults."""

    def _make_card(
        name: str = "Llanowar Elves",
        set_code: str = "FDN",
        collector_number: str = "87",
        language: LanguageCode = LanguageCode.EN,
        foil: bool = False,
        quantity: int = 1,
        purchase_price: int = 0,
        scryfall_id: str | None = None,
        cardmarket_id: int | None = None,
        set_name: str = "Foundations",
    ) -> Card:
        return Card(
            id=CardId(
                set_code=SetCode(set_code),
                collector_number=collector_number,
                language=language,
                foil=foil,
            ),
            name=name,
            set_name=set_name,
            quantity=quantity,
            purchase_price=purchase_price,
            scryfall_id=scryfall_id,
            cardmarket_id=cardmarket_id,
        )

    return _make_card


@pytest.fixture
def ownership_store() -> InMemoryOwnershipStore:
    return InMemoryOwnershipStore()


@pytest.fixture
def price_store() -> InMemoryPriceStore:
    return InMemoryPriceStore()


@pytest.fixture
def snapshot_store() -> InMemorySnapshotStore:
    return InMemorySnapshotStore()


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory) -> AsyncSession:
    """Provide a database session for tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    """Provide an async test client with overridden database session."""

    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
