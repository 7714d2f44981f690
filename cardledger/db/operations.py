"""
Database CRUD operations.

Provides async functions for reading and writing card ownership, the
shared card catalog, Cardmarket prices and valuation snapshots.
"""

from collections.abc import Iterable
from datetime import date
from itertools import islice
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cardledger.config import PRICE_INSERT_CHUNK_SIZE
from cardledger.models.card import Card, CardId, LanguageCode, SetCode
from cardledger.models.db import (
    CardDB,
    CardmarketPriceDB,
    CardQuantityDB,
    CollectionValuationDB,
    SetNameDB,
)
from cardledger.models.money import PRICE_FIELDS, FullPriceGuide, PriceGuide
from cardledger.models.valuation import ValuationKey, ValuationSnapshot

# --- Set Name Operations ---


async def get_set_name(session: AsyncSession, set_code: str) -> SetNameDB | None:
    """Get a set by code, None if it was never imported."""
    return await session.get(SetNameDB, set_code)


async def save_set_name(session: AsyncSession, set_code: str, name: str) -> SetNameDB:
    """Insert a set or update its display name."""
    existing = await get_set_name(session, set_code)
    if existing:
        existing.name = name
        await session.flush()
        return existing

    set_name = SetNameDB(set_code=set_code, name=name)
    session.add(set_name)
    await session.flush()
    return set_name


# --- Card Catalog Operations ---


async def get_card(session: AsyncSession, card_id: CardId) -> CardDB | None:
    """Get a printing by its identity."""
    result = await session.execute(
        select(CardDB).where(
            CardDB.set_code == str(card_id.set_code),
            CardDB.collector_number == card_id.collector_number,
            CardDB.language_code == str(card_id.language),
            CardDB.foil == card_id.foil,
        )
    )
    return result.scalar_one_or_none()


async def get_or_create_card(session: AsyncSession, card: Card) -> tuple[CardDB, bool]:
    """
    Get the catalog entry of a printing, creating it if needed.

    An existing entry keeps its Cardmarket id; a missing Scryfall id is
    filled in from the imported card.

    Returns:
        Tuple of (catalog entry, created) where created is True if new.
    """
    existing = await get_card(session, card.id)
    if existing:
        if existing.scryfall_id is None and card.scryfall_id is not None:
            existing.scryfall_id = card.scryfall_id
        return existing, False

    if await get_set_name(session, str(card.id.set_code)) is None:
        await save_set_name(session, str(card.id.set_code), card.set_name)

    db_card = CardDB(
        set_code=str(card.id.set_code),
        collector_number=card.id.collector_number,
        language_code=str(card.id.language),
        foil=card.id.foil,
        name=card.name,
        scryfall_id=card.scryfall_id,
        cardmarket_id=card.cardmarket_id,
    )
    session.add(db_card)
    await session.flush()
    return db_card, True


async def get_cards_without_cardmarket_id(session: AsyncSession) -> list[CardDB]:
    """Catalog entries that have a Scryfall id but no Cardmarket id."""
    result = await session.execute(
        select(CardDB)
        .where(CardDB.cardmarket_id.is_(None), CardDB.scryfall_id.is_not(None))
        .options(selectinload(CardDB.set_name))
        .order_by(CardDB.id)
    )
    return list(result.scalars().all())


async def set_cardmarket_id(session: AsyncSession, card_id: CardId, cardmarket_id: int) -> bool:
    """
    Store the Cardmarket id of a printing.

    Returns False if the printing is not in the catalog.
    """
    db_card = await get_card(session, card_id)
    if not db_card:
        return False

    db_card.cardmarket_id = cardmarket_id
    await session.flush()
    return True


def card_to_model(db_card: CardDB, quantity: int = 0, purchase_price: int = 0) -> Card:
    """Convert a catalog entry (plus ownership figures) to a domain model."""
    return Card(
        id=CardId(
            set_code=SetCode(db_card.set_code),
            collector_number=db_card.collector_number,
            language=LanguageCode.parse(db_card.language_code),
            foil=db_card.foil,
        ),
        name=db_card.name,
        set_name=db_card.set_name.name if db_card.set_name else "",
        quantity=quantity,
        purchase_price=purchase_price,
        scryfall_id=db_card.scryfall_id,
        cardmarket_id=db_card.cardmarket_id,
    )


# --- Ownership Operations ---


async def get_owned_cards(session: AsyncSession, user_id: str) -> list[Card]:
    """All cards owned by a user, in insertion order."""
    result = await session.execute(
        select(CardQuantityDB)
        .where(CardQuantityDB.user_id == user_id)
        .options(selectinload(CardQuantityDB.card).selectinload(CardDB.set_name))
        .order_by(CardQuantityDB.id)
    )
    return [
        card_to_model(row.card, quantity=row.quantity, purchase_price=row.purchase_price)
        for row in result.scalars().all()
    ]


async def delete_owned_cards(session: AsyncSession, user_id: str) -> int:
    """
    Delete every ownership record of a user.

    Catalog entries are kept. Returns the number of deleted records.
    """
    result = await session.execute(delete(CardQuantityDB).where(CardQuantityDB.user_id == user_id))
    # rowcount is available on DELETE results; type stubs incomplete for async
    return int(result.rowcount)  # type: ignore[attr-defined]


async def save_owned_card(session: AsyncSession, user_id: str, card: Card) -> CardQuantityDB:
    """
    Record that a user owns a card.

    If the user already has a record for the printing (the same printing
    listed twice in one export), the later line wins.
    """
    db_card, _ = await get_or_create_card(session, card)

    result = await session.execute(
        select(CardQuantityDB).where(
            CardQuantityDB.user_id == user_id,
            CardQuantityDB.card_id == db_card.id,
        )
    )
    existing = result.scalar_one_or_none()
    if existing:
        existing.quantity = card.quantity
        existing.purchase_price = card.purchase_price
        await session.flush()
        return existing

    ownership = CardQuantityDB(
        user_id=user_id,
        card_id=db_card.id,
        quantity=card.quantity,
        purchase_price=card.purchase_price,
    )
    session.add(ownership)
    await session.flush()
    return ownership


async def replace_owned_cards(session: AsyncSession, user_id: str, cards: list[Card]) -> int:
    """
    Replace a user's collection with new card data.

    Deletes existing ownership records, then saves the cards one by one.
    Returns the number of cards saved.
    """
    await delete_owned_cards(session, user_id)

    for card in cards:
        await save_owned_card(session, user_id, card)

    return len(cards)


async def get_distinct_users(session: AsyncSession) -> list[str]:
    """Every user owning at least one card."""
    result = await session.execute(
        select(CardQuantityDB.user_id).distinct().order_by(CardQuantityDB.user_id)
    )
    return list(result.scalars().all())


# --- Price Operations ---


def _price_row(price_date: date, guide: FullPriceGuide) -> dict[str, Any]:
    row: dict[str, Any] = {"product_id": guide.product_id, "price_date": price_date}
    row.update(guide.normal.to_cents())
    row.update({f"{name}_foil": cents for name, cents in guide.foil.to_cents().items()})
    return row


def _chunks(rows: Iterable[dict[str, Any]], size: int) -> Iterable[list[dict[str, Any]]]:
    iterator = iter(rows)
    while chunk := list(islice(iterator, size)):
        yield chunk


async def save_price_guides(
    session: AsyncSession,
    price_date: date,
    guides: Iterable[FullPriceGuide],
    chunk_size: int = PRICE_INSERT_CHUNK_SIZE,
) -> int:
    """
    Insert or update the price guides of one date.

    Rows are written in chunks; a (product, date) that already exists is
    overwritten. Returns the number of guides written.
    """
    dialect = session.get_bind().dialect.name
    insert = pg_insert if dialect == "postgresql" else sqlite_insert
    price_columns = [*PRICE_FIELDS, *(f"{name}_foil" for name in PRICE_FIELDS)]

    count = 0
    for chunk in _chunks((_price_row(price_date, guide) for guide in guides), chunk_size):
        stmt = insert(CardmarketPriceDB).values(chunk)
        stmt = stmt.on_conflict_do_update(
            index_elements=["product_id", "price_date"],
            set_={column: getattr(stmt.excluded, column) for column in price_columns},
        )
        await session.execute(stmt)
        count += len(chunk)

    await session.flush()
    return count


def price_to_model(row: CardmarketPriceDB) -> FullPriceGuide:
    """Convert a database price row to a domain model."""
    return FullPriceGuide(
        product_id=row.product_id,
        normal=PriceGuide.from_cents(**{name: getattr(row, name) for name in PRICE_FIELDS}),
        foil=PriceGuide.from_cents(
            **{name: getattr(row, f"{name}_foil") for name in PRICE_FIELDS}
        ),
    )


async def get_price_guide(
    session: AsyncSession, product_id: int, price_date: date
) -> FullPriceGuide | None:
    """Price guide of a product on a date, None if not ingested."""
    row = await session.get(CardmarketPriceDB, (product_id, price_date))
    return price_to_model(row) if row else None


async def get_price_dates(session: AsyncSession) -> list[date]:
    """Every date with ingested prices, oldest first."""
    result = await session.execute(
        select(CardmarketPriceDB.price_date).distinct().order_by(CardmarketPriceDB.price_date)
    )
    return list(result.scalars().all())


# --- Valuation Operations ---


async def get_valuation_keys(session: AsyncSession) -> set[ValuationKey]:
    """(date, user_id) of every stored snapshot."""
    result = await session.execute(
        select(CollectionValuationDB.valuation_date, CollectionValuationDB.user_id)
    )
    return {(row.valuation_date, row.user_id) for row in result.all()}


async def insert_valuation(
    session: AsyncSession, valuation_date: date, user_id: str, total: PriceGuide
) -> CollectionValuationDB:
    """
    Insert a snapshot.

    Raises IntegrityError if a snapshot already exists for this pair.
    """
    valuation = CollectionValuationDB(
        valuation_date=valuation_date,
        user_id=user_id,
        **total.to_cents(),
    )
    session.add(valuation)
    await session.flush()
    return valuation


def valuation_to_model(row: CollectionValuationDB) -> ValuationSnapshot:
    """Convert a database snapshot to a domain model."""
    return ValuationSnapshot(
        date=row.valuation_date,
        user_id=row.user_id,
        total=PriceGuide.from_cents(**{name: getattr(row, name) for name in PRICE_FIELDS}),
    )


async def get_valuations(session: AsyncSession, user_id: str) -> list[ValuationSnapshot]:
    """A user's snapshots, oldest first."""
    result = await session.execute(
        select(CollectionValuationDB)
        .where(CollectionValuationDB.user_id == user_id)
        .order_by(CollectionValuationDB.valuation_date)
    )
    return [valuation_to_model(row) for row in result.scalars().all()]
