"""
SQLAlchemy adapters for the service stores.

Each store wraps one AsyncSession and delegates to ``operations``. Any
SQLAlchemy failure is reported as a RepositoryError so that services only
deal with the domain error taxonomy.
"""

import logging
from collections.abc import Iterable
from datetime import date

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.db import operations
from cardledger.models.card import Card
from cardledger.models.errors import RepositoryError
from cardledger.models.money import FullPriceGuide, PriceGuide
from cardledger.models.valuation import ValuationKey, ValuationSnapshot
from cardledger.services.ports import (
    CardCatalogStore,
    OwnershipStore,
    PriceStore,
    SnapshotStore,
)

logger = logging.getLogger(__name__)


class _SessionStore:
    def __init__(self, session: AsyncSession):
        self.session = session


class SqlOwnershipStore(_SessionStore, OwnershipStore):
    async def get_owned_cards(self, user_id: str) -> list[Card]:
        try:
            return await operations.get_owned_cards(self.session, user_id)
        except SQLAlchemyError as e:
            raise RepositoryError(f"failed to load cards of {user_id}", str(e)) from e

    async def replace_all(self, user_id: str, cards: list[Card]) -> None:
        # Runs in the caller's transaction; nothing is visible until it commits
        try:
            await operations.replace_owned_cards(self.session, user_id, cards)
        except SQLAlchemyError as e:
            raise RepositoryError(f"failed to replace cards of {user_id}", str(e)) from e

    async def distinct_users(self) -> list[str]:
        try:
            return await operations.get_distinct_users(self.session)
        except SQLAlchemyError as e:
            raise RepositoryError("failed to list users", str(e)) from e


class SqlPriceStore(_SessionStore, PriceStore):
    async def save(self, price_date: date, guides: Iterable[FullPriceGuide]) -> int:
        try:
            return await operations.save_price_guides(self.session, price_date, guides)
        except SQLAlchemyError as e:
            raise RepositoryError(f"failed to save prices for {price_date}", str(e)) from e

    async def distinct_dates(self) -> list[date]:
        try:
            return await operations.get_price_dates(self.session)
        except SQLAlchemyError as e:
            raise RepositoryError("failed to list price dates", str(e)) from e

    async def lookup(self, product_id: int, price_date: date) -> FullPriceGuide | None:
        try:
            return await operations.get_price_guide(self.session, product_id, price_date)
        except SQLAlchemyError as e:
            raise RepositoryError(
                f"failed to load price of {product_id} on {price_date}", str(e)
            ) from e


class SqlSnapshotStore(_SessionStore, SnapshotStore):
    """
    Snapshot store committing every insert on its own.

    A run aborted by a failed insert keeps the snapshots written before it.
    """

    async def existing_keys(self) -> set[ValuationKey]:
        try:
            return await operations.get_valuation_keys(self.session)
        except SQLAlchemyError as e:
            raise RepositoryError("failed to list valuations", str(e)) from e

    async def insert(self, valuation_date: date, user_id: str, total: PriceGuide) -> None:
        try:
            await operations.insert_valuation(self.session, valuation_date, user_id, total)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise RepositoryError(
                f"valuation of {user_id} on {valuation_date} already exists", str(e)
            ) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise RepositoryError(
                f"failed to store valuation of {user_id} on {valuation_date}", str(e)
            ) from e

    async def list_for_user(self, user_id: str) -> list[ValuationSnapshot]:
        try:
            return await operations.get_valuations(self.session, user_id)
        except SQLAlchemyError as e:
            raise RepositoryError(f"failed to load valuations of {user_id}", str(e)) from e


class SqlCardCatalogStore(_SessionStore, CardCatalogStore):
    async def cards_without_cardmarket_id(self) -> list[Card]:
        try:
            cards = await operations.get_cards_without_cardmarket_id(self.session)
        except SQLAlchemyError as e:
            raise RepositoryError("failed to list cards without Cardmarket id", str(e)) from e
        return [operations.card_to_model(card) for card in cards]

    async def set_cardmarket_id(self, card: Card, cardmarket_id: int) -> None:
        try:
            found = await operations.set_cardmarket_id(self.session, card.id, cardmarket_id)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise RepositoryError(f"failed to store Cardmarket id of {card.name}", str(e)) from e

        if not found:
            logger.warning("Card %s disappeared from the catalog", card.name)
