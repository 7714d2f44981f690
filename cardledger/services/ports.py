"""
Store and collaborator contracts used by the services.

Each contract is an abstract base class; the SQLAlchemy adapters live in
``cardledger.db.stores`` and tests substitute in-memory doubles. Services
receive their collaborators at construction and never build them.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import date

from cardledger.models.card import Card
from cardledger.models.money import FullPriceGuide, PriceGuide
from cardledger.models.valuation import ValuationKey, ValuationSnapshot


class OwnershipStore(ABC):
    """Cards owned by each user. Ownership is not versioned by date."""

    @abstractmethod
    async def get_owned_cards(self, user_id: str) -> list[Card]: ...

    @abstractmethod
    async def replace_all(self, user_id: str, cards: list[Card]) -> None:
        """Delete every card owned by the user, then insert the given ones."""

    @abstractmethod
    async def distinct_users(self) -> list[str]: ...


class PriceStore(ABC):
    """Dated Cardmarket price guides keyed by product id."""

    @abstractmethod
    async def save(self, price_date: date, guides: Iterable[FullPriceGuide]) -> int:
        """Store a dated batch, overwriting existing (product, date) rows. Returns the count."""

    @abstractmethod
    async def distinct_dates(self) -> list[date]: ...

    @abstractmethod
    async def lookup(self, product_id: int, price_date: date) -> FullPriceGuide | None: ...


class SnapshotStore(ABC):
    """Append-only valuation snapshots, unique by (date, user_id)."""

    @abstractmethod
    async def existing_keys(self) -> set[ValuationKey]: ...

    @abstractmethod
    async def insert(self, valuation_date: date, user_id: str, total: PriceGuide) -> None:
        """
        Persist one snapshot.

        Raises RepositoryError if the key already exists; existing data is
        left untouched.
        """

    @abstractmethod
    async def list_for_user(self, user_id: str) -> list[ValuationSnapshot]: ...


class ProductIdResolver(ABC):
    """Maps an owned card to its Cardmarket product id."""

    @abstractmethod
    async def resolve(self, card: Card) -> int | None: ...


class CardCatalogStore(ABC):
    """Known printings, shared by all users."""

    @abstractmethod
    async def cards_without_cardmarket_id(self) -> list[Card]:
        """Printings that have a Scryfall id but no Cardmarket id yet."""

    @abstractmethod
    async def set_cardmarket_id(self, card: Card, cardmarket_id: int) -> None: ...


class CardmarketIdSource(ABC):
    """External lookup of Cardmarket product ids (Scryfall)."""

    @abstractmethod
    async def get_cardmarket_id(self, scryfall_id: str) -> int | None: ...
