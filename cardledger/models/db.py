"""
SQLAlchemy ORM models for persistent storage.

Models mirror the dataclass models but add database persistence.
"""

from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class SetNameDB(Base):
    """Display name of a set, registered on first import."""

    __tablename__ = "set_names"

    set_code: Mapped[str] = mapped_column(String(8), primary_key=True)
    name: Mapped[str] = mapped_column(String(255))

    def __repr__(self) -> str:
        return f"<SetNameDB(code={self.set_code}, name={self.name})>"


class CardDB(Base):
    """
    A printing known to the system, shared by all users.

    Holds the identifiers needed to join a printing with market prices.
    """

    __tablename__ = "cards"
    __table_args__ = (
        UniqueConstraint(
            "set_code", "collector_number", "language_code", "foil", name="uq_card_printing"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    set_code: Mapped[str] = mapped_column(String(8), ForeignKey("set_names.set_code"), index=True)
    collector_number: Mapped[str] = mapped_column(String(16))
    language_code: Mapped[str] = mapped_column(String(2))
    foil: Mapped[bool] = mapped_column(Boolean, default=False)
    name: Mapped[str] = mapped_column(String(255))
    scryfall_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    cardmarket_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)

    set_name: Mapped["SetNameDB"] = relationship()

    def __repr__(self) -> str:
        return (
            f"<CardDB(set={self.set_code}, number={self.collector_number}, "
            f"lang={self.language_code}, foil={self.foil})>"
        )


class CardQuantityDB(Base):
    """
    Individual card ownership record.

    Tracks how many copies of a printing a user owns and what they paid.
    """

    __tablename__ = "card_quantities"
    __table_args__ = (UniqueConstraint("user_id", "card_id", name="uq_user_card"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    card_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("cards.id", ondelete="CASCADE"), index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    # Purchase price in cents
    purchase_price: Mapped[int] = mapped_column(Integer, default=0)

    card: Mapped["CardDB"] = relationship()

    def __repr__(self) -> str:
        return f"<CardQuantityDB(user={self.user_id}, card={self.card_id}, qty={self.quantity})>"


class CardmarketPriceDB(Base):
    """
    Price guide of one Cardmarket product on one date.

    All prices are in cents; NULL means Cardmarket had no quote.
    """

    __tablename__ = "cardmarket_prices"

    product_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    price_date: Mapped[date] = mapped_column(Date, primary_key=True, index=True)

    low: Mapped[int | None] = mapped_column(Integer, nullable=True)
    avg: Mapped[int | None] = mapped_column(Integer, nullable=True)
    trend: Mapped[int | None] = mapped_column(Integer, nullable=True)
    avg1: Mapped[int | None] = mapped_column(Integer, nullable=True)
    avg7: Mapped[int | None] = mapped_column(Integer, nullable=True)
    avg30: Mapped[int | None] = mapped_column(Integer, nullable=True)

    low_foil: Mapped[int | None] = mapped_column(Integer, nullable=True)
    avg_foil: Mapped[int | None] = mapped_column(Integer, nullable=True)
    trend_foil: Mapped[int | None] = mapped_column(Integer, nullable=True)
    avg1_foil: Mapped[int | None] = mapped_column(Integer, nullable=True)
    avg7_foil: Mapped[int | None] = mapped_column(Integer, nullable=True)
    avg30_foil: Mapped[int | None] = mapped_column(Integer, nullable=True)

    def __repr__(self) -> str:
        return f"<CardmarketPriceDB(product={self.product_id}, date={self.price_date})>"


class CollectionValuationDB(Base):
    """
    Valuation snapshot of one user's collection on one date.

    The composite primary key makes a second insert for the same pair fail.
    """

    __tablename__ = "collection_valuations"

    valuation_date: Mapped[date] = mapped_column(Date, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)

    low: Mapped[int | None] = mapped_column(Integer, nullable=True)
    avg: Mapped[int | None] = mapped_column(Integer, nullable=True)
    trend: Mapped[int | None] = mapped_column(Integer, nullable=True)
    avg1: Mapped[int | None] = mapped_column(Integer, nullable=True)
    avg7: Mapped[int | None] = mapped_column(Integer, nullable=True)
    avg30: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<CollectionValuationDB(date={self.valuation_date}, user={self.user_id})>"
