"""
Money model for partially-known market prices.

A ``Money`` value is either a known amount of cents or unknown (no quote
available). Unknown is not zero: it is the identity of ``combine``, so a
missing quote never contributes to a total, while a total built only from
missing quotes stays unknown instead of reading as 0.

``PriceGuide`` groups the six price points Cardmarket publishes for one
printing and lifts both operations field by field.
"""

from collections.abc import Iterable
from dataclasses import dataclass, fields
from decimal import ROUND_HALF_UP, Decimal
from functools import reduce

CENTS_PER_EURO = 100

PRICE_FIELDS = ("low", "avg", "trend", "avg1", "avg7", "avg30")


def euros_to_cents(amount: Decimal) -> int:
    """Convert a euro amount to cents, rounding half away from zero."""
    return int((amount * CENTS_PER_EURO).quantize(Decimal(1), rounding=ROUND_HALF_UP))


@dataclass(frozen=True, slots=True)
class Money:
    """
    A nullable amount of cents.

    Attributes:
        cents: Non-negative amount in cents, or None when unknown
    """

    cents: int | None = None

    def __post_init__(self) -> None:
        if self.cents is not None and self.cents < 0:
            raise ValueError(f"Money cannot be negative (got {self.cents})")

    @classmethod
    def unknown(cls) -> "Money":
        return cls(None)

    @classmethod
    def known(cls, cents: int) -> "Money":
        return cls(cents)

    @classmethod
    def from_euros(cls, value: float | Decimal | None) -> "Money":
        """
        Build Money from an optional euro amount.

        Floats go through their shortest decimal representation so that
        0.29 becomes 29 cents rather than 28.999... truncated.
        """
        if value is None:
            return cls.unknown()
        return cls(euros_to_cents(Decimal(str(value))))

    @property
    def is_known(self) -> bool:
        return self.cents is not None

    def combine(self, other: "Money") -> "Money":
        """Add two amounts; unknown is the identity."""
        if self.cents is None:
            return other
        if other.cents is None:
            return self
        return Money(self.cents + other.cents)

    def scale(self, quantity: int) -> "Money":
        """Multiply by a quantity; unknown stays unknown, even for 0."""
        if quantity < 0:
            raise ValueError(f"Quantity cannot be negative (got {quantity})")
        if self.cents is None:
            return self
        return Money(self.cents * quantity)

    def __add__(self, other: "Money") -> "Money":
        return self.combine(other)

    def __mul__(self, quantity: int) -> "Money":
        return self.scale(quantity)

    def __str__(self) -> str:
        if self.cents is None:
            return "unknown"
        return f"{self.cents / CENTS_PER_EURO:.2f}"


def combine(a: Money, b: Money) -> Money:
    """Commutative, associative addition of two Money values."""
    return a.combine(b)


def scale(a: Money, quantity: int) -> Money:
    """Scale a Money value by a non-negative quantity."""
    return a.scale(quantity)


@dataclass(frozen=True, slots=True)
class PriceGuide:
    """
    Six independent price points for one printing on one date.

    avg1, avg7 and avg30 are the 1, 7 and 30 day averages.
    """

    low: Money = Money()
    avg: Money = Money()
    trend: Money = Money()
    avg1: Money = Money()
    avg7: Money = Money()
    avg30: Money = Money()

    @classmethod
    def empty(cls) -> "PriceGuide":
        """The all-unknown identity of combine."""
        return cls()

    @classmethod
    def from_euros(
        cls,
        low: float | None = None,
        avg: float | None = None,
        trend: float | None = None,
        avg1: float | None = None,
        avg7: float | None = None,
        avg30: float | None = None,
    ) -> "PriceGuide":
        return cls(
            low=Money.from_euros(low),
            avg=Money.from_euros(avg),
            trend=Money.from_euros(trend),
            avg1=Money.from_euros(avg1),
            avg7=Money.from_euros(avg7),
            avg30=Money.from_euros(avg30),
        )

    @classmethod
    def from_cents(cls, **cents: int | None) -> "PriceGuide":
        """Build from raw cent columns, e.g. ``from_cents(low=100, trend=None)``."""
        return cls(**{name: Money(cents.get(name)) for name in PRICE_FIELDS})

    def to_cents(self) -> dict[str, int | None]:
        return {f.name: getattr(self, f.name).cents for f in fields(self)}

    def combine(self, other: "PriceGuide") -> "PriceGuide":
        return PriceGuide(
            **{f.name: getattr(self, f.name).combine(getattr(other, f.name)) for f in fields(self)}
        )

    def scale(self, quantity: int) -> "PriceGuide":
        return PriceGuide(**{f.name: getattr(self, f.name).scale(quantity) for f in fields(self)})

    def __add__(self, other: "PriceGuide") -> "PriceGuide":
        return self.combine(other)

    def __mul__(self, quantity: int) -> "PriceGuide":
        return self.scale(quantity)


def sum_price_guides(guides: Iterable[PriceGuide]) -> PriceGuide:
    """Fold price guides with combine, starting from the empty guide."""
    return reduce(PriceGuide.combine, guides, PriceGuide.empty())


@dataclass(frozen=True, slots=True)
class FullPriceGuide:
    """
    Normal and foil price guides of one catalog product on one date.

    Attributes:
        product_id: Cardmarket product identifier (idProduct)
        normal: Prices of the non-foil printing
        foil: Prices of the foil printing
    """

    product_id: int
    normal: PriceGuide
    foil: PriceGuide

    def for_card(self, foil: bool) -> PriceGuide:
        """Select the sub-guide matching a card's foil flag."""
        return self.foil if foil else self.normal
