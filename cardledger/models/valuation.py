from dataclasses import dataclass, field
from datetime import date

from cardledger.models.money import PriceGuide

# (valuation date, user id)
ValuationKey = tuple[date, str]


@dataclass(frozen=True, slots=True)
class ValuationSnapshot:
    """
    Total market value of one user's collection on one date.

    Written once per (date, user_id) and never recomputed.
    """

    date: date
    user_id: str
    total: PriceGuide = field(default_factory=PriceGuide.empty)

    @property
    def key(self) -> ValuationKey:
        return (self.date, self.user_id)


@dataclass
class ValuationRunResult:
    """Outcome of one scheduler run."""

    pending: int = 0
    written: list[ValuationKey] = field(default_factory=list)

    @property
    def written_count(self) -> int:
        return len(self.written)
