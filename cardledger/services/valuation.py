"""
Incremental collection valuation.

Maintains one snapshot per (date, user) pair, where the dates are those
present in the ingested price data and the users are those owning cards.
Each run only evaluates the pairs that have no snapshot yet; a snapshot
once written is never recomputed, even if ownership or prices change later.

Valuation of a pair is an inner join of the user's cards with the price
guides of that date: cards without a product id or without a price entry
do not contribute. Missing price points inside a guide stay unknown and do
not invalidate the total (see ``cardledger.models.money``).
"""

import logging
from datetime import date

from cardledger.models.card import Card
from cardledger.models.money import PriceGuide
from cardledger.models.valuation import ValuationKey, ValuationRunResult
from cardledger.services.ports import (
    OwnershipStore,
    PriceStore,
    ProductIdResolver,
    SnapshotStore,
)

logger = logging.getLogger(__name__)


class StoredProductIdResolver(ProductIdResolver):
    """Uses the Cardmarket id already stored on the card."""

    async def resolve(self, card: Card) -> int | None:
        return card.cardmarket_id


class ValuationScheduler:
    """
    Computes and persists missing valuation snapshots.

    Pairs are processed one at a time, each evaluated then inserted before
    the next begins. A failed insert aborts the run; snapshots inserted
    earlier in the same run are kept.
    """

    def __init__(
        self,
        ownership: OwnershipStore,
        prices: PriceStore,
        snapshots: SnapshotStore,
        resolver: ProductIdResolver | None = None,
    ):
        self.ownership = ownership
        self.prices = prices
        self.snapshots = snapshots
        self.resolver = resolver or StoredProductIdResolver()

    async def pending_pairs(self) -> set[ValuationKey]:
        """Every (price date, user) pair that has no snapshot yet."""
        dates = await self.prices.distinct_dates()
        users = await self.ownership.distinct_users()
        existing = await self.snapshots.existing_keys()

        required = {(price_date, user_id) for price_date in dates for user_id in users}
        return required - existing

    async def evaluate(self, valuation_date: date, user_id: str) -> PriceGuide:
        """
        Total value of a user's cards at the prices of one date.

        Returns the empty guide when nothing the user owns is priced.
        """
        cards = await self.ownership.get_owned_cards(user_id)

        total = PriceGuide.empty()
        skipped = 0

        for card in cards:
            product_id = await self.resolver.resolve(card)
            if product_id is None:
                skipped += 1
                continue

            full_guide = await self.prices.lookup(product_id, valuation_date)
            if full_guide is None:
                skipped += 1
                continue

            total = total.combine(full_guide.for_card(card.foil).scale(card.quantity))

        if skipped:
            logger.debug(
                "Skipped %d of %d cards without price for %s on %s",
                skipped,
                len(cards),
                user_id,
                valuation_date,
            )

        return total

    async def run(self) -> ValuationRunResult:
        """
        Evaluate and persist every pending pair.

        Raises:
            RepositoryError: If a snapshot cannot be inserted. Remaining
                pairs are not attempted.
        """
        pending = sorted(await self.pending_pairs())
        result = ValuationRunResult(pending=len(pending))

        logger.info("Valuation run: %d pending (date, user) pairs", len(pending))

        for valuation_date, user_id in pending:
            total = await self.evaluate(valuation_date, user_id)
            await self.snapshots.insert(valuation_date, user_id, total)
            result.written.append((valuation_date, user_id))
            logger.debug("Stored valuation for %s on %s", user_id, valuation_date)

        logger.info("Valuation run complete: %d snapshots written", result.written_count)
        return result
