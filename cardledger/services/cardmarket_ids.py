"""
Cardmarket product id resolution.

Valuation joins owned cards with prices through the Cardmarket product id,
which the collection export does not carry. This service asks Scryfall for
the id of every known printing that still lacks one.
"""

import logging
from dataclasses import dataclass

from cardledger.models.errors import KnownError
from cardledger.services.ports import CardCatalogStore, CardmarketIdSource

logger = logging.getLogger(__name__)


@dataclass
class CardmarketIdUpdateResult:
    """Counts of a Cardmarket id update run."""

    updated: int = 0
    not_found: int = 0
    failed: int = 0


async def update_cardmarket_ids(
    catalog: CardCatalogStore, source: CardmarketIdSource
) -> CardmarketIdUpdateResult:
    """
    Resolve and store missing Cardmarket ids.

    A lookup or save failure for one card is logged and counted; the run
    continues with the next card.

    Raises:
        RepositoryError: If the cards to update cannot be listed
    """
    result = CardmarketIdUpdateResult()
    cards = await catalog.cards_without_cardmarket_id()

    logger.info("Resolving Cardmarket ids for %d cards", len(cards))

    for card in cards:
        if card.scryfall_id is None:
            result.not_found += 1
            continue

        try:
            cardmarket_id = await source.get_cardmarket_id(card.scryfall_id)
        except KnownError as e:
            logger.warning("Failed to fetch Cardmarket id for %s: %s", card.name, e)
            result.failed += 1
            continue

        if cardmarket_id is None:
            logger.debug("No Cardmarket id for %s", card.name)
            result.not_found += 1
            continue

        try:
            await catalog.set_cardmarket_id(card, cardmarket_id)
        except KnownError as e:
            logger.warning("Failed to save Cardmarket id for %s: %s", card.name, e)
            result.failed += 1
            continue

        logger.debug("Updated %s with Cardmarket id %d", card.name, cardmarket_id)
        result.updated += 1

    logger.info(
        "Cardmarket id update complete: %d updated, %d not found, %d failed",
        result.updated,
        result.not_found,
        result.failed,
    )
    return result
