"""
Price import.

Fetches the current Cardmarket price guide and stores it under the date
the guide was published.
"""

import logging
from dataclasses import dataclass
from datetime import date

from cardledger.scrapers.cardmarket import CardmarketClient
from cardledger.services.ports import PriceStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PriceImportResult:
    """Date of the imported guide and number of products stored."""

    price_date: date
    count: int


async def import_current_prices(client: CardmarketClient, store: PriceStore) -> PriceImportResult:
    """
    Fetch the current price guide and save it.

    Raises:
        ExternalServiceError: If the guide cannot be fetched or decoded
        RepositoryError: If the store fails
    """
    price_date, guides = await client.fetch_price_guides()
    logger.info("Importing %d price guides for %s", len(guides), price_date)

    count = await store.save(price_date, guides)
    return PriceImportResult(price_date=price_date, count=count)
