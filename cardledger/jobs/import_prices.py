"""
Scheduled job to import the daily Cardmarket price guide.

Cardmarket publishes one guide per day; run this once a day, before
update_valuations.
"""

import asyncio
import logging

from cardledger.db.database import session_scope
from cardledger.db.stores import SqlPriceStore
from cardledger.scrapers.cardmarket import CardmarketClient
from cardledger.services.price_import import PriceImportResult, import_current_prices

logger = logging.getLogger(__name__)


async def run_price_import() -> PriceImportResult:
    """Fetch the current price guide and store it in one transaction."""
    async with session_scope() as session:
        result = await import_current_prices(CardmarketClient(), SqlPriceStore(session))

    logger.info("Stored %d price guides for %s", result.count, result.price_date)
    return result


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_price_import())


if __name__ == "__main__":
    main()
