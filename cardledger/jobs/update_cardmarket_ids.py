"""
Scheduled job to resolve Cardmarket product ids.

Newly imported printings only carry a Scryfall id; this job asks Scryfall
for the matching Cardmarket id so that they can be valued.
"""

import asyncio
import logging

from cardledger.db.database import session_scope
from cardledger.db.stores import SqlCardCatalogStore
from cardledger.scrapers.scryfall import ScryfallClient
from cardledger.services.cardmarket_ids import CardmarketIdUpdateResult, update_cardmarket_ids

logger = logging.getLogger(__name__)


async def run_cardmarket_id_update() -> CardmarketIdUpdateResult:
    """Resolve every missing Cardmarket id."""
    async with session_scope() as session, ScryfallClient() as scryfall:
        return await update_cardmarket_ids(SqlCardCatalogStore(session), scryfall)


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    result = asyncio.run(run_cardmarket_id_update())

    logger.info("Cardmarket ids resolved: %d", result.updated)


if __name__ == "__main__":
    main()
