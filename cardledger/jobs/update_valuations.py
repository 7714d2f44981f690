"""
Scheduled job to compute missing collection valuations.

Writes one snapshot per (price date, user) pair that has none yet. Safe to
run repeatedly; a run with nothing pending writes nothing.
"""

import asyncio
import logging

from cardledger.db.database import session_scope
from cardledger.db.stores import SqlOwnershipStore, SqlPriceStore, SqlSnapshotStore
from cardledger.models.valuation import ValuationRunResult
from cardledger.services.valuation import ValuationScheduler

logger = logging.getLogger(__name__)


async def run_valuation_update() -> ValuationRunResult:
    """Run the valuation scheduler once."""
    async with session_scope() as session:
        scheduler = ValuationScheduler(
            ownership=SqlOwnershipStore(session),
            prices=SqlPriceStore(session),
            snapshots=SqlSnapshotStore(session),
        )
        return await scheduler.run()


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    result = asyncio.run(run_valuation_update())

    logger.info("Wrote %d of %d pending valuations", result.written_count, result.pending)


if __name__ == "__main__":
    main()
