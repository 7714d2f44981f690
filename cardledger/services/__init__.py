"""
CardLedger services.

Business logic for collection import, price ingestion and valuation.
"""

from cardledger.services.cardmarket_ids import CardmarketIdUpdateResult, update_cardmarket_ids
from cardledger.services.collection_import import import_collection
from cardledger.services.ports import (
    CardCatalogStore,
    CardmarketIdSource,
    OwnershipStore,
    PriceStore,
    ProductIdResolver,
    SnapshotStore,
)
from cardledger.services.price_import import PriceImportResult, import_current_prices
from cardledger.services.rate_limit import AsyncRateLimiter
from cardledger.services.valuation import StoredProductIdResolver, ValuationScheduler

__all__ = [
    "AsyncRateLimiter",
    "CardCatalogStore",
    "CardmarketIdSource",
    "CardmarketIdUpdateResult",
    "OwnershipStore",
    "PriceImportResult",
    "PriceStore",
    "ProductIdResolver",
    "SnapshotStore",
    "StoredProductIdResolver",
    "ValuationScheduler",
    "import_collection",
    "import_current_prices",
    "update_cardmarket_ids",
]
