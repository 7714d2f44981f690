from cardledger.api.cards import router as cards_router
from cardledger.api.collection import router as collection_router
from cardledger.api.health import router as health_router
from cardledger.api.prices import router as prices_router
from cardledger.api.valuations import router as valuations_router

__all__ = [
    "cards_router",
    "collection_router",
    "health_router",
    "prices_router",
    "valuations_router",
]
