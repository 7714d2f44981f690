from cardledger.db.database import get_session, init_db, session_scope
from cardledger.db.operations import (
    card_to_model,
    get_cards_without_cardmarket_id,
    get_distinct_users,
    get_owned_cards,
    get_price_dates,
    get_price_guide,
    get_valuation_keys,
    get_valuations,
    insert_valuation,
    replace_owned_cards,
    save_price_guides,
    set_cardmarket_id,
)
from cardledger.db.stores import (
    SqlCardCatalogStore,
    SqlOwnershipStore,
    SqlPriceStore,
    SqlSnapshotStore,
)

__all__ = [
    "SqlCardCatalogStore",
    "SqlOwnershipStore",
    "SqlPriceStore",
    "SqlSnapshotStore",
    "card_to_model",
    "get_cards_without_cardmarket_id",
    "get_distinct_users",
    "get_owned_cards",
    "get_price_dates",
    "get_price_guide",
    "get_session",
    "get_valuation_keys",
    "get_valuations",
    "init_db",
    "insert_valuation",
    "replace_owned_cards",
    "save_price_guides",
    "session_scope",
]
