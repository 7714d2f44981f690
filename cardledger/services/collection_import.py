"""
Collection import.

Replaces the whole collection of a user with the content of an export.
The export is parsed completely before the store is touched, so an
invalid file never leaves a half-imported collection behind.
"""

import logging

from cardledger.models.card import Card, CardId
from cardledger.parsers.collection_import import parse_cards
from cardledger.services.ports import OwnershipStore

logger = logging.getLogger(__name__)


async def import_collection(store: OwnershipStore, user_id: str, text: str) -> list[Card]:
    """
    Parse an export and make it the user's collection.

    A printing listed on several lines is stored once, with the values of
    its last line.

    Args:
        store: Ownership store to write to
        user_id: Owner of the collection
        text: Raw export content

    Returns:
        The stored cards, one per printing, in order of first appearance.

    Raises:
        ImportFormatError, FieldValueError, CardParsingError: If the export is invalid
        RepositoryError: If the store fails while replacing the collection
    """
    by_printing: dict[CardId, Card] = {}
    for card in parse_cards(text):
        by_printing[card.id] = card
    cards = list(by_printing.values())

    await store.replace_all(user_id, cards)

    logger.info("Imported %d cards for %s", len(cards), user_id)
    return cards
