import re
from dataclasses import dataclass, replace
from enum import Enum

from cardledger.models.errors import InvalidLanguageCodeError, InvalidSetCodeError

SET_CODE_PATTERN = re.compile(r"[A-Z0-9]{3}")

# Quantity is stored as an unsigned byte
MAX_QUANTITY = 255

# Purchase price in cents is stored in a signed 32-bit column
MAX_PURCHASE_PRICE = 2**31 - 1


class LanguageCode(str, Enum):
    """Printing language of a card."""

    FR = "FR"
    EN = "EN"

    @classmethod
    def parse(cls, text: str) -> "LanguageCode":
        """Parse a language code case-insensitively."""
        try:
            return cls(text.upper())
        except ValueError:
            raise InvalidLanguageCodeError(text) from None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class SetCode:
    """
    Identifier of the set a card was printed in (e.g., "FDN", "GPT").

    Exactly 3 uppercase letters or digits.
    """

    value: str

    def __post_init__(self) -> None:
        if not SET_CODE_PATTERN.fullmatch(self.value):
            raise InvalidSetCodeError(self.value)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class CardId:
    """
    Identity of one printing.

    Attributes:
        set_code: Set the card was printed in
        collector_number: Collector number within the set, may carry letters ("184s")
        language: Printing language
        foil: True for the foil printing
    """

    set_code: SetCode
    collector_number: str
    language: LanguageCode
    foil: bool


@dataclass(frozen=True, slots=True)
class Card:
    """
    A printing owned by a user.

    Attributes:
        id: Printing identity
        name: Card name as exported
        set_name: Display name of the set
        quantity: Number of copies owned (0-255)
        purchase_price: Purchase price in cents
        scryfall_id: Scryfall card id from the export, if any
        cardmarket_id: Cardmarket product id, once resolved
    """

    id: CardId
    name: str
    set_name: str
    quantity: int
    purchase_price: int
    scryfall_id: str | None = None
    cardmarket_id: int | None = None

    @property
    def foil(self) -> bool:
        return self.id.foil

    def with_cardmarket_id(self, cardmarket_id: int | None) -> "Card":
        return replace(self, cardmarket_id=cardmarket_id)


@dataclass(frozen=True, slots=True)
class CardInfo:
    """
    EDHREC popularity of a card.

    Attributes:
        inclusion: Number of decks running the card
        total_decks: Number of decks that could run it
    """

    inclusion: int
    total_decks: int
