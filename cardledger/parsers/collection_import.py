"""
Parser for ManaBox-style collection exports.

A collection export is a comma separated file with one header line and
17 columns per data line:

    Binder Name,Binder Type,Name,Set code,Set name,Collector number,Foil,
    Rarity,Quantity,ManaBox ID,Scryfall ID,Purchase price,Misprint,Altered,
    Condition,Language,Purchase price currency

Binder exports of the same tool drop the last two columns; they are
rejected explicitly since they carry no language.

Header names are not checked, only the column count of each data line.
Parsing stops at the first invalid line.
"""

import re
from decimal import Decimal, DecimalException

from cardledger.models.card import (
    MAX_PURCHASE_PRICE,
    MAX_QUANTITY,
    Card,
    CardId,
    LanguageCode,
    SetCode,
)
from cardledger.models.errors import FieldValueError, ImportFormatError
from cardledger.models.money import euros_to_cents

COLLECTION_EXPORT_COLUMNS = 17
BINDER_EXPORT_COLUMNS = 15

# Column positions in a collection export
NAME_COLUMN = 2
SET_CODE_COLUMN = 3
SET_NAME_COLUMN = 4
COLLECTOR_NUMBER_COLUMN = 5
FOIL_COLUMN = 6
QUANTITY_COLUMN = 8
SCRYFALL_ID_COLUMN = 10
PURCHASE_PRICE_COLUMN = 11
LANGUAGE_COLUMN = 15

NON_FOIL = "normal"

EMPTY_FILE_MESSAGE = "missing headers or empty file"
BINDER_EXPORT_MESSAGE = "expecting a collection export, got a binder export"

# Pattern: "3" or "+3"
QUANTITY_PATTERN = re.compile(r"\+?[0-9]+")

# Pattern: "0.08", "12", ".5", "1e2"
DECIMAL_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def split_line(line: str) -> list[str]:
    """
    Split a line on commas that are not inside double quotes.

    Quote characters only toggle quoting and are dropped from the output.
    Every field is stripped of surrounding whitespace.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    fields.append("".join(current).strip())
    return fields


def parse_quantity(text: str, line_number: int) -> int:
    """Parse an owned quantity (0-255)."""
    if not QUANTITY_PATTERN.fullmatch(text):
        raise FieldValueError(line_number, "quantity", text)

    quantity = int(text)
    if quantity > MAX_QUANTITY:
        raise FieldValueError(line_number, "quantity", text)
    return quantity


def parse_purchase_price(text: str, line_number: int) -> int:
    """Parse a decimal euro price into cents (0 to MAX_PURCHASE_PRICE)."""
    if not DECIMAL_PATTERN.fullmatch(text):
        raise FieldValueError(line_number, "purchase_price", text)

    try:
        cents = euros_to_cents(Decimal(text))
    except DecimalException:
        raise FieldValueError(line_number, "purchase_price", text) from None

    if not 0 <= cents <= MAX_PURCHASE_PRICE:
        raise FieldValueError(line_number, "purchase_price", text)
    return cents


def parse_line(fields: list[str], line_number: int) -> Card:
    """
    Build a Card from the fields of one data line.

    Raises:
        ImportFormatError: If the line does not have 17 fields
        FieldValueError: If quantity or purchase price is invalid
        CardParsingError: If the set code or language code is invalid
    """
    if len(fields) == BINDER_EXPORT_COLUMNS:
        raise ImportFormatError(BINDER_EXPORT_MESSAGE)

    if len(fields) != COLLECTION_EXPORT_COLUMNS:
        raise ImportFormatError(
            f"expected {COLLECTION_EXPORT_COLUMNS} fields per line, got {len(fields)}"
        )

    card_id = CardId(
        set_code=SetCode(fields[SET_CODE_COLUMN]),
        collector_number=fields[COLLECTOR_NUMBER_COLUMN],
        language=LanguageCode.parse(fields[LANGUAGE_COLUMN]),
        foil=fields[FOIL_COLUMN] != NON_FOIL,
    )

    return Card(
        id=card_id,
        name=fields[NAME_COLUMN],
        set_name=fields[SET_NAME_COLUMN],
        quantity=parse_quantity(fields[QUANTITY_COLUMN], line_number),
        purchase_price=parse_purchase_price(fields[PURCHASE_PRICE_COLUMN], line_number),
        scryfall_id=fields[SCRYFALL_ID_COLUMN] or None,
    )


def parse_cards(text: str) -> list[Card]:
    """
    Parse a collection export into cards, in input order.

    Args:
        text: Raw export content, header line included

    Returns:
        One Card per data line.

    Raises:
        ImportFormatError: If there is no data line or a line has the wrong shape
        FieldValueError: If a field of a line is invalid (line numbers start at 1
            on the first data line)
        CardParsingError: If a set code or language code is invalid
    """
    # Only "\n" and "\r\n" end a line; other separators may appear in card names
    lines = [line.removesuffix("\r") for line in text.split("\n")]
    if lines and not lines[-1]:
        lines.pop()

    if len(lines) <= 1:
        raise ImportFormatError(EMPTY_FILE_MESSAGE)

    return [
        parse_line(split_line(line), line_number)
        for line_number, line in enumerate(lines[1:], start=1)
    ]
