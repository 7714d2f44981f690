from cardledger.parsers.collection_import import parse_cards, parse_line, split_line

__all__ = [
    "parse_cards",
    "parse_line",
    "split_line",
]
