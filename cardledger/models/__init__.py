from cardledger.models.card import (
    MAX_PURCHASE_PRICE,
    MAX_QUANTITY,
    Card,
    CardId,
    CardInfo,
    LanguageCode,
    SetCode,
)
from cardledger.models.errors import (
    CardParsingError,
    ExternalServiceError,
    FailureDetail,
    FailureKind,
    FieldValueError,
    ImportFormatError,
    InvalidLanguageCodeError,
    InvalidSetCodeError,
    KnownError,
    RepositoryError,
)
from cardledger.models.money import (
    PRICE_FIELDS,
    FullPriceGuide,
    Money,
    PriceGuide,
    combine,
    euros_to_cents,
    scale,
    sum_price_guides,
)
from cardledger.models.valuation import ValuationKey, ValuationRunResult, ValuationSnapshot

__all__ = [
    "MAX_PURCHASE_PRICE",
    "MAX_QUANTITY",
    "PRICE_FIELDS",
    "Card",
    "CardId",
    "CardInfo",
    "CardParsingError",
    "ExternalServiceError",
    "FailureDetail",
    "FailureKind",
    "FieldValueError",
    "FullPriceGuide",
    "ImportFormatError",
    "InvalidLanguageCodeError",
    "InvalidSetCodeError",
    "KnownError",
    "LanguageCode",
    "Money",
    "PriceGuide",
    "RepositoryError",
    "SetCode",
    "ValuationKey",
    "ValuationRunResult",
    "ValuationSnapshot",
    "combine",
    "euros_to_cents",
    "scale",
    "sum_price_guides",
]
