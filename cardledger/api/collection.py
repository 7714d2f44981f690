"""
Collection API endpoints.

A collection is replaced as a whole by uploading a collection export; the
request body is the raw CSV text.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.config import MAX_IMPORT_SIZE
from cardledger.db.database import get_session
from cardledger.db.stores import SqlOwnershipStore
from cardledger.models.card import Card
from cardledger.models.errors import ImportFormatError
from cardledger.services.collection_import import import_collection

router = APIRouter(prefix="/collection", tags=["collection"])


class CardResponse(BaseModel):
    """One owned printing."""

    name: str
    set_code: str
    set_name: str
    collector_number: str
    language: str
    foil: bool
    quantity: int
    purchase_price: int = Field(..., description="Purchase price in cents")
    scryfall_id: str | None = None
    cardmarket_id: int | None = None

    @classmethod
    def from_card(cls, card: Card) -> "CardResponse":
        return cls(
            name=card.name,
            set_code=str(card.id.set_code),
            set_name=card.set_name,
            collector_number=card.id.collector_number,
            language=str(card.id.language),
            foil=card.foil,
            quantity=card.quantity,
            purchase_price=card.purchase_price,
            scryfall_id=card.scryfall_id,
            cardmarket_id=card.cardmarket_id,
        )


class CollectionResponse(BaseModel):
    """Response model for collection data."""

    user_id: str
    cards: list[CardResponse] = Field(default_factory=list)
    total_cards: int = 0
    unique_cards: int = 0


class ImportResponse(BaseModel):
    """Response model for collection import."""

    user_id: str
    cards_imported: int
    total_cards: int


def _total_copies(cards: list[Card]) -> int:
    return sum(card.quantity for card in cards)


async def _read_export(request: Request) -> str:
    body = await request.body()
    if len(body) > MAX_IMPORT_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Export larger than {MAX_IMPORT_SIZE} bytes",
        )

    try:
        # Exports saved by spreadsheet tools often start with a BOM
        return body.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ImportFormatError("export is not valid UTF-8") from e


@router.get("/{user_id}", response_model=CollectionResponse)
async def get_user_collection(
    user_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionResponse:
    """
    Get a user's cards.

    A user without cards gets an empty collection.
    """
    cards = await SqlOwnershipStore(session).get_owned_cards(user_id)

    return CollectionResponse(
        user_id=user_id,
        cards=[CardResponse.from_card(card) for card in cards],
        total_cards=_total_copies(cards),
        unique_cards=len(cards),
    )


@router.post(
    "/{user_id}/import",
    response_model=ImportResponse,
    openapi_extra={
        "requestBody": {"content": {"text/csv": {"schema": {"type": "string"}}}, "required": True}
    },
)
async def import_user_collection(
    user_id: str,
    request: Request,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ImportResponse:
    """
    Replace a user's collection with a collection export.

    The export is validated as a whole: the first invalid line rejects the
    upload and the previous collection stays untouched.
    """
    text = await _read_export(request)
    cards = await import_collection(SqlOwnershipStore(session), user_id, text)

    return ImportResponse(
        user_id=user_id,
        cards_imported=len(cards),
        total_cards=_total_copies(cards),
    )
