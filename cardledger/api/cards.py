"""
Card catalog endpoints.

Resolution of Cardmarket product ids through Scryfall, and card
popularity from EDHREC.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.db.database import get_session
from cardledger.db.stores import SqlCardCatalogStore
from cardledger.scrapers.edhrec import EdhrecClient
from cardledger.scrapers.scryfall import ScryfallClient
from cardledger.services.cardmarket_ids import update_cardmarket_ids

router = APIRouter(prefix="/cards", tags=["cards"])


class CardmarketIdUpdateResponse(BaseModel):
    """Counts of a Cardmarket id update run."""

    updated: int
    not_found: int
    failed: int


class CardInfoResponse(BaseModel):
    """EDHREC popularity of a card."""

    name: str
    inclusion: int
    total_decks: int


async def get_scryfall_client() -> AsyncGenerator[ScryfallClient, None]:
    async with ScryfallClient() as client:
        yield client


async def get_edhrec_client(request: Request) -> AsyncGenerator[EdhrecClient, None]:
    # The build id cache lives on the app so that it outlives single requests
    client = EdhrecClient(request.app.state.build_id_cache)
    try:
        yield client
    finally:
        await client.aclose()


@router.post("/cardmarket-ids", response_model=CardmarketIdUpdateResponse)
async def update_card_cardmarket_ids(
    session: Annotated[AsyncSession, Depends(get_session)],
    scryfall: Annotated[ScryfallClient, Depends(get_scryfall_client)],
) -> CardmarketIdUpdateResponse:
    """
    Look up the Cardmarket id of every card that lacks one.

    Cards Scryfall cannot resolve are counted and skipped.
    """
    result = await update_cardmarket_ids(SqlCardCatalogStore(session), scryfall)
    return CardmarketIdUpdateResponse(
        updated=result.updated,
        not_found=result.not_found,
        failed=result.failed,
    )


@router.get("/info", response_model=CardInfoResponse)
async def get_card_info(
    name: Annotated[str, Query(min_length=1, description="Card name, e.g. 'Sol Ring'")],
    edhrec: Annotated[EdhrecClient, Depends(get_edhrec_client)],
) -> CardInfoResponse:
    """Get how many EDHREC decks run a card."""
    info = await edhrec.get_card_info(name)
    return CardInfoResponse(name=name, inclusion=info.inclusion, total_decks=info.total_decks)
