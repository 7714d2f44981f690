"""
Price API endpoints.
"""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.db.database import get_session
from cardledger.db.stores import SqlPriceStore
from cardledger.scrapers.cardmarket import CardmarketClient
from cardledger.services.price_import import import_current_prices

router = APIRouter(prefix="/prices", tags=["prices"])


class PriceImportResponse(BaseModel):
    """Response model for a price import."""

    price_date: date
    products_imported: int


class PriceDatesResponse(BaseModel):
    """Dates with ingested prices, oldest first."""

    dates: list[date]


def get_cardmarket_client() -> CardmarketClient:
    return CardmarketClient()


@router.post("/import", response_model=PriceImportResponse)
async def import_prices(
    session: Annotated[AsyncSession, Depends(get_session)],
    client: Annotated[CardmarketClient, Depends(get_cardmarket_client)],
) -> PriceImportResponse:
    """
    Download the current Cardmarket price guide and store it.

    Importing the same guide twice overwrites the stored prices.
    """
    result = await import_current_prices(client, SqlPriceStore(session))
    return PriceImportResponse(price_date=result.price_date, products_imported=result.count)


@router.get("/dates", response_model=PriceDatesResponse)
async def get_price_dates(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> PriceDatesResponse:
    """List the dates for which prices were imported."""
    return PriceDatesResponse(dates=await SqlPriceStore(session).distinct_dates())
