"""
Health check endpoints.

Liveness never touches the database; readiness pings it and reports the
most recent price date so that a stale price import is visible.
"""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.config import settings
from cardledger.db.database import get_session
from cardledger.models.db import CardmarketPriceDB

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    service: str = settings.app_name
    database: str | None = None
    latest_price_date: date | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness probe."""
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> HealthResponse:
    """
    Readiness probe.

    Returns 503 if the database cannot be queried.
    """
    try:
        result = await session.execute(select(func.max(CardmarketPriceDB.price_date)))
    except SQLAlchemyError:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", database="disconnected")

    return HealthResponse(
        status="ready",
        database="connected",
        latest_price_date=result.scalar_one_or_none(),
    )
