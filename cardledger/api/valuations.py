"""
Valuation API endpoints.

Snapshots are computed by the scheduler for every (price date, user) pair
that has none yet, then served read-only.
"""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.db.database import get_session
from cardledger.db.stores import SqlOwnershipStore, SqlPriceStore, SqlSnapshotStore
from cardledger.models.money import PriceGuide
from cardledger.models.valuation import ValuationSnapshot
from cardledger.services.valuation import ValuationScheduler

router = APIRouter(prefix="/valuations", tags=["valuations"])


class PriceGuideResponse(BaseModel):
    """Price points in cents; null when no card contributed a quote."""

    low: int | None = None
    avg: int | None = None
    trend: int | None = None
    avg1: int | None = None
    avg7: int | None = None
    avg30: int | None = None

    @classmethod
    def from_guide(cls, guide: PriceGuide) -> "PriceGuideResponse":
        return cls(**guide.to_cents())


class SnapshotResponse(BaseModel):
    """One valuation snapshot."""

    valuation_date: date
    user_id: str
    total: PriceGuideResponse

    @classmethod
    def from_snapshot(cls, snapshot: ValuationSnapshot) -> "SnapshotResponse":
        return cls(
            valuation_date=snapshot.date,
            user_id=snapshot.user_id,
            total=PriceGuideResponse.from_guide(snapshot.total),
        )


class ValuationKeyResponse(BaseModel):
    valuation_date: date
    user_id: str


class ValuationRunResponse(BaseModel):
    """Outcome of a scheduler run."""

    pending: int
    written: list[ValuationKeyResponse] = Field(default_factory=list)


class ValuationHistoryResponse(BaseModel):
    """A user's snapshots, oldest first."""

    user_id: str
    snapshots: list[SnapshotResponse] = Field(default_factory=list)


@router.post("/run", response_model=ValuationRunResponse)
async def run_valuations(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ValuationRunResponse:
    """
    Compute every missing snapshot.

    Running twice in a row writes nothing the second time.
    """
    scheduler = ValuationScheduler(
        ownership=SqlOwnershipStore(session),
        prices=SqlPriceStore(session),
        snapshots=SqlSnapshotStore(session),
    )
    result = await scheduler.run()

    return ValuationRunResponse(
        pending=result.pending,
        written=[
            ValuationKeyResponse(valuation_date=valuation_date, user_id=user_id)
            for valuation_date, user_id in result.written
        ],
    )


@router.get("/{user_id}", response_model=ValuationHistoryResponse)
async def get_user_valuations(
    user_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ValuationHistoryResponse:
    """Get the valuation history of a user."""
    snapshots = await SqlSnapshotStore(session).list_for_user(user_id)
    return ValuationHistoryResponse(
        user_id=user_id,
        snapshots=[SnapshotResponse.from_snapshot(snapshot) for snapshot in snapshots],
    )
