"""
Tracking API Endpoints.

Public read access to the tracking ledger.
"""

from typing import List
from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession
from bookcourier.app.db.session import get_db
from bookcourier.app.schemas.tracking import TrackingEventResponse
from bookcourier.app.services.tracking import TrackingLedger

router = APIRouter(prefix="/trackings", tags=["Tracking"])


@router.get("/{tracking_id}", response_model=List[TrackingEventResponse])
async def get_tracking_history(
    tracking_id: str = Path(..., description="Tracking ID"),
    db: AsyncSession = Depends(get_db)
):
    """Full ledger for a tracking id, oldest first; unknown ids return []."""
    return await TrackingLedger.query(db, tracking_id)
