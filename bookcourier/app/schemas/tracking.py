"""
Tracking ledger Pydantic schemas.
"""

from datetime import datetime
from bookcourier.app.schemas.common import CamelModel


class TrackingEventResponse(CamelModel):
    """One ledger event."""
    id: int
    tracking_id: str
    status: str
    message: str
    created_at: datetime
