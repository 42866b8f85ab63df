"""
Tracking Event database model.

Append-only lifecycle log for books and orders.
"""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from bookcourier.app.db.session import Base


class TrackingEvent(Base):
    """
    Tracking event model.

    NO updates or deletions allowed. Events sharing a tracking id are ordered
    by `id`, which follows insertion order.
    """
    __tablename__ = "trackings"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    tracking_id = Column(String(50), nullable=False, index=True)
    status = Column(String(100), nullable=False)
    message = Column(String(255), nullable=False)

    # Timestamps (Immutable - no updated_at)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<TrackingEvent(id={self.id}, tracking_id='{self.tracking_id}', status='{self.status}')>"
