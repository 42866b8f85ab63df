"""
Admin API Schema Definitions.

Pydantic schemas for admin audit and operations endpoints.
"""

from datetime import datetime
from typing import Optional, List
from bookcourier.app.models.dlq import DLQStatus
from bookcourier.app.schemas.common import CamelModel


class AuditLogResponse(CamelModel):
    """Schema for audit log entry."""
    id: int
    actor_email: Optional[str]
    action: str
    target_type: Optional[str]
    target_id: Optional[str]
    meta_data: Optional[dict]
    timestamp: datetime


class AuditTrailResponse(CamelModel):
    """Schema for audit trail list."""
    logs: List[AuditLogResponse]
    total: int


class DLQItemResponse(CamelModel):
    """Schema for a dead letter queue item."""
    id: int
    task_name: str
    error_message: str
    payload: Optional[dict]
    status: DLQStatus
    retry_count: int
    created_at: datetime
    last_retry_at: Optional[datetime]
    processed_at: Optional[datetime] = None


class DLQReplayResponse(CamelModel):
    """Schema for a replay attempt."""
    success: bool
    message: str
    item: DLQItemResponse
