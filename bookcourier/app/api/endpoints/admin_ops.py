"""
Admin Operations API Endpoints.

Audit trail access and replay of failed best-effort tasks.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from bookcourier.app.db.session import get_db
from bookcourier.app.models.dlq import DeadLetterQueue, DLQStatus
from bookcourier.app.core.exceptions import ResourceNotFoundError
from bookcourier.app.core.guards import require_admin
from bookcourier.app.core.identity import Principal
from bookcourier.app.schemas.admin import (
    AuditLogResponse, AuditTrailResponse, DLQItemResponse, DLQReplayResponse
)
from bookcourier.app.services.audit import log_event, AuditAction, get_audit_trail
from bookcourier.app.services.tracking import APPEND_TASK_NAME, replay_failed_append

router = APIRouter(prefix="/admin", tags=["Admin - Ops"])


@router.get("/audit-logs", response_model=AuditTrailResponse)
async def get_audit_logs(
    actor_email: Optional[str] = Query(None, alias="actorEmail", description="Filter by actor"),
    action: Optional[str] = Query(None, description="Filter by action type"),
    limit: int = Query(100, ge=1, le=500, description="Maximum records to return"),
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Get audit trail with optional filtering (admin-only).

    Returns recent audit logs for security monitoring and compliance.
    """
    logs = await get_audit_trail(
        db=db,
        actor_email=actor_email,
        action=action,
        limit=limit
    )

    return AuditTrailResponse(
        logs=[AuditLogResponse.model_validate(log) for log in logs],
        total=len(logs)
    )


@router.get("/ops/dlq", response_model=List[DLQItemResponse])
async def list_dlq_items(
    status: Optional[DLQStatus] = Query(None, description="Filter by status"),
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """List dead letter queue items, oldest first (admin-only)."""
    query = select(DeadLetterQueue).order_by(DeadLetterQueue.id.asc())
    if status:
        query = query.where(DeadLetterQueue.status == status)

    result = await db.execute(query)
    return result.scalars().all()


@router.post("/ops/dlq/{dlq_id}/retry", response_model=DLQReplayResponse)
async def retry_dlq_item(
    dlq_id: int = Path(..., description="DLQ Item ID"),
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Replay a failed task from the Dead Letter Queue (admin-only).

    Only tracking appends can be replayed.
    """
    item = await db.get(DeadLetterQueue, dlq_id)
    if not item:
        raise ResourceNotFoundError("DLQ item", dlq_id)

    if item.status == DLQStatus.PROCESSED:
        return DLQReplayResponse(
            success=False,
            message="Task was already processed",
            item=DLQItemResponse.model_validate(item)
        )

    if item.task_name != APPEND_TASK_NAME:
        raise HTTPException(status_code=400, detail=f"Task {item.task_name} cannot be replayed")

    replayed = await replay_failed_append(db, item)
    item = await db.get(DeadLetterQueue, dlq_id)

    await log_event(
        db=db,
        action=AuditAction.DLQ_REPLAYED,
        actor_email=admin.email,
        target_type="dlq",
        target_id=dlq_id,
        metadata={"task_name": item.task_name, "succeeded": replayed}
    )

    return DLQReplayResponse(
        success=replayed,
        message="Task replayed" if replayed else "Replay failed",
        item=DLQItemResponse.model_validate(item)
    )
