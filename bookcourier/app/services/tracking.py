"""
Tracking ledger service.

Append-only log of lifecycle events keyed by a tracking id. Writes triggered
by a state change run after the change has committed and are best-effort: a
failed append is logged and parked in the dead letter queue, never reported to
the caller of the triggering route.
"""

import enum
import logging
from datetime import datetime, timezone
from typing import List, Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bookcourier.app.models.dlq import DeadLetterQueue, DLQStatus
from bookcourier.app.models.tracking_event import TrackingEvent
from bookcourier.app.models.tracking_enums import TrackingStatus

logger = logging.getLogger("bookcourier.tracking")

APPEND_TASK_NAME = "tracking.append"


def _status_code(status: Union[TrackingStatus, str]) -> str:
    if isinstance(status, enum.Enum):
        return status.value
    return status


def build_tracking_message(status: Union[TrackingStatus, str]) -> str:
    """Display text for a status code: every `_` becomes a space."""
    return _status_code(status).replace("_", " ")


class TrackingLedger:

    @staticmethod
    async def append(
        db: AsyncSession,
        tracking_id: str,
        status: Union[TrackingStatus, str]
    ) -> TrackingEvent:
        """
        Append one event to the ledger.

        Never updates an existing row: appending the same status twice
        yields two events.

        Raises:
            ValueError: if tracking_id or status is empty
        """
        code = _status_code(status)
        if not tracking_id:
            raise ValueError("tracking_id must not be empty")
        if not code:
            raise ValueError("status must not be empty")

        event = TrackingEvent(
            tracking_id=tracking_id,
            status=code,
            message=build_tracking_message(code),
        )
        db.add(event)
        await db.commit()
        await db.refresh(event)
        return event

    @staticmethod
    async def query(db: AsyncSession, tracking_id: str) -> List[TrackingEvent]:
        """
        All events for a tracking id, oldest first.

        An unknown id yields an empty list.
        """
        result = await db.execute(
            select(TrackingEvent)
            .where(TrackingEvent.tracking_id == tracking_id)
            .order_by(TrackingEvent.id.asc())
        )
        return list(result.scalars().all())


async def record_tracking_event(
    session_factory: async_sessionmaker,
    tracking_id: str,
    status: Union[TrackingStatus, str]
) -> Optional[TrackingEvent]:
    """
    Best-effort append in its own session, meant to run as a background task.

    Returns the stored event, or None when the write failed and was parked
    in the dead letter queue.
    """
    code = _status_code(status)
    try:
        async with session_factory() as db:
            return await TrackingLedger.append(db, tracking_id, code)
    except Exception as exc:
        logger.error(
            "Tracking append failed",
            exc_info=exc,
            extra={"tracking_id": tracking_id, "status": code},
        )
        await _park_failed_append(session_factory, tracking_id, code, exc)
        return None


async def _park_failed_append(
    session_factory: async_sessionmaker,
    tracking_id: str,
    status: str,
    error: Exception
) -> None:
    try:
        async with session_factory() as db:
            db.add(DeadLetterQueue(
                task_name=APPEND_TASK_NAME,
                error_message=f"{type(error).__name__}: {error}",
                payload={"tracking_id": tracking_id, "status": status},
                status=DLQStatus.FAILED,
            ))
            await db.commit()
    except Exception:
        # The store itself is unavailable; the log line is all that is left.
        logger.exception(
            "Could not park failed tracking append",
            extra={"tracking_id": tracking_id, "status": status},
        )


async def replay_failed_append(db: AsyncSession, item: DeadLetterQueue) -> bool:
    """
    Re-run a parked tracking append.

    Marks the item PROCESSED on success. On failure the retry count is bumped
    and the item stays FAILED.

    Returns:
        True if the event was written
    """
    item_id = item.id
    payload = item.payload or {}

    try:
        await TrackingLedger.append(db, payload.get("tracking_id"), payload.get("status"))
    except Exception as exc:
        await db.rollback()
        logger.warning(
            "Tracking append replay failed",
            extra={"dlq_id": item_id, "error": str(exc)},
        )
        item = await db.get(DeadLetterQueue, item_id)
        item.retry_count = (item.retry_count or 0) + 1
        item.last_retry_at = datetime.now(timezone.utc)
        item.status = DLQStatus.FAILED
        item.error_message = f"{type(exc).__name__}: {exc}"
        await db.commit()
        return False

    now = datetime.now(timezone.utc)
    item.retry_count = (item.retry_count or 0) + 1
    item.last_retry_at = now
    item.processed_at = now
    item.status = DLQStatus.PROCESSED
    await db.commit()
    return True
