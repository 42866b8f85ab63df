"""
Tracking ledger tests.

Covers append ordering, message derivation, public lookup, and the
dead-letter path for best-effort appends.
"""

import pytest
from sqlalchemy import select

from bookcourier.app.models.dlq import DeadLetterQueue, DLQStatus
from bookcourier.app.models.tracking_enums import TrackingStatus
from bookcourier.app.models.order_enums import OrderStatus
from bookcourier.app.services.tracking import (
    APPEND_TASK_NAME,
    TrackingLedger,
    build_tracking_message,
    record_tracking_event,
)


@pytest.mark.asyncio
async def test_ledger_returns_events_in_append_order(db_session, client):
    tracking_id = "BOOK-20240101-AB12CD"
    await TrackingLedger.append(db_session, tracking_id, TrackingStatus.BOOK_PARCEL_CREATED)
    await TrackingLedger.append(db_session, tracking_id, TrackingStatus.BOOK_HAS_ORDERED)
    await TrackingLedger.append(db_session, tracking_id, TrackingStatus.BOOK_ORDER_SHIPPED)

    # Lookup is public: no Authorization header
    response = await client.get(f"/trackings/{tracking_id}")
    assert response.status_code == 200

    events = response.json()
    assert [e["status"] for e in events] == [
        "book_parcel_created",
        "book_has_ordered",
        "book_order_shipped",
    ]
    assert [e["message"] for e in events] == [
        "book parcel created",
        "book has ordered",
        "book order shipped",
    ]
    assert all(e["trackingId"] == tracking_id for e in events)


@pytest.mark.asyncio
async def test_parcel_created_then_pending(db_session):
    await TrackingLedger.append(db_session, "BOOK-20240101-AB12CD", "book_parcel_created")
    await TrackingLedger.append(db_session, "BOOK-20240101-AB12CD", "book_order_pending")

    events = await TrackingLedger.query(db_session, "BOOK-20240101-AB12CD")
    assert [(e.status, e.message) for e in events] == [
        ("book_parcel_created", "book parcel created"),
        ("book_order_pending", "book order pending"),
    ]


@pytest.mark.asyncio
async def test_unknown_tracking_id_returns_empty_list(client):
    response = await client.get("/trackings/BOOK-19990101-000000")
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_same_status_twice_yields_two_events(db_session):
    tracking_id = "BOOK-20240101-DUPDUP"
    first = await TrackingLedger.append(db_session, tracking_id, TrackingStatus.BOOK_ORDER_PENDING)
    second = await TrackingLedger.append(db_session, tracking_id, TrackingStatus.BOOK_ORDER_PENDING)

    assert first.id != second.id
    events = await TrackingLedger.query(db_session, tracking_id)
    assert len(events) == 2


@pytest.mark.asyncio
async def test_events_are_scoped_to_their_tracking_id(db_session):
    await TrackingLedger.append(db_session, "BOOK-20240101-AAAAAA", TrackingStatus.BOOK_PARCEL_CREATED)
    await TrackingLedger.append(db_session, "BOOK-20240101-BBBBBB", TrackingStatus.BOOK_HAS_ORDERED)

    events = await TrackingLedger.query(db_session, "BOOK-20240101-AAAAAA")
    assert [e.status for e in events] == ["book_parcel_created"]


@pytest.mark.asyncio
@pytest.mark.parametrize("tracking_id,status", [
    ("", TrackingStatus.BOOK_PARCEL_CREATED),
    ("BOOK-20240101-AB12CD", ""),
])
async def test_append_rejects_empty_input(db_session, tracking_id, status):
    with pytest.raises(ValueError):
        await TrackingLedger.append(db_session, tracking_id, status)


def test_message_replaces_every_underscore():
    assert build_tracking_message("book_order_delivered") == "book order delivered"
    assert build_tracking_message(TrackingStatus.PAYMENT_COMPLETED) == "payment completed"


def test_order_status_maps_to_tracking_status():
    assert TrackingStatus.for_order_status(OrderStatus.SHIPPED) == TrackingStatus.BOOK_ORDER_SHIPPED
    assert TrackingStatus.for_order_status(OrderStatus.CANCELLED) == TrackingStatus.BOOK_ORDER_CANCELLED


@pytest.mark.asyncio
async def test_failed_best_effort_append_is_parked(session_factory, db_session, mocker):
    mocker.patch.object(TrackingLedger, "append", side_effect=RuntimeError("store unavailable"))

    event = await record_tracking_event(session_factory, "BOOK-20240101-FAILED", TrackingStatus.BOOK_HAS_ORDERED)
    assert event is None

    result = await db_session.execute(select(DeadLetterQueue))
    item = result.scalar_one()
    assert item.task_name == APPEND_TASK_NAME
    assert item.status == DLQStatus.FAILED
    assert item.payload == {"tracking_id": "BOOK-20240101-FAILED", "status": "book_has_ordered"}
    assert "store unavailable" in item.error_message


@pytest.mark.asyncio
async def test_failed_append_does_not_fail_the_route(client, librarian_headers, book_payload, mocker):
    mocker.patch.object(TrackingLedger, "append", side_effect=RuntimeError("store unavailable"))

    response = await client.post("/books", json=book_payload, headers=librarian_headers)
    assert response.status_code == 200
    assert response.json()["trackingId"].startswith("BOOK-")


@pytest.mark.asyncio
async def test_admin_replays_parked_append(client, session_factory, admin_headers, mocker):
    mocker.patch.object(TrackingLedger, "append", side_effect=RuntimeError("store unavailable"))
    await record_tracking_event(session_factory, "BOOK-20240101-REPLAY", TrackingStatus.BOOK_ORDER_SHIPPED)
    mocker.stopall()

    dlq = await client.get("/admin/ops/dlq", params={"status": "FAILED"}, headers=admin_headers)
    assert dlq.status_code == 200
    [item] = dlq.json()

    replay = await client.post(f"/admin/ops/dlq/{item['id']}/retry", headers=admin_headers)
    assert replay.status_code == 200
    body = replay.json()
    assert body["success"] is True
    assert body["item"]["status"] == "PROCESSED"
    assert body["item"]["retryCount"] == 1
    assert body["item"]["processedAt"] is not None

    history = await client.get("/trackings/BOOK-20240101-REPLAY")
    assert [e["status"] for e in history.json()] == ["book_order_shipped"]

    # A processed item is not replayed again
    again = await client.post(f"/admin/ops/dlq/{item['id']}/retry", headers=admin_headers)
    assert again.json()["success"] is False

    history = await client.get("/trackings/BOOK-20240101-REPLAY")
    assert len(history.json()) == 1


@pytest.mark.asyncio
async def test_dlq_is_admin_only(client, librarian_headers):
    response = await client.get("/admin/ops/dlq", headers=librarian_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_dlq_filter_accepts_only_known_statuses(client, admin_headers):
    assert [s.value for s in DLQStatus] == ["FAILED", "PROCESSED"]

    response = await client.get("/admin/ops/dlq", params={"status": "ARCHIVED"}, headers=admin_headers)
    assert response.status_code == 422
