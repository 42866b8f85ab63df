"""
Order lifecycle tests.
"""

import pytest

from bookcourier.app.models.enums import UserRole


async def tracking_statuses(client, tracking_id):
    response = await client.get(f"/trackings/{tracking_id}")
    return [e["status"] for e in response.json()]


@pytest.mark.asyncio
async def test_place_order(client, order, book):
    assert order["bookId"] == book["id"]
    assert order["bookTitle"] == book["title"]
    assert order["librarianEmail"] == "librarian@test.com"
    assert order["customerEmail"] == "reader@test.com"
    assert order["status"] == "pending"
    assert order["paymentStatus"] == "unpaid"
    assert order["trackingId"] != book["trackingId"]

    assert await tracking_statuses(client, order["trackingId"]) == ["book_has_ordered"]


@pytest.mark.asyncio
async def test_duplicate_active_order_is_a_no_op(client, order, book, reader_headers):
    response = await client.post("/orders", json={"bookId": book["id"]}, headers=reader_headers)
    assert response.status_code == 200
    assert response.json()["success"] is False
    assert response.json()["message"] == "You have already ordered this book"

    orders = await client.get("/orders", headers=reader_headers)
    assert len(orders.json()) == 1


@pytest.mark.asyncio
async def test_reorder_after_cancelling(client, order, book, reader_headers):
    await client.patch(f"/orders/{order['id']}", json={"status": "cancelled"}, headers=reader_headers)

    response = await client.post("/orders", json={"bookId": book["id"]}, headers=reader_headers)
    assert response.json()["success"] is True


@pytest.mark.asyncio
async def test_cannot_order_missing_or_unpublished_book(client, book, librarian_headers, reader_headers):
    response = await client.post("/orders", json={"bookId": 9999}, headers=reader_headers)
    assert response.status_code == 404

    await client.patch(f"/books/{book['id']}", json={"status": "unpublished"}, headers=librarian_headers)
    response = await client.post("/orders", json={"bookId": book["id"]}, headers=reader_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_order_quantity_must_be_positive(client, book, reader_headers):
    response = await client.post("/orders", json={"bookId": book["id"], "quantity": 0}, headers=reader_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_librarian_moves_order_through_shipping(client, order, librarian_headers):
    response = await client.patch(f"/orders/{order['id']}", json={"status": "shipped"}, headers=librarian_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "shipped"

    response = await client.patch(f"/orders/{order['id']}", json={"status": "delivered"}, headers=librarian_headers)
    assert response.status_code == 200

    assert await tracking_statuses(client, order["trackingId"]) == [
        "book_has_ordered",
        "book_order_shipped",
        "book_order_delivered",
    ]


@pytest.mark.asyncio
async def test_admin_updates_any_order(client, order, admin_headers):
    response = await client.patch(f"/orders/{order['id']}", json={"status": "shipped"}, headers=admin_headers)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_customer_cancels_own_order(client, order, reader_headers):
    response = await client.patch(f"/orders/{order['id']}", json={"status": "cancelled"}, headers=reader_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"

    assert await tracking_statuses(client, order["trackingId"]) == ["book_has_ordered", "book_order_cancelled"]


@pytest.mark.asyncio
async def test_customer_cannot_ship_own_order(client, order, reader_headers):
    response = await client.patch(f"/orders/{order['id']}", json={"status": "shipped"}, headers=reader_headers)
    assert response.status_code == 403

    assert await tracking_statuses(client, order["trackingId"]) == ["book_has_ordered"]


@pytest.mark.asyncio
async def test_strangers_cannot_touch_order(client, order, make_user):
    stranger = await make_user("stranger@test.com", UserRole.USER)
    response = await client.patch(f"/orders/{order['id']}", json={"status": "cancelled"}, headers=stranger)
    assert response.status_code == 403

    rival = await make_user("rival@test.com", UserRole.LIBRARIAN)
    response = await client.patch(f"/orders/{order['id']}", json={"status": "shipped"}, headers=rival)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_update_missing_order(client, admin_headers):
    response = await client.patch("/orders/9999", json={"status": "shipped"}, headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_unknown_order_status_is_rejected(client, order, librarian_headers):
    response = await client.patch(f"/orders/{order['id']}", json={"status": "lost"}, headers=librarian_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_order_listings_are_scoped(client, order, librarian_headers, reader_headers, make_user):
    response = await client.get("/librarian/orders", headers=librarian_headers)
    assert [o["id"] for o in response.json()] == [order["id"]]

    rival = await make_user("rival@test.com", UserRole.LIBRARIAN)
    response = await client.get("/librarian/orders", headers=rival)
    assert response.json() == []

    response = await client.get("/librarian/orders", headers=reader_headers)
    assert response.status_code == 403

    response = await client.get("/orders", headers=librarian_headers)
    assert response.json() == []
