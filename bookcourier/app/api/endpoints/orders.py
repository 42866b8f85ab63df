"""
Order API Endpoints.

Customers place and cancel orders; the librarian who listed the book (or an
admin) moves them through shipping. Every status change is recorded in the
tracking ledger.
"""

from typing import List
from fastapi import APIRouter, BackgroundTasks, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy import select
from bookcourier.app.db.session import get_db, get_session_factory
from bookcourier.app.models.book import Book
from bookcourier.app.models.book_enums import BookStatus
from bookcourier.app.models.order import Order
from bookcourier.app.models.order_enums import OrderStatus, PaymentStatus
from bookcourier.app.models.enums import UserRole
from bookcourier.app.models.tracking_enums import TrackingStatus
from bookcourier.app.schemas.common import MutationResponse
from bookcourier.app.schemas.order import OrderCreate, OrderStatusUpdate, OrderResponse
from bookcourier.app.core.dependencies import get_current_principal
from bookcourier.app.core.exceptions import InsufficientPermissionsError, ResourceNotFoundError
from bookcourier.app.core.guards import require_librarian, get_stored_role, OwnershipGuard
from bookcourier.app.core.identity import Principal
from bookcourier.app.services.identifiers import generate_tracking_id
from bookcourier.app.services.tracking import record_tracking_event

router = APIRouter(tags=["Orders"])
ownership_guard = OwnershipGuard()


@router.get("/orders", response_model=List[OrderResponse])
async def list_my_orders(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """List the principal's orders, newest first."""
    result = await db.execute(
        select(Order)
        .where(Order.customer_email == principal.email)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    return result.scalars().all()


@router.get("/librarian/orders", response_model=List[OrderResponse])
async def list_librarian_orders(
    principal: Principal = Depends(require_librarian),
    db: AsyncSession = Depends(get_db)
):
    """List orders for books the librarian listed (librarian-only)."""
    result = await db.execute(
        select(Order)
        .where(Order.librarian_email == principal.email)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    return result.scalars().all()


@router.post("/orders", response_model=MutationResponse)
async def create_order(
    order_data: OrderCreate,
    background_tasks: BackgroundTasks,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory)
):
    """
    Place an order for a published book.

    An active (not cancelled) order by the same customer for the same book
    is a no-op reported in the body. The order gets its own tracking id
    whose first event is `book_has_ordered`.
    """
    book = await db.get(Book, order_data.book_id)
    if not book or book.status != BookStatus.PUBLISHED:
        raise ResourceNotFoundError("Book", order_data.book_id)

    existing = await db.execute(
        select(Order.id).where(
            Order.book_id == book.id,
            Order.customer_email == principal.email,
            Order.status != OrderStatus.CANCELLED
        )
    )
    if existing.first():
        return MutationResponse(success=False, message="You have already ordered this book")

    new_order = Order(
        book_id=book.id,
        book_title=book.title,
        price=book.price,
        quantity=order_data.quantity,
        librarian_email=book.librarian_email,
        customer_email=principal.email,
        customer_name=order_data.customer_name or principal.claims.get("name"),
        phone=order_data.phone,
        address=order_data.address,
        status=OrderStatus.PENDING,
        payment_status=PaymentStatus.UNPAID,
        tracking_id=generate_tracking_id(),
    )
    db.add(new_order)
    await db.commit()
    await db.refresh(new_order)

    background_tasks.add_task(
        record_tracking_event, session_factory, new_order.tracking_id, TrackingStatus.BOOK_HAS_ORDERED
    )

    return MutationResponse(success=True, message="Order placed", inserted_id=new_order.id)


@router.patch("/orders/{order_id}", response_model=OrderResponse)
async def update_order_status(
    status_data: OrderStatusUpdate,
    background_tasks: BackgroundTasks,
    order_id: int = Path(..., description="Order ID"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory)
):
    """
    Change an order's status and append `book_order_<status>` to its ledger.

    - ADMIN: any order, any status
    - LIBRARIAN: orders for books they listed, any status
    - USER: own orders, cancellation only
    """
    order = await db.get(Order, order_id)
    if not order:
        raise ResourceNotFoundError("Order", order_id)

    role = await get_stored_role(db, principal.email)
    fulfils_order = (
        role == UserRole.ADMIN
        or (role == UserRole.LIBRARIAN and ownership_guard.is_owner(order.librarian_email, principal))
    )
    if not fulfils_order:
        # Anyone else is treated as the customer
        ownership_guard.enforce(order.customer_email, principal, "order")
        if status_data.status != OrderStatus.CANCELLED:
            raise InsufficientPermissionsError("Customers can only cancel their orders")

    order.status = status_data.status
    await db.commit()
    await db.refresh(order)

    background_tasks.add_task(
        record_tracking_event,
        session_factory,
        order.tracking_id,
        TrackingStatus.for_order_status(order.status)
    )

    return OrderResponse.model_validate(order)
