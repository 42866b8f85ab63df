"""
Book Catalog API Endpoints.

Public catalog listing and details; librarians list books, admins remove them.
"""

from typing import Literal, Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy import select, func, delete
from bookcourier.app.db.session import get_db, get_session_factory
from bookcourier.app.models.book import Book
from bookcourier.app.models.book_enums import BookStatus
from bookcourier.app.models.order import Order
from bookcourier.app.models.enums import UserRole
from bookcourier.app.models.tracking_enums import TrackingStatus
from bookcourier.app.schemas.book import (
    BookCreate, BookUpdate, BookResponse, BookListResponse, BookDeleteResponse
)
from bookcourier.app.core.exceptions import ResourceNotFoundError
from bookcourier.app.core.guards import (
    require_admin, require_librarian, require_role, get_stored_role, OwnershipGuard
)
from bookcourier.app.core.identity import Principal
from bookcourier.app.services.audit import log_event, AuditAction
from bookcourier.app.services.identifiers import generate_tracking_id
from bookcourier.app.services.tracking import record_tracking_event

router = APIRouter(tags=["Books"])
ownership_guard = OwnershipGuard()

SORT_COLUMNS = {
    "createdAt": Book.created_at,
    "price": Book.price,
    "title": Book.title,
}


@router.get("/all-books", response_model=BookListResponse)
async def list_books(
    status: Optional[BookStatus] = Query(None, description="Listing status"),
    sort_by: Literal["createdAt", "price", "title"] = Query("createdAt", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    limit: int = Query(10, ge=0, le=100, description="Page size; 0 returns every match"),
    skip: int = Query(0, ge=0, description="Rows to skip"),
    search_by_title: Optional[str] = Query(None, alias="searchByTitle", description="Case-insensitive title match"),
    email: Optional[str] = Query(None, description="Only books listed by this librarian"),
    db: AsyncSession = Depends(get_db)
):
    """
    Filtered, sorted, paginated catalog listing with the total match count.
    """
    filters = []
    if status:
        filters.append(Book.status == status)
    if search_by_title:
        filters.append(Book.title.ilike(f"%{search_by_title}%"))
    if email:
        filters.append(Book.librarian_email == email.lower())

    # Get total count
    total_result = await db.execute(select(func.count(Book.id)).where(*filters))
    total = total_result.scalar()

    column = SORT_COLUMNS[sort_by]
    order = column.asc() if sort_order == "asc" else column.desc()
    query = select(Book).where(*filters).order_by(order, Book.id.asc()).offset(skip)
    if limit:
        query = query.limit(limit)

    result = await db.execute(query)
    books = result.scalars().all()

    return BookListResponse(
        books=[BookResponse.model_validate(b) for b in books],
        total=total,
        limit=limit,
        skip=skip
    )


@router.get("/books/{book_id}/details", response_model=Optional[BookResponse])
async def get_book_details(
    book_id: int = Path(..., description="Book ID"),
    db: AsyncSession = Depends(get_db)
):
    """Book details, or null when the book does not exist."""
    book = await db.get(Book, book_id)
    if not book:
        return None
    return BookResponse.model_validate(book)


@router.post("/books", response_model=BookResponse)
async def create_book(
    book_data: BookCreate,
    background_tasks: BackgroundTasks,
    principal: Principal = Depends(require_librarian),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory)
):
    """
    List a new book (librarian-only).

    The book gets a fresh tracking id whose first event is
    `book_parcel_created`.
    """
    new_book = Book(
        title=book_data.title,
        author=book_data.author,
        image=book_data.image,
        description=book_data.description,
        price=book_data.price,
        quantity=book_data.quantity,
        status=book_data.status,
        librarian_email=principal.email,
        librarian_name=book_data.librarian_name or principal.claims.get("name"),
        tracking_id=generate_tracking_id(),
    )
    db.add(new_book)
    await db.commit()
    await db.refresh(new_book)

    background_tasks.add_task(
        record_tracking_event, session_factory, new_book.tracking_id, TrackingStatus.BOOK_PARCEL_CREATED
    )

    return BookResponse.model_validate(new_book)


@router.patch("/books/{book_id}", response_model=BookResponse)
async def update_book(
    book_data: BookUpdate,
    book_id: int = Path(..., description="Book ID"),
    principal: Principal = Depends(require_role([UserRole.LIBRARIAN, UserRole.ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    """
    Update a book's status or listing fields.

    Librarians may only update books they listed; admins may update any.
    """
    book = await db.get(Book, book_id)
    if not book:
        raise ResourceNotFoundError("Book", book_id)

    role = await get_stored_role(db, principal.email)
    if role == UserRole.LIBRARIAN:
        ownership_guard.enforce(book.librarian_email, principal, "book")

    # Update fields (only if provided)
    update_data = book_data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(book, field, value)

    await db.commit()
    await db.refresh(book)

    return BookResponse.model_validate(book)


@router.delete("/books/{book_id}", response_model=BookDeleteResponse)
async def delete_book(
    book_id: int = Path(..., description="Book ID"),
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Delete a book and every order placed for it (admin-only).

    Both deletes commit together. Orders for other books are untouched.
    """
    book = await db.get(Book, book_id)
    if not book:
        raise ResourceNotFoundError("Book", book_id)

    orders_result = await db.execute(delete(Order).where(Order.book_id == book_id))
    await db.delete(book)
    await log_event(
        db=db,
        action=AuditAction.BOOK_DELETED,
        actor_email=admin.email,
        target_type="book",
        target_id=book_id,
        metadata={"title": book.title, "deleted_orders": orders_result.rowcount},
        commit=False
    )
    await db.commit()

    return BookDeleteResponse(success=True, deleted_count=1, deleted_orders=orders_result.rowcount)
