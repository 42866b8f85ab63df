"""
Wishlist API Endpoints.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from bookcourier.app.db.session import get_db
from bookcourier.app.models.book import Book
from bookcourier.app.models.wishlist import Wishlist
from bookcourier.app.schemas.common import MutationResponse
from bookcourier.app.schemas.wishlist import WishlistCreate, WishlistResponse
from bookcourier.app.core.dependencies import get_current_principal
from bookcourier.app.core.exceptions import ResourceNotFoundError
from bookcourier.app.core.guards import OwnershipGuard
from bookcourier.app.core.identity import Principal

router = APIRouter(tags=["Wishlists"])
ownership_guard = OwnershipGuard()


@router.get("/wishlists", response_model=List[WishlistResponse])
async def list_wishlist(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """List the principal's saved books."""
    result = await db.execute(
        select(Wishlist)
        .where(Wishlist.user_email == principal.email)
        .order_by(Wishlist.created_at.desc(), Wishlist.id.desc())
    )
    return result.scalars().all()


@router.post("/wishlist", response_model=MutationResponse)
async def add_to_wishlist(
    wishlist_data: WishlistCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Save a book; saving it twice is a no-op reported in the body."""
    book = await db.get(Book, wishlist_data.book_id)
    if not book:
        raise ResourceNotFoundError("Book", wishlist_data.book_id)

    if await _find_entry(db, book.id, principal.email):
        return MutationResponse(success=False, message="Book is already in your wishlist")

    item = Wishlist(
        book_id=book.id,
        book_title=book.title,
        book_image=book.image,
        user_email=principal.email,
    )
    db.add(item)
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent request saved the same book first
        await db.rollback()
        return MutationResponse(success=False, message="Book is already in your wishlist")

    await db.refresh(item)
    return MutationResponse(success=True, message="Added to wishlist", inserted_id=item.id)


@router.delete("/wishlists/{wishlist_id}", response_model=MutationResponse)
async def remove_from_wishlist(
    wishlist_id: int = Path(..., description="Wishlist entry ID"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Remove one of the principal's saved books."""
    item = await db.get(Wishlist, wishlist_id)
    if not item:
        raise ResourceNotFoundError("Wishlist entry", wishlist_id)

    ownership_guard.enforce(item.user_email, principal, "wishlist entry")

    await db.delete(item)
    await db.commit()

    return MutationResponse(success=True, message="Removed from wishlist", deleted_count=1)


async def _find_entry(db: AsyncSession, book_id: int, user_email: str) -> Optional[Wishlist]:
    result = await db.execute(
        select(Wishlist).where(
            Wishlist.book_id == book_id,
            Wishlist.user_email == user_email
        )
    )
    return result.scalar_one_or_none()
