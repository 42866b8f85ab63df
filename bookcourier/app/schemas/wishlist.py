"""
Wishlist Pydantic schemas.
"""

from pydantic import Field
from datetime import datetime
from typing import Optional
from bookcourier.app.schemas.common import CamelModel


class WishlistCreate(CamelModel):
    """Schema for POST /wishlist."""
    book_id: int = Field(..., description="Book to save")


class WishlistResponse(CamelModel):
    id: int
    book_id: int
    book_title: Optional[str] = None
    book_image: Optional[str] = None
    user_email: str
    created_at: datetime
