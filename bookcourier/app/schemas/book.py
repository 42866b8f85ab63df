"""
Book Pydantic schemas.

Defines request and response models for catalog management.
"""

from pydantic import Field, field_validator
from datetime import datetime
from typing import Optional, List
from bookcourier.app.models.book_enums import BookStatus
from bookcourier.app.schemas.common import CamelModel


class BookCreate(CamelModel):
    """Schema for listing a new book."""
    title: str = Field(..., min_length=1, max_length=255, description="Book title")
    author: str = Field(..., min_length=1, max_length=255, description="Author name")
    image: Optional[str] = Field(None, max_length=1000, description="Cover image URL")
    description: Optional[str] = Field(None, description="Book description")
    price: float = Field(..., ge=0, description="Unit price")
    quantity: int = Field(default=1, ge=0, description="Copies available")
    status: BookStatus = Field(default=BookStatus.PUBLISHED, description="Listing status")
    librarian_name: Optional[str] = Field(None, max_length=255)


class BookUpdate(CamelModel):
    """Schema for updating an existing book."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    author: Optional[str] = Field(None, min_length=1, max_length=255)
    image: Optional[str] = Field(None, max_length=1000)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    quantity: Optional[int] = Field(None, ge=0)
    status: Optional[BookStatus] = None

    @field_validator("title", "author", "price", "quantity", "status")
    @classmethod
    def reject_null(cls, value, info):
        # Omit a field to leave it unchanged; these columns cannot be cleared
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class BookResponse(CamelModel):
    """Schema for book response."""
    id: int
    title: str
    author: str
    image: Optional[str] = None
    description: Optional[str] = None
    price: float
    quantity: int
    status: BookStatus
    librarian_email: str
    librarian_name: Optional[str] = None
    tracking_id: str
    created_at: datetime
    updated_at: datetime


class BookListResponse(CamelModel):
    """Schema for filtered, paginated book list."""
    books: List[BookResponse]
    total: int
    limit: int
    skip: int


class BookDeleteResponse(CamelModel):
    """Schema for a cascading book delete."""
    success: bool
    deleted_count: int
    deleted_orders: int
