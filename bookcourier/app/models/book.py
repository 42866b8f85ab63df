"""
Book database model.

A book is a catalog listing created by a librarian.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, Enum, Text
from sqlalchemy.sql import func
from bookcourier.app.db.session import Base
from bookcourier.app.models.book_enums import BookStatus


class Book(Base):
    """
    Book model.

    Each book gets a tracking id at creation; its first ledger event is
    `book_parcel_created`.
    """
    __tablename__ = "books"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Listing
    title = Column(String(255), nullable=False, index=True)
    author = Column(String(255), nullable=False)
    image = Column(String(1000), nullable=True)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)

    # Status
    status = Column(Enum(BookStatus), default=BookStatus.PUBLISHED, nullable=False, index=True)

    # Ownership - the librarian who listed the book
    librarian_email = Column(String(255), nullable=False, index=True)
    librarian_name = Column(String(255), nullable=True)

    tracking_id = Column(String(50), unique=True, nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Book(id={self.id}, title='{self.title}', status='{self.status.value}')>"
