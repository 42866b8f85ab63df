"""
Wishlist database model.
"""

from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from bookcourier.app.db.session import Base


class Wishlist(Base):
    """A book saved by a user for later."""
    __tablename__ = "wishlists"
    __table_args__ = (
        UniqueConstraint("book_id", "user_email", name="uq_wishlist_book_user"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    book_id = Column(Integer, nullable=False, index=True)
    book_title = Column(String(255), nullable=True)
    book_image = Column(String(1000), nullable=True)
    user_email = Column(String(255), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Wishlist(id={self.id}, book_id={self.book_id}, user='{self.user_email}')>"
