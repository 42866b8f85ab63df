"""
Order database model.

An order is a customer's request for one listed book.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, Enum, Text
from sqlalchemy.sql import func
from bookcourier.app.db.session import Base
from bookcourier.app.models.order_enums import OrderStatus, PaymentStatus


class Order(Base):
    """
    Order model.

    `status` and `payment_status` hold the current state; the tracking ledger
    holds the history under `tracking_id`.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Book snapshot at order time
    book_id = Column(Integer, nullable=False, index=True)
    book_title = Column(String(255), nullable=False)
    price = Column(Float, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    librarian_email = Column(String(255), nullable=False, index=True)

    # Customer
    customer_email = Column(String(255), nullable=False, index=True)
    customer_name = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)

    # Status
    status = Column(Enum(OrderStatus), default=OrderStatus.PENDING, nullable=False, index=True)
    payment_status = Column(Enum(PaymentStatus), default=PaymentStatus.UNPAID, nullable=False, index=True)

    tracking_id = Column(String(50), unique=True, nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Order(id={self.id}, book_id={self.book_id}, status='{self.status.value}')>"
