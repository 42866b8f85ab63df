"""
Payment database model.

Immutable record of a settled checkout session.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, Enum
from sqlalchemy.sql import func
from bookcourier.app.db.session import Base
from bookcourier.app.models.order_enums import PaymentStatus


class Payment(Base):
    """
    Payment model.

    One row per provider transaction. The unique `transaction_id` is what
    makes settlement reconciliation apply its effects at most once.
    """
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Linkage
    order_id = Column(Integer, nullable=False, index=True)
    book_id = Column(Integer, nullable=True, index=True)
    book_title = Column(String(255), nullable=True)
    tracking_id = Column(String(50), nullable=True, index=True)

    # Provider references
    transaction_id = Column(String(255), unique=True, nullable=False, index=True)
    session_id = Column(String(255), nullable=False, index=True)

    # Financials
    amount = Column(Float, nullable=False)
    currency = Column(String(10), nullable=False)
    payment_status = Column(Enum(PaymentStatus), default=PaymentStatus.PAID, nullable=False)

    customer_email = Column(String(255), nullable=False, index=True)

    # Timestamps (Immutable - no updated_at)
    paid_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Payment(id={self.id}, order_id={self.order_id}, transaction='{self.transaction_id}')>"
