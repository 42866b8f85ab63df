"""
Payment Pydantic schemas.
"""

from pydantic import Field
from datetime import datetime
from typing import Optional
from bookcourier.app.models.order_enums import PaymentStatus
from bookcourier.app.schemas.common import CamelModel


class CheckoutSessionRequest(CamelModel):
    """Schema for POST /payment-checkout-session."""
    order_id: int = Field(..., description="Order to pay for")


class CheckoutSessionResponse(CamelModel):
    """Hosted checkout session, or an informational no-op."""
    success: bool
    message: str
    url: Optional[str] = None
    session_id: Optional[str] = None


class PaymentResponse(CamelModel):
    """Schema for payment response."""
    id: int
    order_id: int
    book_id: Optional[int] = None
    book_title: Optional[str] = None
    tracking_id: Optional[str] = None
    transaction_id: str
    session_id: str
    amount: float
    currency: str
    payment_status: PaymentStatus
    customer_email: str
    paid_at: datetime


class PaymentSuccessResponse(CamelModel):
    """Schema for PATCH /payment-success."""
    success: bool
    message: str
    provider_status: str
    already_recorded: bool = False
    transaction_id: Optional[str] = None
    tracking_id: Optional[str] = None
    payment: Optional[PaymentResponse] = None
