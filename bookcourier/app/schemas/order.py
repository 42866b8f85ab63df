"""
Order Pydantic schemas.
"""

from pydantic import Field
from datetime import datetime
from typing import Optional
from bookcourier.app.models.order_enums import OrderStatus, PaymentStatus
from bookcourier.app.schemas.common import CamelModel


class OrderCreate(CamelModel):
    """Schema for placing an order."""
    book_id: int = Field(..., description="Book to order")
    quantity: int = Field(default=1, ge=1, description="Number of copies")
    customer_name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None


class OrderStatusUpdate(CamelModel):
    """Schema for PATCH /orders/{id}."""
    status: OrderStatus = Field(..., description="New order status")


class OrderResponse(CamelModel):
    """Schema for order response."""
    id: int
    book_id: int
    book_title: str
    price: float
    quantity: int
    librarian_email: str
    customer_email: str
    customer_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    status: OrderStatus
    payment_status: PaymentStatus
    tracking_id: str
    created_at: datetime
    updated_at: datetime
