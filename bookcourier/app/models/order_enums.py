"""
Order enumerations.
"""

import enum


class OrderStatus(str, enum.Enum):
    """
    Order status enumeration.

    Status flow:
        PENDING → SHIPPED → DELIVERED
        PENDING or SHIPPED can transition to CANCELLED
    """
    PENDING = "pending"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, enum.Enum):
    """Order payment status enumeration."""
    UNPAID = "unpaid"
    PAID = "paid"
