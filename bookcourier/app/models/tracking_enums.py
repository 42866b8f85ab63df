"""
Tracking status codes written to the tracking ledger.
"""

import enum

from bookcourier.app.models.order_enums import OrderStatus


class TrackingStatus(str, enum.Enum):
    """Lifecycle events recorded against a tracking id."""
    BOOK_PARCEL_CREATED = "book_parcel_created"
    BOOK_HAS_ORDERED = "book_has_ordered"
    BOOK_ORDER_PENDING = "book_order_pending"
    BOOK_ORDER_SHIPPED = "book_order_shipped"
    BOOK_ORDER_DELIVERED = "book_order_delivered"
    BOOK_ORDER_CANCELLED = "book_order_cancelled"
    PAYMENT_COMPLETED = "payment_completed"

    @classmethod
    def for_order_status(cls, status: OrderStatus) -> "TrackingStatus":
        """Map an order status change to its `book_order_<status>` event."""
        mapping = {
            OrderStatus.PENDING: cls.BOOK_ORDER_PENDING,
            OrderStatus.SHIPPED: cls.BOOK_ORDER_SHIPPED,
            OrderStatus.DELIVERED: cls.BOOK_ORDER_DELIVERED,
            OrderStatus.CANCELLED: cls.BOOK_ORDER_CANCELLED,
        }
        return mapping[status]
