"""
API Router.

Aggregates all endpoint routers.
"""

from fastapi import APIRouter
from bookcourier.app.api.endpoints import (
    users, books, orders, wishlists, payments, trackings, admin_ops
)

router = APIRouter()

router.include_router(users.router)
router.include_router(books.router)
router.include_router(orders.router)
router.include_router(wishlists.router)
router.include_router(payments.router)
router.include_router(trackings.router)
router.include_router(admin_ops.router)
