"""
Settlement Service (Domain Logic).

Creates hosted checkout sessions for orders and reconciles their outcome after
the customer is redirected back. Reconciliation must be idempotent: replaying
the redirect must not credit an order twice.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bookcourier.app.core.config import settings
from bookcourier.app.core.exceptions import ResourceNotFoundError
from bookcourier.app.core.identity import Principal
from bookcourier.app.models.order import Order
from bookcourier.app.models.order_enums import OrderStatus, PaymentStatus
from bookcourier.app.models.payment import Payment
from bookcourier.app.services.audit import log_event, AuditAction
from bookcourier.app.services.payment_gateway import (
    CheckoutGateway, CheckoutRequest, CheckoutSession
)


@dataclass
class SettlementOutcome:
    """Result of reconciling one checkout session."""
    provider_status: str
    payment: Optional[Payment] = None
    applied: bool = False  # effects were applied by this call
    already_recorded: bool = False


class SettlementService:

    @staticmethod
    async def create_checkout(
        db: AsyncSession,
        gateway: CheckoutGateway,
        order_id: int,
        principal: Principal
    ) -> Optional[CheckoutSession]:
        """
        Open a hosted checkout session for the principal's order.

        Returns:
            The session, or None when the order is already paid

        Raises:
            ResourceNotFoundError: order missing or owned by someone else
            HTTPException 400: order was cancelled
        """
        order = await db.get(Order, order_id)
        if not order or order.customer_email != principal.email:
            raise ResourceNotFoundError("Order", order_id)

        if order.payment_status == PaymentStatus.PAID:
            return None

        if order.status == OrderStatus.CANCELLED:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot pay for a cancelled order"
            )

        checkout = CheckoutRequest(
            product_name=order.book_title,
            unit_amount=int(round(order.price * 100)),
            quantity=order.quantity,
            currency=settings.payment_currency,
            customer_email=order.customer_email,
            success_url=f"{settings.client_url}/dashboard/payment-success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{settings.client_url}/dashboard/my-orders",
            metadata={
                "orderId": str(order.id),
                "bookId": str(order.book_id),
                "trackingId": order.tracking_id,
            },
        )
        return await gateway.create_checkout_session(checkout)

    @staticmethod
    async def reconcile(
        db: AsyncSession,
        gateway: CheckoutGateway,
        session_id: str
    ) -> SettlementOutcome:
        """
        Apply a checkout session's outcome exactly once.

        Flow:
        1. Retrieve the session from the provider (once)
        2. Idempotency check (existing Payment for the transaction)
        3. Non-paid sessions: no side effects
        4. Mark the order paid and insert the Payment in one transaction

        The ledger event for a settled payment is the caller's job, and only
        when `applied` is True.
        """
        session = await gateway.retrieve_session(session_id)
        # Sessions that needed no charge carry no payment intent
        transaction_id = session.transaction_id or session.session_id

        # Idempotency: a redirect replay finds the payment already recorded
        existing = await _payment_for_transaction(db, transaction_id)
        if existing:
            return SettlementOutcome(
                provider_status=session.payment_status,
                payment=existing,
                already_recorded=True,
            )

        if not session.is_paid:
            return SettlementOutcome(provider_status=session.payment_status)

        order_id = session.metadata.get("orderId")
        order = await db.get(Order, int(order_id)) if order_id else None
        if not order:
            raise ResourceNotFoundError("Order", order_id)

        order.payment_status = PaymentStatus.PAID
        payment = Payment(
            order_id=order.id,
            book_id=order.book_id,
            book_title=order.book_title,
            tracking_id=order.tracking_id,
            transaction_id=transaction_id,
            session_id=session.session_id,
            amount=session.amount_total / 100,
            currency=session.currency,
            payment_status=PaymentStatus.PAID,
            customer_email=session.customer_email or order.customer_email,
        )
        db.add(payment)
        await log_event(
            db=db,
            action=AuditAction.PAYMENT_SETTLED,
            actor_email=payment.customer_email,
            target_type="order",
            target_id=order.id,
            metadata={
                "transaction_id": transaction_id,
                "amount": payment.amount,
                "currency": payment.currency,
            },
            commit=False
        )

        try:
            await db.commit()
        except IntegrityError:
            # A concurrent replay recorded the same transaction first
            await db.rollback()
            existing = await _payment_for_transaction(db, transaction_id)
            return SettlementOutcome(
                provider_status=session.payment_status,
                payment=existing,
                already_recorded=True,
            )

        await db.refresh(payment)
        return SettlementOutcome(
            provider_status=session.payment_status,
            payment=payment,
            applied=True,
        )


async def _payment_for_transaction(db: AsyncSession, transaction_id: str) -> Optional[Payment]:
    result = await db.execute(
        select(Payment).where(Payment.transaction_id == transaction_id)
    )
    return result.scalar_one_or_none()
