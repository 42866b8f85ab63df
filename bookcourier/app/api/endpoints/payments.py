"""
Payment API Endpoints.

Hosted checkout session creation and post-redirect settlement.
"""

from typing import List
from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy import select
from bookcourier.app.db.session import get_db, get_session_factory
from bookcourier.app.models.payment import Payment
from bookcourier.app.models.tracking_enums import TrackingStatus
from bookcourier.app.schemas.payment import (
    CheckoutSessionRequest, CheckoutSessionResponse, PaymentResponse, PaymentSuccessResponse
)
from bookcourier.app.core.dependencies import get_current_principal
from bookcourier.app.core.identity import Principal
from bookcourier.app.domain.payments.settlement_service import SettlementService
from bookcourier.app.services.payment_gateway import CheckoutGateway, get_payment_gateway
from bookcourier.app.services.tracking import record_tracking_event

router = APIRouter(tags=["Payments"])


@router.get("/payments", response_model=List[PaymentResponse])
async def list_my_payments(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """List the principal's payments, newest first."""
    result = await db.execute(
        select(Payment)
        .where(Payment.customer_email == principal.email)
        .order_by(Payment.paid_at.desc(), Payment.id.desc())
    )
    return result.scalars().all()


@router.post("/payment-checkout-session", response_model=CheckoutSessionResponse)
async def create_checkout_session(
    checkout_data: CheckoutSessionRequest,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
    gateway: CheckoutGateway = Depends(get_payment_gateway)
):
    """Open a hosted checkout session for one of the principal's orders."""
    session = await SettlementService.create_checkout(db, gateway, checkout_data.order_id, principal)
    if session is None:
        return CheckoutSessionResponse(success=False, message="Order is already paid")

    return CheckoutSessionResponse(
        success=True,
        message="Checkout session created",
        url=session.url,
        session_id=session.session_id
    )


@router.patch("/payment-success", response_model=PaymentSuccessResponse)
async def payment_success(
    background_tasks: BackgroundTasks,
    session_id: str = Query(..., min_length=1, description="Checkout session ID"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
    gateway: CheckoutGateway = Depends(get_payment_gateway),
    session_factory: async_sessionmaker = Depends(get_session_factory)
):
    """
    Reconcile a checkout session after the provider redirects back.

    Safe to call repeatedly: the order is credited and `payment_completed`
    is recorded only the first time.
    """
    outcome = await SettlementService.reconcile(db, gateway, session_id)

    if outcome.payment is None:
        return PaymentSuccessResponse(
            success=False,
            message="Payment has not been completed",
            provider_status=outcome.provider_status
        )

    payment = outcome.payment
    if outcome.applied and payment.tracking_id:
        background_tasks.add_task(
            record_tracking_event, session_factory, payment.tracking_id, TrackingStatus.PAYMENT_COMPLETED
        )

    return PaymentSuccessResponse(
        success=True,
        message="Payment already recorded" if outcome.already_recorded else "Payment recorded",
        provider_status=outcome.provider_status,
        already_recorded=outcome.already_recorded,
        transaction_id=payment.transaction_id,
        tracking_id=payment.tracking_id,
        payment=PaymentResponse.model_validate(payment)
    )
