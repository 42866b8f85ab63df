"""
Payment gateway port and adapters.

The payment provider hosts the checkout page; we only create sessions and read
their outcome back after the customer is redirected. `StripeCheckoutGateway`
talks to the Stripe REST API over httpx; `FakeCheckoutGateway` keeps sessions
in memory for development and tests.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional
from uuid import uuid4

import httpx
from fastapi import Request

from bookcourier.app.core.config import Settings
from bookcourier.app.core.exceptions import PaymentGatewayError

logger = logging.getLogger("bookcourier.payments")


@dataclass(frozen=True)
class CheckoutRequest:
    """What to charge for and where to send the customer afterwards."""
    product_name: str
    unit_amount: int  # smallest currency unit (cents)
    quantity: int
    currency: str
    customer_email: str
    success_url: str
    cancel_url: str
    metadata: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class CheckoutSession:
    """A created hosted-checkout session."""
    session_id: str
    url: str


@dataclass(frozen=True)
class SessionResult:
    """Settlement state of a checkout session as reported by the provider."""
    session_id: str
    payment_status: str  # "paid", "unpaid", "no_payment_required"
    transaction_id: Optional[str]
    amount_total: int
    currency: str
    customer_email: Optional[str]
    metadata: Dict[str, str] = field(default_factory=dict)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == "paid"


class CheckoutGateway(ABC):
    """Abstract hosted-checkout gateway."""

    @abstractmethod
    async def create_checkout_session(self, checkout: CheckoutRequest) -> CheckoutSession:
        """Create a hosted checkout session."""
        ...

    @abstractmethod
    async def retrieve_session(self, session_id: str) -> SessionResult:
        """Read a checkout session's settlement state."""
        ...

    async def aclose(self) -> None:
        """Release any resources held by the gateway."""


class StripeCheckoutGateway(CheckoutGateway):
    """Stripe Checkout over the REST API."""

    def __init__(self, secret_key: str, api_base: str = "https://api.stripe.com/v1",
                 http_client: Optional[httpx.AsyncClient] = None):
        self.secret_key = secret_key
        self.api_base = api_base.rstrip("/")
        self._client = http_client or httpx.AsyncClient(timeout=15.0)

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.secret_key}"}

    async def _request(self, method: str, path: str, data: Optional[Dict[str, str]] = None) -> dict:
        url = f"{self.api_base}{path}"
        try:
            response = await self._client.request(method, url, data=data, headers=self._headers())
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            error = {}
            if exc.response.headers.get("content-type", "").startswith("application/json"):
                error = exc.response.json().get("error") or {}
            logger.error(
                "Stripe request rejected",
                extra={"path": path, "status_code": exc.response.status_code, "error": error.get("message")},
            )
            raise PaymentGatewayError(
                error.get("message") or "Payment provider rejected the request",
                details={"provider_status": exc.response.status_code},
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("Stripe request failed", extra={"path": path, "error": str(exc)})
            raise PaymentGatewayError() from exc

        return response.json()

    async def create_checkout_session(self, checkout: CheckoutRequest) -> CheckoutSession:
        data = {
            "mode": "payment",
            "customer_email": checkout.customer_email,
            "success_url": checkout.success_url,
            "cancel_url": checkout.cancel_url,
            "line_items[0][quantity]": str(checkout.quantity),
            "line_items[0][price_data][currency]": checkout.currency,
            "line_items[0][price_data][unit_amount]": str(checkout.unit_amount),
            "line_items[0][price_data][product_data][name]": checkout.product_name,
        }
        for key, value in checkout.metadata.items():
            data[f"metadata[{key}]"] = value

        body = await self._request("POST", "/checkout/sessions", data=data)
        return CheckoutSession(session_id=body["id"], url=body["url"])

    async def retrieve_session(self, session_id: str) -> SessionResult:
        body = await self._request("GET", f"/checkout/sessions/{session_id}")

        customer_email = body.get("customer_email")
        if not customer_email and body.get("customer_details"):
            customer_email = body["customer_details"].get("email")

        return SessionResult(
            session_id=body["id"],
            payment_status=body.get("payment_status", "unpaid"),
            transaction_id=body.get("payment_intent"),
            amount_total=body.get("amount_total") or 0,
            currency=body.get("currency") or "",
            customer_email=customer_email,
            metadata=body.get("metadata") or {},
        )

    async def aclose(self) -> None:
        await self._client.aclose()


class FakeCheckoutGateway(CheckoutGateway):
    """In-memory checkout gateway for development and tests."""

    def __init__(self, base_url: str = "https://checkout.example.test"):
        self.base_url = base_url
        self.sessions: Dict[str, dict] = {}

    async def create_checkout_session(self, checkout: CheckoutRequest) -> CheckoutSession:
        session_id = f"cs_fake_{uuid4().hex[:16]}"
        self.sessions[session_id] = {
            "checkout": checkout,
            "payment_status": "unpaid",
            "transaction_id": None,
        }
        return CheckoutSession(session_id=session_id, url=f"{self.base_url}/pay/{session_id}")

    def complete(self, session_id: str) -> str:
        """Simulate the customer paying; returns the transaction id."""
        session = self.sessions[session_id]
        session["payment_status"] = "paid"
        session["transaction_id"] = session["transaction_id"] or f"pi_fake_{uuid4().hex[:16]}"
        return session["transaction_id"]

    async def retrieve_session(self, session_id: str) -> SessionResult:
        session = self.sessions.get(session_id)
        if session is None:
            raise PaymentGatewayError("No such checkout session", details={"session_id": session_id})

        checkout: CheckoutRequest = session["checkout"]
        return SessionResult(
            session_id=session_id,
            payment_status=session["payment_status"],
            transaction_id=session["transaction_id"],
            amount_total=checkout.unit_amount * checkout.quantity,
            currency=checkout.currency,
            customer_email=checkout.customer_email,
            metadata=dict(checkout.metadata),
        )


def build_payment_gateway(settings: Settings) -> CheckoutGateway:
    """Construct the process-wide payment gateway."""
    if settings.payment_gateway == "fake":
        return FakeCheckoutGateway()
    if settings.payment_gateway == "stripe":
        return StripeCheckoutGateway(settings.stripe_secret_key, settings.stripe_api_base)
    raise ValueError(f"Unknown payment gateway: {settings.payment_gateway}")


def get_payment_gateway(request: Request) -> CheckoutGateway:
    """FastAPI dependency returning the gateway created at startup."""
    return request.app.state.payment_gateway
