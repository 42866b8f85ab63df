"""
Identity verification.

The identity provider issues signed ID tokens; this module turns a bearer
credential into an authenticated principal. Verifiers are constructed once at
startup and injected into routes through `get_identity_verifier`.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx
from fastapi import Request

from bookcourier.app.core.config import Settings
from bookcourier.app.core.exceptions import AuthenticationError
from bookcourier.app.core.jwt import decode_identity_token

logger = logging.getLogger("bookcourier.identity")


@dataclass(frozen=True)
class Principal:
    """Authenticated identity derived from a verified credential."""
    email: str
    claims: Dict[str, Any] = field(default_factory=dict)


class IdentityVerifier(ABC):
    """Abstract identity verifier."""

    @abstractmethod
    async def verify(self, token: str) -> Principal:
        """Verify a bearer token, raising AuthenticationError when it is not valid."""
        ...

    async def aclose(self) -> None:
        """Release any resources held by the verifier."""


class JWTIdentityVerifier(IdentityVerifier):
    """
    Verifies ID tokens with python-jose.

    The signing key is either a shared secret or the provider's published JWK
    set. The JWK set is fetched on first use and kept for the process lifetime.
    """

    def __init__(
        self,
        algorithms: List[str],
        secret_key: Optional[str] = None,
        jwks_url: Optional[str] = None,
        audience: Optional[str] = None,
        issuer: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        if not secret_key and not jwks_url:
            raise ValueError("Either secret_key or jwks_url is required")

        self.algorithms = algorithms
        self.secret_key = secret_key
        self.jwks_url = jwks_url
        self.audience = audience
        self.issuer = issuer
        self._http_client = http_client
        self._jwks: Optional[Dict[str, Any]] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "JWTIdentityVerifier":
        if settings.identity_jwks_url:
            return cls(
                algorithms=settings.identity_algorithms,
                jwks_url=settings.identity_jwks_url,
                audience=settings.identity_audience,
                issuer=settings.identity_issuer,
            )
        return cls(
            algorithms=settings.identity_algorithms,
            secret_key=settings.identity_secret_key,
            audience=settings.identity_audience,
            issuer=settings.identity_issuer,
        )

    async def _signing_key(self):
        if self.secret_key:
            return self.secret_key

        if self._jwks is None:
            if self._http_client is None:
                self._http_client = httpx.AsyncClient(timeout=10.0)
            try:
                response = await self._http_client.get(self.jwks_url)
                response.raise_for_status()
            except httpx.HTTPError as exc:
                logger.error("Failed to fetch identity provider keys", extra={"url": self.jwks_url, "error": str(exc)})
                raise AuthenticationError() from exc
            self._jwks = response.json()

        return self._jwks

    async def verify(self, token: str) -> Principal:
        key = await self._signing_key()
        payload = decode_identity_token(
            token,
            key,
            algorithms=self.algorithms,
            audience=self.audience,
            issuer=self.issuer,
        )
        if payload is None:
            raise AuthenticationError()

        email = payload.get("email")
        if not email:
            raise AuthenticationError("Token has no email claim")

        return Principal(email=email.lower(), claims=payload)

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()


def build_identity_verifier(settings: Settings) -> IdentityVerifier:
    """Construct the process-wide identity verifier."""
    return JWTIdentityVerifier.from_settings(settings)


def get_identity_verifier(request: Request) -> IdentityVerifier:
    """FastAPI dependency returning the verifier created at startup."""
    return request.app.state.identity_verifier
