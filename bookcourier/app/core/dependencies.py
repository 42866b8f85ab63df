"""
Authentication dependencies for FastAPI.

This module provides dependencies for protecting routes with bearer ID tokens.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from bookcourier.app.core.exceptions import AuthenticationError
from bookcourier.app.core.identity import IdentityVerifier, Principal, get_identity_verifier

# HTTP Bearer security scheme; a missing header is reported as 401 below
security = HTTPBearer(auto_error=False)


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    verifier: IdentityVerifier = Depends(get_identity_verifier)
) -> Principal:
    """
    FastAPI dependency for bearer authentication.

    Args:
        credentials: HTTP Bearer token from request header
        verifier: Identity verifier created at startup

    Returns:
        The authenticated principal

    Raises:
        AuthenticationError: 401 if the token is missing or invalid
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()

    return await verifier.verify(credentials.credentials)
