"""
JWT token utilities for identity tokens.

Thin wrappers around python-jose used by the identity verifier and by tooling
that needs to mint tokens signed with a shared secret (seeding, local testing).
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, List, Union
from jose import JWTError, jwt
from bookcourier.app.core.config import settings


def create_identity_token(
    email: str,
    expires_delta: Optional[timedelta] = None,
    extra_claims: Optional[Dict[str, Any]] = None,
    secret_key: Optional[str] = None,
    algorithm: Optional[str] = None,
) -> str:
    """
    Create a signed ID token for the given email.

    Args:
        email: Principal email placed in the `email` claim (also used as `sub`)
        expires_delta: Optional custom expiration time (defaults to one hour)
        extra_claims: Additional claims such as `aud` or `iss`
        secret_key: Signing key (defaults to the configured identity secret)
        algorithm: Signing algorithm (defaults to the first configured one)

    Returns:
        Encoded JWT string
    """
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=1))

    to_encode = {"sub": email, "email": email, "exp": expire}
    if extra_claims:
        to_encode.update(extra_claims)

    return jwt.encode(
        to_encode,
        secret_key or settings.identity_secret_key,
        algorithm=algorithm or settings.identity_algorithms[0],
    )


def decode_identity_token(
    token: str,
    key: Union[str, Dict[str, Any]],
    algorithms: List[str],
    audience: Optional[str] = None,
    issuer: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """
    Decode and validate an ID token.

    Args:
        token: JWT string to decode
        key: Shared secret, or a JWK set (``{"keys": [...]}``)
        algorithms: Accepted signing algorithms
        audience: Expected `aud` claim, if any
        issuer: Expected `iss` claim, if any

    Returns:
        Decoded payload if valid, None otherwise
    """
    options = {"verify_aud": audience is not None}
    try:
        return jwt.decode(
            token,
            key,
            algorithms=algorithms,
            audience=audience,
            issuer=issuer,
            options=options,
        )
    except JWTError:
        return None
