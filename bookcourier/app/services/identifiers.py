"""
Public identifier generation for users, books and orders.
"""

import secrets
from datetime import datetime, timezone
from typing import Optional

from bookcourier.app.core.config import settings


def generate_tracking_id(prefix: Optional[str] = None, now: Optional[datetime] = None) -> str:
    """
    Generate a tracking id of the form ``<PREFIX>-<YYYYMMDD>-<RANDOMHEX>``.

    Example: ``BOOK-20240101-AB12CD``
    """
    now = now or datetime.now(timezone.utc)
    random_part = secrets.token_hex(3).upper()
    return f"{prefix or settings.tracking_prefix}-{now.strftime('%Y%m%d')}-{random_part}"


def generate_user_id(now: Optional[datetime] = None) -> str:
    """
    Generate a public user id such as ``USER-240101T12:-A1B2C3D4E5``.

    The middle part is characters 2-13 of the ISO timestamp with dashes
    removed, which existing client data already depends on.
    """
    now = now or datetime.now(timezone.utc)
    stamp = now.strftime("%Y-%m-%dT%H:%M:%S")[2:14].replace("-", "")
    return f"USER-{stamp}-{secrets.token_hex(5).upper()}"
