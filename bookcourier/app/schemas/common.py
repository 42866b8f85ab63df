"""
Shared Pydantic schema building blocks.

Bodies and responses use camelCase keys on the wire.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import Any, Optional


class CamelModel(BaseModel):
    """Base schema serialised with camelCase aliases."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class MutationResponse(CamelModel):
    """
    Outcome of a write.

    Duplicate-prevention no-ops come back with status 200, `success` False
    and an explanatory message.
    """
    success: bool
    message: str
    inserted_id: Optional[Any] = None
    modified_count: Optional[int] = None
    deleted_count: Optional[int] = None
