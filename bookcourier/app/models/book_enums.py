"""
Book Status Enumeration.
"""

import enum


class BookStatus(str, enum.Enum):
    """
    Book listing status.

    Only PUBLISHED books are shown in the public catalog by default.
    """
    PUBLISHED = "published"
    UNPUBLISHED = "unpublished"
