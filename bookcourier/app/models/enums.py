"""
User roles enumeration.

Defines the role types for the book marketplace.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles are flat: no role implies another.

    Roles:
        USER: Reader who orders books (default role)
        LIBRARIAN: Lists books and fulfils their orders
        ADMIN: Manages users and the catalog
    """
    USER = "user"
    LIBRARIAN = "librarian"
    ADMIN = "admin"
