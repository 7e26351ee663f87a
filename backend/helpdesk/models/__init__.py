from .base import Base
from .role import Role
from .user import User
from .category import Category, Subcategory, CategoryType
from .priority import Priority
from .ticket import Ticket
from .token import OneTimeToken, TokenPurpose

__all__ = [
    "Base",
    "Role",
    "User",
    "Category",
    "Subcategory",
    "CategoryType",
    "Priority",
    "Ticket",
    "OneTimeToken",
    "TokenPurpose",
]
