"""
Модели базы данных.

Импортирует все модели для корректной работы SQLAlchemy.
"""

from .base import Base
from .category import Category
from .product import Product
from .supplier import Supplier
from .user import User

__all__ = [
    "Base",
    "Category",
    "Product",
    "Supplier",
    "User",
]
