"""
Декларативная база моделей каталога.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Общая база для категорий, товаров, поставщиков и пользователей."""
