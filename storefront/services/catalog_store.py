"""
Доступ к каталогу в базе данных.

Функции выполняют запросы категорий и товаров и не хранят
никакого состояния кэша.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from storefront.db.models import Category, Product, Supplier


def list_categories(db: Session) -> List[Category]:
    """Все категории в порядке показа на витрине."""
    stmt = select(Category).order_by(Category.sort_order, Category.name, Category.id)
    return list(db.scalars(stmt).all())


def list_products(
    db: Session,
    category_id: Optional[int] = None,
    search: Optional[str] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
) -> List[Product]:
    """
    Товары с подгруженными категорией и поставщиком.

    Args:
        db: Сессия базы данных
        category_id: Фильтр по ID категории
        search: Поиск по названию (ILIKE)
        limit: Максимальное количество товаров
        offset: Смещение

    Returns:
        List[Product]: Товары, отсортированные по ID
    """
    stmt = select(Product).options(
        selectinload(Product.category), selectinload(Product.supplier)
    )
    if category_id is not None:
        stmt = stmt.where(Product.category_id == category_id)
    if search:
        stmt = stmt.where(Product.name.ilike(f"%{search}%"))

    stmt = stmt.order_by(Product.id)
    if offset:
        stmt = stmt.offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)

    return list(db.scalars(stmt).all())


def get_category(db: Session, category_id: int) -> Optional[Category]:
    return db.get(Category, category_id)


def get_category_by_slug(db: Session, slug: str) -> Optional[Category]:
    return db.scalar(select(Category).where(Category.slug == slug))


def get_product(db: Session, product_id: int) -> Optional[Product]:
    return db.get(Product, product_id)


def get_product_by_slug(db: Session, slug: str) -> Optional[Product]:
    return db.scalar(select(Product).where(Product.slug == slug))


def get_product_by_code(db: Session, product_code: str) -> Optional[Product]:
    return db.scalar(select(Product).where(Product.product_code == product_code))


def get_supplier(db: Session, supplier_id: int) -> Optional[Supplier]:
    return db.get(Supplier, supplier_id)
