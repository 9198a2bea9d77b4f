"""
Модель товара.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from .base import Base

PRODUCT_STATUSES = ("active", "draft", "archived")


class Product(Base):
    """
    Модель товара.

    Attributes:
        id: Уникальный идентификатор товара
        name: Название товара
        slug: URL-friendly название товара
        description: Описание товара
        price_cents: Цена в центах
        compare_at_price_cents: Старая цена (для скидок) в центах
        currency: Валюта цены
        vat_rate: Ставка НДС в процентах
        stock_quantity: Количество на складе
        in_stock: Флаг наличия
        featured: Рекомендуемый товар
        status: Статус товара (active/draft/archived)
        image_url: URL главного изображения
        images: Список URL дополнительных изображений
        product_code: Артикул товара
        category_id: ID категории товара
        supplier_id: ID поставщика
        category: Связь с категорией
        supplier: Связь с поставщиком
    """

    __tablename__ = "products"

    __table_args__ = (
        CheckConstraint(
            "status in ('active','draft','archived')", name="ck_products_status"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Цены и налоги
    price_cents: Mapped[int] = mapped_column(Integer)
    compare_at_price_cents: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True
    )
    currency: Mapped[str] = mapped_column(String(3), default="EUR")
    vat_rate: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Склад
    stock_quantity: Mapped[int] = mapped_column(Integer, default=0)
    in_stock: Mapped[bool] = mapped_column(Boolean, default=True)

    featured: Mapped[bool] = mapped_column(Boolean, default=False)
    status: Mapped[str] = mapped_column(String(20), default="active")

    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    images: Mapped[List[str]] = mapped_column(JSON, default=list)
    product_code: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True, index=True
    )

    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="RESTRICT"), index=True
    )
    supplier_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True
    )

    # Временные метки
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Связи с другими моделями
    category: Mapped["Category"] = relationship(back_populates="products")
    supplier: Mapped[Optional["Supplier"]] = relationship(back_populates="products")

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}')>"
