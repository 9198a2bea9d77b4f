"""
Pydantic схемы каталога: категории, товары и поставщики.

Выходные схемы витрины используются кэшем каталога для
предварительной сериализации снимка.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ProductStatus = Literal["active", "draft", "archived"]


def _reject_null(value):
    """Явный null недопустим для полей, которые в базе NOT NULL."""
    if value is None:
        raise ValueError("field cannot be null")
    return value


# ==================== ВЫВОД ВИТРИНЫ ====================


class CategoryRef(BaseModel):
    """Краткая информация о категории внутри товара."""

    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    slug: str


class SupplierRef(BaseModel):
    """Краткая информация о поставщике внутри товара."""

    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_homepage_featured: bool = False
    homepage_position: Optional[int] = None
    sort_order: int = 0


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    price_cents: int
    compare_at_price_cents: Optional[int] = None
    currency: str
    vat_rate: Optional[int] = None
    stock_quantity: int
    in_stock: bool
    featured: bool
    status: str
    image_url: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    product_code: Optional[str] = None
    category_id: int
    supplier_id: Optional[int] = None
    category: Optional[CategoryRef] = None
    supplier: Optional[SupplierRef] = None


# ==================== КАТЕГОРИИ (АДМИНКА) ====================


class CategoryCreate(BaseModel):
    """Схема для создания категории."""

    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = Field(
        None, max_length=100, description="Генерируется из названия, если не указан"
    )
    description: Optional[str] = None
    image_url: Optional[str] = None
    sort_order: int = 0
    is_homepage_featured: bool = False
    homepage_position: Optional[int] = Field(None, ge=0)


class CategoryUpdate(BaseModel):
    """Схема для обновления категории."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    sort_order: Optional[int] = None
    is_homepage_featured: Optional[bool] = None
    homepage_position: Optional[int] = Field(None, ge=0)

    @field_validator("name", "slug", "sort_order", "is_homepage_featured")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)


class CategoryImageUpdate(BaseModel):
    """Схема для смены изображения категории."""

    image_url: Optional[str] = Field(None, description="URL изображения или null")


class HomepageCategoriesUpdate(BaseModel):
    """Упорядоченный список категорий для главной страницы."""

    category_ids: List[int] = Field(..., description="ID категорий в порядке показа")


# ==================== ТОВАРЫ (АДМИНКА) ====================


class ProductCreate(BaseModel):
    """Схема для создания товара."""

    name: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    price_cents: int = Field(..., ge=0, description="Цена в центах")
    compare_at_price_cents: Optional[int] = Field(None, ge=0)
    currency: str = Field("EUR", pattern="^[A-Z]{3}$")
    vat_rate: Optional[int] = Field(None, ge=0, le=100)
    stock_quantity: int = Field(0, ge=0)
    in_stock: Optional[bool] = None
    featured: bool = False
    status: ProductStatus = "active"
    image_url: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    product_code: Optional[str] = Field(None, max_length=100)
    category_id: int
    supplier_id: Optional[int] = None


class ProductUpdate(BaseModel):
    """Схема для обновления товара (только переданные поля)."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price_cents: Optional[int] = Field(None, ge=0)
    compare_at_price_cents: Optional[int] = Field(None, ge=0)
    currency: Optional[str] = Field(None, pattern="^[A-Z]{3}$")
    vat_rate: Optional[int] = Field(None, ge=0, le=100)
    stock_quantity: Optional[int] = Field(None, ge=0)
    in_stock: Optional[bool] = None
    featured: Optional[bool] = None
    status: Optional[ProductStatus] = None
    image_url: Optional[str] = None
    images: Optional[List[str]] = None
    product_code: Optional[str] = Field(None, max_length=100)
    category_id: Optional[int] = None
    supplier_id: Optional[int] = None

    @field_validator(
        "name",
        "slug",
        "price_cents",
        "currency",
        "stock_quantity",
        "in_stock",
        "featured",
        "status",
        "images",
        "category_id",
    )
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)


# ==================== ПОСТАВЩИКИ (АДМИНКА) ====================


class SupplierOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    contact_person: Optional[str] = None
    country: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool = True


class SupplierCreate(BaseModel):
    """Схема для создания поставщика."""

    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=30)
    contact_person: Optional[str] = Field(None, max_length=255)
    country: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None
    is_active: bool = True


class SupplierUpdate(BaseModel):
    """Схема для обновления поставщика."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=30)
    contact_person: Optional[str] = Field(None, max_length=255)
    country: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("name", "is_active")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)
