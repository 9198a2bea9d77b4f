"""
Pydantic схемы для административной панели.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from storefront.schemas.catalog import CategoryOut, ProductStatus

# ==================== АУТЕНТИФИКАЦИЯ ====================


class UserOut(BaseModel):
    """Схема для вывода пользователя."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    username: str
    full_name: Optional[str] = None
    is_active: bool
    is_admin: bool
    is_super_admin: bool
    last_login: Optional[datetime] = None


class LoginRequest(BaseModel):
    """Схема для входа в систему."""

    username: str = Field(..., description="Username или email")
    password: str = Field(..., description="Пароль")


class LoginResponse(BaseModel):
    """Схема ответа при входе в систему."""

    access_token: str
    expires_in: int
    user: UserOut


# ==================== КАТЕГОРИИ ====================


class CategoryWithCount(CategoryOut):
    """Категория в списке админки с количеством товаров."""

    products_count: int = 0


# ==================== ПАГИНАЦИЯ ====================


class PageMeta(BaseModel):
    """
    Метаданные пагинации.

    Attributes:
        page: Номер текущей страницы
        page_size: Размер страницы
        total: Общее количество записей
        total_pages: Общее количество страниц
    """

    page: int
    page_size: int
    total: int
    total_pages: int

    @classmethod
    def create(cls, page: int, page_size: int, total: int) -> "PageMeta":
        """Создает экземпляр PageMeta с автоматическим расчетом total_pages."""
        total_pages = max(1, (total + page_size - 1) // page_size)
        return cls(page=page, page_size=page_size, total=total, total_pages=total_pages)


# ==================== МАССОВЫЕ ОПЕРАЦИИ ====================


class BulkProductActionRequest(BaseModel):
    """
    Схема для массовых операций над товарами.

    Действия:
        set_price: установить price_cents
        adjust_price: изменить цену на percent процентов (может быть отрицательным)
        move_category: перенести в category_id
        set_status: установить status
        set_stock: установить stock_quantity
    """

    action: str = Field(
        ...,
        pattern="^(set_price|adjust_price|move_category|set_status|set_stock)$",
        description="Тип действия",
    )
    product_ids: List[int] = Field(..., min_length=1, description="Список ID товаров")
    price_cents: Optional[int] = Field(None, ge=0)
    percent: Optional[float] = Field(None, gt=-100, le=1000)
    category_id: Optional[int] = None
    status: Optional[ProductStatus] = None
    stock_quantity: Optional[int] = Field(None, ge=0)

    @model_validator(mode="after")
    def check_action_value(self):
        required = {
            "set_price": "price_cents",
            "adjust_price": "percent",
            "move_category": "category_id",
            "set_status": "status",
            "set_stock": "stock_quantity",
        }[self.action]
        if getattr(self, required) is None:
            raise ValueError(f"'{required}' is required for action '{self.action}'")
        return self


class BulkActionResult(BaseModel):
    action: str
    updated: int
    message: str


# ==================== ИМПОРТ ====================


class ImportResult(BaseModel):
    """Результат импорта товаров из Excel."""

    total: int = 0
    created: int = 0
    updated: int = 0
    failed: int = 0
    errors: List[str] = Field(default_factory=list)


# ==================== КЭШ КАТАЛОГА ====================


class CatalogCacheStatus(BaseModel):
    """Состояние снимка каталога в памяти процесса."""

    populated: bool
    generation: int
    loaded_at: Optional[datetime] = None
    categories_count: int
    products_count: int
    reload_in_progress: bool
    last_error: Optional[str] = None
