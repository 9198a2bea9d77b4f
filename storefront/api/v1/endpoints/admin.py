"""
API эндпоинты для административной панели каталога.

Каждое изменение каталога сначала фиксируется в базе данных, затем
синхронно перезагружает снимок каталога до отправки ответа. Ошибка
перезагрузки не влияет на ответ: изменение уже сохранено в базе.
"""

from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from storefront.api.deps import get_catalog_cache
from storefront.core.auth import auth_service, require_admin
from storefront.core.config import settings
from storefront.core.slugs import slugify
from storefront.db.database import get_db
from storefront.db.models import Category, Product, Supplier, User
from storefront.schemas.admin import (
    BulkActionResult,
    BulkProductActionRequest,
    CatalogCacheStatus,
    CategoryWithCount,
    ImportResult,
    LoginRequest,
    LoginResponse,
    PageMeta,
    UserOut,
)
from storefront.schemas.catalog import (
    CategoryCreate,
    CategoryImageUpdate,
    CategoryOut,
    CategoryUpdate,
    HomepageCategoriesUpdate,
    ProductCreate,
    ProductOut,
    ProductUpdate,
    SupplierCreate,
    SupplierOut,
    SupplierUpdate,
)
from storefront.services import catalog_store
from storefront.services.catalog_cache import CatalogCache
from storefront.services.product_importer import ProductImporter

router = APIRouter()


# ==================== АУТЕНТИФИКАЦИЯ ====================


@router.post("/auth/login", response_model=LoginResponse)
def admin_login(login_data: LoginRequest, db: Session = Depends(get_db)):
    """
    Вход в административную панель.

    Args:
        login_data: Данные для входа (username или email, password)
        db: Сессия базы данных

    Returns:
        JWT токен и информация о пользователе

    Raises:
        HTTPException: При неверных учетных данных или отсутствии прав
    """
    user = db.scalar(
        select(User).where(
            or_(User.username == login_data.username, User.email == login_data.username)
        )
    )

    if not user or not auth_service.verify_password(
        login_data.password, user.hashed_password
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="User account is disabled"
        )

    if not user.can_manage_catalog:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Admin privileges required.",
        )

    user.last_login = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)

    access_token = auth_service.create_access_token(data={"sub": str(user.id)})
    return LoginResponse(
        access_token=access_token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=UserOut.model_validate(user),
    )


# ==================== КЭШ КАТАЛОГА ====================


@router.get("/catalog-cache", response_model=CatalogCacheStatus)
def catalog_cache_status(
    current_user: User = Depends(require_admin),
    cache: CatalogCache = Depends(get_catalog_cache),
):
    """Состояние снимка каталога."""
    return cache.status()


@router.post("/catalog-cache/reload", response_model=CatalogCacheStatus)
def reload_catalog_cache(
    current_user: User = Depends(require_admin),
    cache: CatalogCache = Depends(get_catalog_cache),
):
    """Принудительно перезагрузить снимок каталога."""
    cache.invalidate("manual reload")
    return cache.status()


# ==================== УПРАВЛЕНИЕ КАТЕГОРИЯМИ ====================


@router.get("/categories", response_model=List[CategoryWithCount])
def admin_list_categories(
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Получить список категорий для админки с количеством товаров.
    """
    stmt = (
        select(Category, func.count(Product.id).label("products_count"))
        .outerjoin(Product, Product.category_id == Category.id)
        .group_by(Category.id)
        .order_by(Category.sort_order, Category.name, Category.id)
    )

    return [
        CategoryWithCount(
            **CategoryOut.model_validate(category).model_dump(),
            products_count=products_count,
        )
        for category, products_count in db.execute(stmt).all()
    ]


@router.put("/categories/homepage", response_model=List[CategoryOut])
def admin_set_homepage_categories(
    data: HomepageCategoriesUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
):
    """
    Переназначить категории главной страницы.

    Категории из списка помечаются для главной страницы в указанном
    порядке, все остальные снимаются с нее.
    """
    if len(set(data.category_ids)) != len(data.category_ids):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Duplicate category ids",
        )

    categories = {c.id: c for c in catalog_store.list_categories(db)}
    unknown = [cid for cid in data.category_ids if cid not in categories]
    if unknown:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown category ids: {unknown}",
        )

    for category in categories.values():
        category.is_homepage_featured = False
        category.homepage_position = None
    for position, category_id in enumerate(data.category_ids):
        categories[category_id].is_homepage_featured = True
        categories[category_id].homepage_position = position

    db.commit()
    cache.invalidate("homepage categories reassigned")

    return [CategoryOut.model_validate(categories[cid]) for cid in data.category_ids]


@router.post("/categories", response_model=CategoryOut)
def admin_create_category(
    category_data: CategoryCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
):
    """
    Создать новую категорию.

    Slug генерируется из названия, если не передан явно.
    """
    slug = slugify(category_data.slug or category_data.name)
    if not slug:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot build slug from category name",
        )

    if catalog_store.get_category_by_slug(db, slug):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Category with this slug already exists",
        )

    new_category = Category(**category_data.model_dump(exclude={"slug"}), slug=slug)
    db.add(new_category)
    db.commit()
    db.refresh(new_category)

    cache.invalidate(f"category {new_category.id} created")
    return new_category


@router.put("/categories/{category_id}", response_model=CategoryOut)
def admin_update_category(
    category_id: int,
    category_data: CategoryUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
):
    """
    Обновить категорию.
    """
    category = catalog_store.get_category(db, category_id)
    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Category not found"
        )

    changes = category_data.model_dump(exclude_unset=True)

    # Проверяем уникальность slug если он изменился
    new_slug = changes.pop("slug", None)
    if new_slug:
        new_slug = slugify(new_slug)
        if not new_slug:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid slug"
            )
        if new_slug != category.slug:
            if catalog_store.get_category_by_slug(db, new_slug):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Category with this slug already exists",
                )
            category.slug = new_slug

    for field, value in changes.items():
        setattr(category, field, value)

    db.commit()
    db.refresh(category)

    cache.invalidate(f"category {category.id} updated")
    return category


@router.put("/categories/{category_id}/image", response_model=CategoryOut)
def admin_set_category_image(
    category_id: int,
    image_data: CategoryImageUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
):
    """Установить (или убрать) изображение категории."""
    category = catalog_store.get_category(db, category_id)
    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Category not found"
        )

    category.image_url = image_data.image_url
    db.commit()
    db.refresh(category)

    cache.invalidate(f"category {category.id} image changed")
    return category


@router.delete("/categories/{category_id}")
def admin_delete_category(
    category_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
):
    """
    Удалить категорию.

    Категорию с товарами удалить нельзя.
    """
    category = catalog_store.get_category(db, category_id)
    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Category not found"
        )

    products_count = db.scalar(
        select(func.count(Product.id)).where(Product.category_id == category_id)
    ) or 0

    if products_count > 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot delete category with {products_count} products"
        )

    db.delete(category)
    db.commit()

    cache.invalidate(f"category {category_id} deleted")
    return {"message": "Category deleted successfully"}


# ==================== УПРАВЛЕНИЕ ТОВАРАМИ ====================


def _check_references(
    db: Session, category_id: Optional[int], supplier_id: Optional[int]
) -> None:
    """Проверить, что категория и поставщик существуют."""
    if category_id is not None and not catalog_store.get_category(db, category_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Category not found"
        )
    if supplier_id is not None and not catalog_store.get_supplier(db, supplier_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Supplier not found"
        )


@router.get("/products", response_model=dict)
def admin_list_products(
    q: Optional[str] = Query(None, description="Поиск по названию"),
    category_id: Optional[int] = Query(None, description="Фильтр по категории"),
    page: int = Query(1, ge=1, description="Номер страницы"),
    page_size: int = Query(20, ge=1, le=100, description="Размер страницы"),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Получить список товаров для админки напрямую из базы данных.
    """
    count_stmt = select(func.count()).select_from(Product)
    if category_id is not None:
        count_stmt = count_stmt.where(Product.category_id == category_id)
    if q:
        count_stmt = count_stmt.where(Product.name.ilike(f"%{q}%"))
    total = db.scalar(count_stmt) or 0

    products = catalog_store.list_products(
        db,
        category_id=category_id,
        search=q,
        limit=page_size,
        offset=(page - 1) * page_size,
    )

    return {
        "items": [ProductOut.model_validate(p).model_dump() for p in products],
        "meta": PageMeta.create(page=page, page_size=page_size, total=total).model_dump(),
    }


@router.get("/products/{product_id}", response_model=ProductOut)
def admin_get_product(
    product_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Получить товар напрямую из базы данных.
    """
    product = db.scalar(
        select(Product)
        .options(selectinload(Product.category), selectinload(Product.supplier))
        .where(Product.id == product_id)
    )
    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
        )
    return product


@router.post("/products", response_model=ProductOut)
def admin_create_product(
    product_data: ProductCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
):
    """
    Создать новый товар.

    Slug генерируется из названия, если не передан явно.
    """
    _check_references(db, product_data.category_id, product_data.supplier_id)

    slug = slugify(product_data.slug or product_data.name)
    if not slug:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot build slug from product name",
        )
    if catalog_store.get_product_by_slug(db, slug):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Product with this slug already exists",
        )

    values = product_data.model_dump(exclude={"slug"})
    if values["in_stock"] is None:
        values["in_stock"] = values["stock_quantity"] > 0

    new_product = Product(**values, slug=slug)
    db.add(new_product)
    db.commit()
    db.refresh(new_product)

    cache.invalidate(f"product {new_product.id} created")
    return new_product


@router.put("/products/{product_id}", response_model=ProductOut)
def admin_update_product(
    product_id: int,
    product_data: ProductUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
):
    """
    Обновить товар (только переданные поля).
    """
    product = catalog_store.get_product(db, product_id)
    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
        )

    changes = product_data.model_dump(exclude_unset=True)
    _check_references(db, changes.get("category_id"), changes.get("supplier_id"))

    if "slug" in changes:
        new_slug = slugify(changes["slug"] or "")
        if not new_slug:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid slug"
            )
        owner = catalog_store.get_product_by_slug(db, new_slug)
        if owner and owner.id != product.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Product with this slug already exists",
            )
        changes["slug"] = new_slug

    if changes.get("stock_quantity") is not None and "in_stock" not in changes:
        changes["in_stock"] = changes["stock_quantity"] > 0

    # Обновляем только переданные поля
    for field, value in changes.items():
        setattr(product, field, value)

    db.commit()
    db.refresh(product)

    cache.invalidate(f"product {product.id} updated")
    return product


@router.delete("/products/{product_id}")
def admin_delete_product(
    product_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
):
    """
    Удалить товар.
    """
    product = catalog_store.get_product(db, product_id)
    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
        )

    db.delete(product)
    db.commit()

    cache.invalidate(f"product {product_id} deleted")
    return {"message": "Product deleted successfully"}


@router.post("/products/bulk-actions", response_model=BulkActionResult)
def admin_bulk_product_actions(
    bulk_data: BulkProductActionRequest,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
):
    """
    Выполнить массовые операции над товарами.

    Поддерживаются изменение цены (установка или процент),
    перенос в категорию, смена статуса и остатка.
    """
    action = bulk_data.action
    products_query = db.query(Product).filter(Product.id.in_(bulk_data.product_ids))

    if action == "set_price":
        updated = products_query.update(
            {"price_cents": bulk_data.price_cents}, synchronize_session=False
        )

    elif action == "adjust_price":
        factor = 1 + bulk_data.percent / 100
        products = products_query.all()
        for product in products:
            product.price_cents = max(0, round(product.price_cents * factor))
        updated = len(products)

    elif action == "move_category":
        _check_references(db, bulk_data.category_id, None)
        updated = products_query.update(
            {"category_id": bulk_data.category_id}, synchronize_session=False
        )

    elif action == "set_status":
        updated = products_query.update(
            {"status": bulk_data.status}, synchronize_session=False
        )

    else:
        updated = products_query.update(
            {
                "stock_quantity": bulk_data.stock_quantity,
                "in_stock": bulk_data.stock_quantity > 0,
            },
            synchronize_session=False,
        )

    db.commit()

    cache.invalidate(f"bulk {action} on {updated} products")
    return BulkActionResult(
        action=action, updated=updated, message=f"Updated {updated} products"
    )


@router.post("/products/import", response_model=ImportResult)
def admin_import_products(
    file: UploadFile = File(..., description="Файл .xlsx с товарами"),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
):
    """
    Импортировать товары из Excel.

    Существующие товары (по артикулу или slug) обновляются,
    остальные создаются.
    """
    if not (file.filename or "").lower().endswith(".xlsx"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only .xlsx files are supported",
        )

    content = file.file.read()
    if len(content) > settings.MAX_IMPORT_FILE_SIZE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Import file is too large",
        )

    result = ProductImporter(db).import_excel(content)
    if result.created or result.updated:
        cache.invalidate(
            f"import: {result.created} created, {result.updated} updated"
        )
    return result


# ==================== ПОСТАВЩИКИ ====================


@router.get("/suppliers", response_model=List[SupplierOut])
def admin_list_suppliers(
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Получить список поставщиков."""
    return db.scalars(select(Supplier).order_by(Supplier.name, Supplier.id)).all()


@router.post("/suppliers", response_model=SupplierOut)
def admin_create_supplier(
    supplier_data: SupplierCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Создать поставщика.

    Новый поставщик еще не связан с товарами, поэтому снимок
    каталога не перезагружается.
    """
    supplier = Supplier(**supplier_data.model_dump())
    db.add(supplier)
    db.commit()
    db.refresh(supplier)
    return supplier


@router.put("/suppliers/{supplier_id}", response_model=SupplierOut)
def admin_update_supplier(
    supplier_id: int,
    supplier_data: SupplierUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
):
    """Обновить поставщика."""
    supplier = catalog_store.get_supplier(db, supplier_id)
    if not supplier:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Supplier not found"
        )

    for field, value in supplier_data.model_dump(exclude_unset=True).items():
        setattr(supplier, field, value)

    db.commit()
    db.refresh(supplier)

    cache.invalidate(f"supplier {supplier.id} updated")
    return supplier


@router.delete("/suppliers/{supplier_id}")
def admin_delete_supplier(
    supplier_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
):
    """
    Удалить поставщика.

    Товары поставщика остаются в каталоге без поставщика.
    """
    supplier = catalog_store.get_supplier(db, supplier_id)
    if not supplier:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Supplier not found"
        )

    detached = (
        db.query(Product)
        .filter(Product.supplier_id == supplier_id)
        .update({"supplier_id": None}, synchronize_session=False)
    )
    db.delete(supplier)
    db.commit()

    cache.invalidate(f"supplier {supplier_id} deleted")
    return {"message": "Supplier deleted successfully", "detached_products": detached}
