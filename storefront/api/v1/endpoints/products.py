"""
API endpoints для работы с товарами.

Список товаров поддерживает фильтр по slug категории, поиск по
названию и ограничение количества. Все ответы формируются из снимка
каталога в памяти.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from storefront.api.deps import catalog_json_response, get_catalog_cache
from storefront.core.config import settings
from storefront.schemas.catalog import ProductOut
from storefront.services.catalog_cache import CatalogCache

router = APIRouter()


@router.get("", response_model=List[ProductOut])
def list_products(
    cache: CatalogCache = Depends(get_catalog_cache),
    category_slug: Optional[str] = Query(
        None, alias="categorySlug", description="Фильтр по slug категории"
    ),
    search: Optional[str] = Query(
        None, description="Поиск по названию (без учета регистра)"
    ),
    limit: Optional[int] = Query(
        None, ge=1, description="Максимальное количество товаров"
    ),
):
    """
    Получить список товаров.

    Без фильтров и с лимитом, покрывающим весь каталог, возвращает
    предварительно сериализованный JSON снимка; иначе сериализует
    отфильтрованное подмножество.

    Args:
        cache: Кэш каталога
        category_slug: Slug категории
        search: Подстрока названия
        limit: Максимальное количество товаров

    Returns:
        Response: JSON массив товаров
    """
    return catalog_json_response(
        cache.products_json(category_slug=category_slug, search=search, limit=limit)
    )


@router.get("/slug/{slug}", response_model=ProductOut)
def get_product_by_slug(
    slug: str, response: Response, cache: CatalogCache = Depends(get_catalog_cache)
):
    """
    Получить товар по slug из снимка каталога.

    Raises:
        HTTPException: Если товар не найден
    """
    product = cache.get_product_by_slug(slug)
    if not product:
        raise HTTPException(404, detail="Product not found")
    response.headers["Cache-Control"] = settings.CATALOG_CACHE_CONTROL
    return product


@router.get("/{product_id}", response_model=ProductOut)
def get_product(
    product_id: int,
    response: Response,
    cache: CatalogCache = Depends(get_catalog_cache),
):
    """
    Получить товар по ID из снимка каталога.

    Raises:
        HTTPException: Если товар не найден
    """
    product = cache.get_product(product_id)
    if not product:
        raise HTTPException(404, detail="Product not found")
    response.headers["Cache-Control"] = settings.CATALOG_CACHE_CONTROL
    return product
