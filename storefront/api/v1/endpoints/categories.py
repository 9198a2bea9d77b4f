"""
API endpoints для работы с категориями товаров.

Все ответы формируются из снимка каталога в памяти,
без запросов к базе данных.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response

from storefront.api.deps import catalog_json_response, get_catalog_cache
from storefront.core.config import settings
from storefront.schemas.catalog import CategoryOut
from storefront.services.catalog_cache import CatalogCache

router = APIRouter()


@router.get("", response_model=List[CategoryOut])
def list_categories(cache: CatalogCache = Depends(get_catalog_cache)):
    """
    Получить список всех категорий.

    Возвращает предварительно сериализованный JSON из снимка каталога,
    отсортированный по sort_order и названию.

    Example:
        [
            {"id": 1, "name": "HACCP Equipment", "slug": "haccp-equipment", ...}
        ]
    """
    return catalog_json_response(cache.categories_json())


@router.get("/homepage", response_model=List[CategoryOut])
def list_homepage_categories(
    response: Response, cache: CatalogCache = Depends(get_catalog_cache)
):
    """Категории главной страницы в порядке homepage_position."""
    response.headers["Cache-Control"] = settings.CATALOG_CACHE_CONTROL
    return cache.homepage_categories()


@router.get("/{slug}", response_model=CategoryOut)
def get_category(
    slug: str, response: Response, cache: CatalogCache = Depends(get_catalog_cache)
):
    """
    Получить категорию по slug.

    Raises:
        HTTPException: Если категория не найдена
    """
    category = cache.get_category(slug)
    if not category:
        raise HTTPException(404, detail="Category not found")
    response.headers["Cache-Control"] = settings.CATALOG_CACHE_CONTROL
    return category
