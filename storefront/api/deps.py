"""
Общие зависимости API.
"""

from fastapi import Request, Response

from storefront.core.config import settings
from storefront.services.catalog_cache import CatalogCache


def get_catalog_cache(request: Request) -> CatalogCache:
    """Dependency для получения кэша каталога приложения."""
    return request.app.state.catalog_cache


def catalog_json_response(content: bytes) -> Response:
    """Ответ витрины с готовым JSON и заголовком кэширования."""
    return Response(
        content=content,
        media_type="application/json",
        headers={"Cache-Control": settings.CATALOG_CACHE_CONTROL},
    )
