"""
Основной роутер API.

Подключает все endpoint'ы приложения.
"""

from fastapi import APIRouter

from storefront.api.v1.endpoints import admin, categories, debug, products

# Создание основного роутера API
api_router = APIRouter()

# Подключение роутеров для различных ресурсов
api_router.include_router(products.router, prefix="/products", tags=["products"])
api_router.include_router(categories.router, prefix="/categories", tags=["categories"])
api_router.include_router(debug.router, prefix="/_debug", tags=["_debug"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
