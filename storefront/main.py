"""
Главный модуль FastAPI приложения KitchenPro Storefront API.

Содержит конфигурацию приложения, middleware и роутеры.
Владеет кэшем каталога и фоновым обновлением его снимка.
"""

import asyncio
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.api.v1.routers import api_router
from storefront.core.config import settings
from storefront.db.database import SessionLocal
from storefront.services.catalog_cache import CatalogCache
from storefront.services.catalog_refresher import CatalogRefresher

# Настройка логирования
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Создание экземпляра FastAPI приложения
app = FastAPI(
    title="KitchenPro Storefront API",
    description="API витрины и админки каталога с кэшем каталога в памяти",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Кэш каталога принадлежит приложению и доступен обработчикам через app.state
app.state.catalog_cache = CatalogCache(SessionLocal)
app.state.catalog_refresher = None


# Настройка CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # TODO: сузить в продакшене до доменов витрины и админки
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/healthz")
def healthz():
    """
    Health check endpoint для мониторинга состояния приложения.

    Returns:
        dict: Статус приложения и состояние снимка каталога
    """
    snapshot = app.state.catalog_cache.snapshot
    return {
        "status": "ok",
        "service": "KitchenPro Storefront API",
        "version": "1.0.0",
        "catalog_generation": snapshot.generation,
        "catalog_populated": snapshot.populated,
    }


# Подключение API роутеров
app.include_router(api_router, prefix="/api")


@app.on_event("startup")
async def startup_event():
    """
    Событие запуска приложения.

    Загружает первый снимок каталога до начала обслуживания запросов
    и запускает фоновое обновление.
    """
    cache: CatalogCache = app.state.catalog_cache
    loop = asyncio.get_running_loop()
    if not await loop.run_in_executor(None, cache.reload):
        logger.warning("Initial catalog load failed, serving empty catalog until next reload")

    if settings.CATALOG_REFRESH_ENABLED:
        refresher = CatalogRefresher(cache, settings.CATALOG_REFRESH_INTERVAL_SECONDS)
        await refresher.start()
        app.state.catalog_refresher = refresher


@app.on_event("shutdown")
async def shutdown_event():
    """
    Событие завершения приложения.

    Останавливает фоновое обновление снимка каталога.
    """
    refresher = app.state.catalog_refresher
    if refresher is not None:
        await refresher.stop()
        app.state.catalog_refresher = None
