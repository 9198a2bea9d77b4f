"""
Debug endpoints для диагностики и отладки.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import func, inspect, select, text
from sqlalchemy.orm import Session

from storefront.api.deps import get_catalog_cache
from storefront.db.database import get_db
from storefront.db.models import Category, Product
from storefront.services.catalog_cache import CatalogCache

router = APIRouter()

# Список таблиц для проверки
TABLES_TO_CHECK = [
    "categories",
    "products",
    "suppliers",
    "users",
]


@router.get("/db-ping")
def db_ping(db: Session = Depends(get_db)):
    """
    Проверка подключения к базе данных.

    Returns:
        dict: Статус подключения и список найденных/отсутствующих таблиц
    """
    try:
        ping_ok = db.execute(text("SELECT 1")).scalar() == 1
        existing = set(inspect(db.get_bind()).get_table_names())
    except Exception as e:
        return {"ok": False, "error": str(e)}

    return {
        "ok": ping_ok,
        "dialect": db.get_bind().dialect.name,
        "tables_present": [t for t in TABLES_TO_CHECK if t in existing],
        "tables_missing": [t for t in TABLES_TO_CHECK if t not in existing],
    }


@router.get("/catalog-drift")
def catalog_drift(
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
):
    """
    Сравнить снимок каталога с базой данных.

    Показывает, отстает ли снимок от базы (например, если
    последние перезагрузки завершились ошибкой).
    """
    snapshot = cache.snapshot
    db_categories = db.scalar(select(func.count()).select_from(Category)) or 0
    db_products = db.scalar(select(func.count()).select_from(Product)) or 0

    return {
        "generation": snapshot.generation,
        "loaded_at": snapshot.loaded_at,
        "snapshot": {
            "categories": len(snapshot.categories),
            "products": len(snapshot.products),
        },
        "database": {"categories": db_categories, "products": db_products},
        "in_sync": (
            len(snapshot.categories) == db_categories
            and len(snapshot.products) == db_products
        ),
        "last_error": cache.last_error,
    }
