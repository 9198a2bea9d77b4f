#!/usr/bin/env python3
"""
Скрипт для инициализации базы данных.

Использование:
    python init_db.py          # создать таблицы
    python init_db.py --seed   # создать таблицы и демо-каталог
"""

import sys
from pathlib import Path

# Добавляем путь к пакету storefront
sys.path.insert(0, str(Path(__file__).parent))

from sqlalchemy import inspect

from storefront.db.database import SessionLocal, engine
from storefront.db.models import Base
from storefront.db.sample_data import seed_catalog


def init_database(seed: bool = False) -> bool:
    """Создает все таблицы в базе данных и при необходимости наполняет каталог."""
    print("🗄️ Инициализация базы данных...")

    try:
        Base.metadata.create_all(bind=engine)
        print("✅ Все таблицы созданы успешно!")

        tables = inspect(engine).get_table_names()
        print(f"📋 Таблиц в базе: {len(tables)}")
        for table in tables:
            print(f"  - {table}")

        if seed:
            with SessionLocal() as db:
                if seed_catalog(db):
                    print("✅ Демо-каталог загружен")
                else:
                    print("ℹ️ Каталог уже содержит данные, наполнение пропущено")

        return True

    except Exception as e:
        print(f"❌ Ошибка инициализации базы: {e}")
        return False


if __name__ == "__main__":
    success = init_database(seed="--seed" in sys.argv[1:])
    if not success:
        sys.exit(1)
