"""
Кэш каталога в памяти процесса.

Витрина отвечает на запросы категорий и товаров только из снимка
каталога, не обращаясь к базе данных. Снимок полностью перестраивается
из базы при старте, по таймеру и после каждого изменения каталога
в админке, и публикуется одной заменой ссылки, поэтому читатели видят
либо старый, либо новый снимок целиком.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from pydantic import TypeAdapter
from sqlalchemy.orm import Session

from storefront.schemas.admin import CatalogCacheStatus
from storefront.schemas.catalog import CategoryOut, ProductOut
from storefront.services import catalog_store

logger = logging.getLogger(__name__)

_categories_adapter = TypeAdapter(List[CategoryOut])
_products_adapter = TypeAdapter(List[ProductOut])


@dataclass(frozen=True)
class CatalogSnapshot:
    """
    Неизменяемый снимок каталога.

    Attributes:
        categories: Все категории в порядке показа
        products: Все товары, отсортированные по ID
        products_by_category: Товары, сгруппированные по slug категории
        products_by_id: Индекс товаров по ID
        products_by_slug: Индекс товаров по slug
        categories_by_slug: Индекс категорий по slug
        categories_json: Предварительно сериализованный список категорий
        products_json: Предварительно сериализованный список товаров
        generation: Номер успешной загрузки (0 для пустого снимка)
        loaded_at: Время загрузки (None для пустого снимка)
    """

    categories: Tuple[CategoryOut, ...] = ()
    products: Tuple[ProductOut, ...] = ()
    products_by_category: Dict[str, Tuple[ProductOut, ...]] = field(default_factory=dict)
    products_by_id: Dict[int, ProductOut] = field(default_factory=dict)
    products_by_slug: Dict[str, ProductOut] = field(default_factory=dict)
    categories_by_slug: Dict[str, CategoryOut] = field(default_factory=dict)
    categories_json: bytes = b"[]"
    products_json: bytes = b"[]"
    generation: int = 0
    loaded_at: Optional[datetime] = None

    @property
    def populated(self) -> bool:
        return self.loaded_at is not None


def build_snapshot(db: Session, generation: int) -> CatalogSnapshot:
    """
    Построить новый снимок каталога из базы данных.

    Все представления строятся из одного чтения категорий и одного
    чтения товаров, поэтому они согласованы между собой.

    Args:
        db: Сессия базы данных
        generation: Номер поколения нового снимка

    Returns:
        CatalogSnapshot: Полностью построенный снимок
    """
    categories = tuple(
        CategoryOut.model_validate(category)
        for category in catalog_store.list_categories(db)
    )
    products = tuple(
        ProductOut.model_validate(product) for product in catalog_store.list_products(db)
    )

    slug_by_category_id = {category.id: category.slug for category in categories}
    grouped: Dict[str, List[ProductOut]] = {category.slug: [] for category in categories}
    for product in products:
        slug = slug_by_category_id.get(product.category_id)
        if slug is not None:
            grouped[slug].append(product)

    return CatalogSnapshot(
        categories=categories,
        products=products,
        products_by_category={slug: tuple(items) for slug, items in grouped.items()},
        products_by_id={product.id: product for product in products},
        products_by_slug={product.slug: product for product in products},
        categories_by_slug={category.slug: category for category in categories},
        categories_json=_categories_adapter.dump_json(list(categories)),
        products_json=_products_adapter.dump_json(list(products)),
        generation=generation,
        loaded_at=datetime.now(timezone.utc),
    )


class CatalogCache:
    """
    Снимок каталога, принадлежащий приложению.

    Экземпляр хранится в app.state и передается в обработчики через
    зависимость. Одновременно выполняется не более одной перезагрузки.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory
        self._snapshot = CatalogSnapshot()
        self._reload_lock = threading.Lock()
        self.last_error: Optional[str] = None

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    @property
    def is_reloading(self) -> bool:
        return self._reload_lock.locked()

    # ==================== ПЕРЕЗАГРУЗКА ====================

    def reload(self, wait: bool = True) -> bool:
        """
        Перезагрузить снимок каталога из базы данных.

        Args:
            wait: Ждать завершения уже идущей перезагрузки. Если False и
                перезагрузка уже выполняется, вызов пропускается.

        Returns:
            bool: True, если новый снимок опубликован
        """
        if not self._reload_lock.acquire(blocking=wait):
            logger.debug("Catalog reload already in progress, skipping")
            return False
        try:
            return self._reload()
        finally:
            self._reload_lock.release()

    def _reload(self) -> bool:
        previous = self._snapshot
        started = time.perf_counter()
        try:
            with self._session_factory() as db:
                snapshot = build_snapshot(db, previous.generation + 1)
        except Exception as e:
            self.last_error = str(e)
            logger.exception(
                f"Catalog reload failed, keeping snapshot generation {previous.generation}"
            )
            return False

        self._snapshot = snapshot
        self.last_error = None
        logger.info(
            f"Catalog snapshot {snapshot.generation} loaded: "
            f"{len(snapshot.categories)} categories, {len(snapshot.products)} products "
            f"in {(time.perf_counter() - started) * 1000:.1f} ms"
        )
        return True

    def invalidate(self, reason: str) -> bool:
        """
        Перезагрузить снимок после изменения каталога.

        Ожидает завершения текущей перезагрузки и выполняет новую, чтобы
        снимок гарантированно отражал уже закоммиченное изменение.
        Ошибка перезагрузки не пробрасывается вызывающему.
        """
        logger.info(f"Catalog invalidated: {reason}")
        return self.reload(wait=True)

    # ==================== ЧТЕНИЕ ====================

    def categories_json(self) -> bytes:
        return self._snapshot.categories_json

    def get_category(self, slug: str) -> Optional[CategoryOut]:
        return self._snapshot.categories_by_slug.get(slug)

    def homepage_categories(self) -> List[CategoryOut]:
        """Категории главной страницы, упорядоченные по позиции."""
        featured = [c for c in self._snapshot.categories if c.is_homepage_featured]
        return sorted(
            featured,
            key=lambda c: (c.homepage_position is None, c.homepage_position or 0),
        )

    def find_products(
        self,
        category_slug: Optional[str] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Sequence[ProductOut]:
        """
        Отфильтровать товары снимка.

        Args:
            category_slug: Slug категории (поиск по индексу)
            search: Подстрока названия без учета регистра
            limit: Максимальное количество результатов

        Returns:
            Sequence[ProductOut]: Подходящие товары в порядке снимка
        """
        return self._filter(self._snapshot, category_slug, search, limit)

    def products_json(
        self,
        category_slug: Optional[str] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> bytes:
        """Сериализованный список товаров с учетом фильтров."""
        snapshot = self._snapshot
        if (
            not category_slug
            and not search
            and (limit is None or limit >= len(snapshot.products))
        ):
            return snapshot.products_json

        items = self._filter(snapshot, category_slug, search, limit)
        return _products_adapter.dump_json(list(items))

    def get_product(self, product_id: int) -> Optional[ProductOut]:
        return self._snapshot.products_by_id.get(product_id)

    def get_product_by_slug(self, slug: str) -> Optional[ProductOut]:
        return self._snapshot.products_by_slug.get(slug)

    def status(self) -> CatalogCacheStatus:
        snapshot = self._snapshot
        return CatalogCacheStatus(
            populated=snapshot.populated,
            generation=snapshot.generation,
            loaded_at=snapshot.loaded_at,
            categories_count=len(snapshot.categories),
            products_count=len(snapshot.products),
            reload_in_progress=self.is_reloading,
            last_error=self.last_error,
        )

    @staticmethod
    def _filter(
        snapshot: CatalogSnapshot,
        category_slug: Optional[str],
        search: Optional[str],
        limit: Optional[int],
    ) -> Sequence[ProductOut]:
        if category_slug:
            items: Sequence[ProductOut] = snapshot.products_by_category.get(
                category_slug, ()
            )
        else:
            items = snapshot.products

        if search:
            needle = search.lower()
            items = [product for product in items if needle in product.name.lower()]

        if limit is not None:
            items = items[:limit]
        return items
