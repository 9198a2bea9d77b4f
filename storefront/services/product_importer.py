"""Импорт товаров из Excel файла."""

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from io import BytesIO
from typing import Any, Dict, List, Optional

import openpyxl
from sqlalchemy.orm import Session

from storefront.core.slugs import slugify
from storefront.db.models import Product
from storefront.db.models.product import PRODUCT_STATUSES
from storefront.schemas.admin import ImportResult
from storefront.services import catalog_store

logger = logging.getLogger(__name__)

# Верхняя граница колонок Integer
MAX_INTEGER = 2_147_483_647


class ProductImporter:
    """Импортер товаров: создает новые и обновляет существующие товары."""

    # Поддерживаемые названия колонок
    COLUMN_MAPPINGS = {
        "name": ["name", "product name", "product", "title", "nume"],
        "slug": ["slug"],
        "price": ["price", "pret", "price_eur"],
        "compare_at_price": ["compare_at_price", "compare at price", "old price", "old_price"],
        "stock_quantity": ["stock", "stock_quantity", "quantity", "qty", "stoc"],
        "category": ["category", "category_slug", "categorie"],
        "product_code": ["product_code", "code", "sku", "cod"],
        "currency": ["currency", "moneda"],
        "vat_rate": ["vat", "vat_rate", "tva"],
        "status": ["status"],
        "description": ["description", "descriere"],
    }
    REQUIRED_COLUMNS = ("name", "price", "category")

    def __init__(self, db: Session):
        self.db = db
        self._categories = {}

    def import_excel(self, content: bytes) -> ImportResult:
        """
        Импортировать товары из первого листа книги Excel.

        Первая строка используется как заголовок. Товар ищется по артикулу,
        затем по slug; найденный обновляется, иначе создается новый.

        Args:
            content: Содержимое .xlsx файла

        Returns:
            ImportResult: Количество созданных, обновленных и ошибочных строк
        """
        result = ImportResult()

        try:
            rows = read_rows(content)
        except Exception as e:
            result.errors.append(f"Cannot read workbook: {e}")
            return result

        if not rows:
            result.errors.append("Workbook is empty")
            return result

        column_map = self._find_column_mapping(rows[0])
        missing = [column for column in self.REQUIRED_COLUMNS if column not in column_map]
        if missing:
            result.errors.append(f"Missing required columns: {', '.join(missing)}")
            return result

        self._categories = {
            category.slug: category
            for category in catalog_store.list_categories(self.db)
        }

        for line_no, row in enumerate(rows[1:], start=2):
            if all(cell is None or str(cell).strip() == "" for cell in row):
                continue

            result.total += 1
            try:
                values = self._parse_row(row, column_map)
                if self._upsert(values):
                    result.created += 1
                else:
                    result.updated += 1
            except ValueError as e:
                result.failed += 1
                result.errors.append(f"Row {line_no}: {e}")

        if result.created or result.updated:
            self.db.commit()

        logger.info(
            f"Product import finished: {result.created} created, "
            f"{result.updated} updated, {result.failed} failed"
        )
        return result

    def _find_column_mapping(self, headers) -> Dict[str, int]:
        """Сопоставить заголовки колонок с полями товара."""
        normalized = [str(h).strip().lower() if h is not None else "" for h in headers]
        column_map = {}
        for field, aliases in self.COLUMN_MAPPINGS.items():
            for index, header in enumerate(normalized):
                if header in aliases:
                    column_map[field] = index
                    break
        return column_map

    def _parse_row(self, row, column_map: Dict[str, int]) -> Dict[str, Any]:
        def cell(field: str) -> Optional[Any]:
            index = column_map.get(field)
            if index is None or index >= len(row):
                return None
            value = row[index]
            if isinstance(value, str):
                value = value.strip()
                return value or None
            return value

        name = cell("name")
        if not name:
            raise ValueError("name is required")
        name = str(name)

        category_value = cell("category")
        if category_value is None:
            raise ValueError("category is required")
        category = self._categories.get(slugify(str(category_value)))
        if category is None:
            raise ValueError(f"unknown category '{category_value}'")

        values: Dict[str, Any] = {
            "name": name,
            "slug": slugify(str(cell("slug") or name)),
            "price_cents": _to_cents(cell("price"), "price"),
            "category_id": category.id,
        }
        if not values["slug"]:
            raise ValueError("cannot build slug from name")

        compare_at = cell("compare_at_price")
        if compare_at is not None:
            values["compare_at_price_cents"] = _to_cents(compare_at, "compare_at_price")

        stock = cell("stock_quantity")
        if stock is not None:
            values["stock_quantity"] = _to_int(stock, "stock")
            values["in_stock"] = values["stock_quantity"] > 0

        vat = cell("vat_rate")
        if vat is not None:
            values["vat_rate"] = _to_int(vat, "vat")
            if values["vat_rate"] > 100:
                raise ValueError("vat must not exceed 100")

        currency = cell("currency")
        if currency is not None:
            currency = str(currency).upper()
            if len(currency) != 3 or not currency.isalpha():
                raise ValueError(f"invalid currency '{currency}'")
            values["currency"] = currency

        status = cell("status")
        if status is not None:
            status = str(status).lower()
            if status not in PRODUCT_STATUSES:
                raise ValueError(f"invalid status '{status}'")
            values["status"] = status

        code = cell("product_code")
        if code is not None:
            values["product_code"] = str(code)

        description = cell("description")
        if description is not None:
            values["description"] = str(description)

        return values

    def _upsert(self, values: Dict[str, Any]) -> bool:
        """Создать или обновить товар. Возвращает True, если товар создан."""
        product = None
        code = values.get("product_code")
        if code:
            product = catalog_store.get_product_by_code(self.db, code)

        slug_owner = catalog_store.get_product_by_slug(self.db, values["slug"])
        if product is None:
            product = slug_owner
        elif slug_owner is not None and slug_owner.id != product.id:
            raise ValueError(f"slug '{values['slug']}' is used by product {slug_owner.id}")

        if product is None:
            values.setdefault("in_stock", values.get("stock_quantity", 0) > 0)
            self.db.add(Product(**values))
            self.db.flush()
            return True

        for field, value in values.items():
            setattr(product, field, value)
        self.db.flush()
        return False


def _to_decimal(value: Any, field: str) -> Decimal:
    try:
        amount = Decimal(str(value).replace(",", "."))
    except InvalidOperation:
        raise ValueError(f"invalid {field} '{value}'")
    if not amount.is_finite():
        raise ValueError(f"invalid {field} '{value}'")
    if amount < 0:
        raise ValueError(f"{field} must not be negative")
    if amount > MAX_INTEGER:
        raise ValueError(f"{field} is too large")
    return amount


def _to_cents(value: Any, field: str) -> int:
    """Преобразовать цену (12.50, "12,50") в центы."""
    if value is None:
        raise ValueError(f"{field} is required")
    cents = _to_decimal(value, field) * 100
    if cents > MAX_INTEGER:
        raise ValueError(f"{field} is too large")
    return int(cents.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _to_int(value: Any, field: str) -> int:
    """Целое неотрицательное число (остаток, НДС)."""
    number = _to_decimal(value, field)
    if number != number.to_integral_value():
        raise ValueError(f"{field} must be a whole number")
    return int(number)


def read_rows(content: bytes) -> List[tuple]:
    """Прочитать строки первого листа книги Excel."""
    workbook = openpyxl.load_workbook(BytesIO(content), read_only=True, data_only=True)
    try:
        return list(workbook.active.iter_rows(values_only=True))
    finally:
        workbook.close()
