"""Тесты админки каталога: изменения сразу видны на витрине."""
import pytest

from conftest import make_category, make_product, make_supplier
from storefront.db.models import Category, Product
from storefront.services import catalog_store


def storefront_names(client, **params):
    response = client.get("/api/products", params=params)
    assert response.status_code == 200
    return [p["name"] for p in response.json()]


# ==================== ТОВАРЫ ====================


def test_created_product_visible_immediately(catalog, cache, client):
    cache.reload()
    response = client.post(
        "/api/admin/products",
        json={
            "name": "Temperature Log Book",
            "price_cents": 1299,
            "category_id": catalog["haccp"].id,
            "stock_quantity": 10,
        },
    )
    assert response.status_code == 200
    created = response.json()
    assert created["slug"] == "temperature-log-book"
    assert created["in_stock"] is True

    assert storefront_names(client, categorySlug="haccp-equipment") == [
        "Digital Food Thermometer",
        "Temperature Log Book",
    ]
    assert client.get(f"/api/products/{created['id']}").status_code == 200


def test_create_product_with_unknown_category(catalog, client):
    response = client.post(
        "/api/admin/products",
        json={"name": "Orphan", "price_cents": 100, "category_id": 9999},
    )
    assert response.status_code == 400


def test_create_product_duplicate_slug(catalog, client):
    response = client.post(
        "/api/admin/products",
        json={
            "name": "Chef Knife Set",
            "price_cents": 100,
            "category_id": catalog["kitchen"].id,
        },
    )
    assert response.status_code == 400
    assert "slug" in response.json()["detail"]


def test_updated_product_visible_immediately(catalog, cache, client):
    cache.reload()
    product = catalog["products"][0]

    response = client.put(
        f"/api/admin/products/{product.id}",
        json={"price_cents": 2999, "name": "Digital Probe Thermometer"},
    )
    assert response.status_code == 200

    data = client.get(f"/api/products/{product.id}").json()
    assert data["price_cents"] == 2999
    assert data["name"] == "Digital Probe Thermometer"
    # Старое название больше не находится поиском
    assert storefront_names(client, search="food") == []


def test_moved_product_changes_category_group(catalog, cache, client):
    cache.reload()
    product = catalog["products"][1]

    response = client.put(
        f"/api/admin/products/{product.id}",
        json={"category_id": catalog["haccp"].id},
    )
    assert response.status_code == 200

    assert storefront_names(client, categorySlug="haccp-equipment") == [
        "Digital Food Thermometer",
        "Chef Knife Set",
    ]
    assert storefront_names(client, categorySlug="kitchen-supplies") == [
        "Thermometer Probe Wipes"
    ]


def test_update_stock_sets_in_stock(catalog, client):
    product = catalog["products"][2]

    response = client.put(f"/api/admin/products/{product.id}", json={"stock_quantity": 0})
    assert response.status_code == 200
    assert response.json()["in_stock"] is False


def test_update_missing_product(catalog, client):
    response = client.put("/api/admin/products/9999", json={"price_cents": 1})
    assert response.status_code == 404


def test_deleted_product_disappears_immediately(catalog, cache, client):
    cache.reload()
    product = catalog["products"][0]

    response = client.delete(f"/api/admin/products/{product.id}")
    assert response.status_code == 200

    assert client.get(f"/api/products/{product.id}").status_code == 404
    assert storefront_names(client, categorySlug="haccp-equipment") == []


def test_admin_products_list_reads_database(db, catalog, client):
    # Товар, добавленный в обход админки, сразу виден в админке
    make_product(db, catalog["kitchen"], "Cutting Board")

    response = client.get("/api/admin/products", params={"page_size": 2})
    assert response.status_code == 200
    data = response.json()
    assert len(data["items"]) == 2
    assert data["meta"] == {"page": 1, "page_size": 2, "total": 4, "total_pages": 2}

    response = client.get("/api/admin/products", params={"q": "board"})
    assert [p["name"] for p in response.json()["items"]] == ["Cutting Board"]


def test_admin_get_product(catalog, client):
    product = catalog["products"][1]
    response = client.get(f"/api/admin/products/{product.id}")
    assert response.status_code == 200
    assert response.json()["category"]["slug"] == "kitchen-supplies"
    assert client.get("/api/admin/products/9999").status_code == 404


# ==================== ОШИБКА ПЕРЕЗАГРУЗКИ ====================


def test_reload_failure_does_not_fail_mutation(db, catalog, cache, client, monkeypatch):
    cache.reload()
    before = cache.snapshot

    def broken(*args, **kwargs):
        raise RuntimeError("replica lag")

    monkeypatch.setattr(catalog_store, "list_products", broken)

    response = client.post(
        "/api/admin/products",
        json={
            "name": "Temperature Log Book",
            "price_cents": 1299,
            "category_id": catalog["haccp"].id,
        },
    )
    assert response.status_code == 200
    assert db.query(Product).filter_by(slug="temperature-log-book").count() == 1

    # Витрина продолжает отдавать предыдущий снимок
    assert cache.snapshot is before
    assert cache.last_error == "replica lag"
    assert len(storefront_names(client)) == 3

    monkeypatch.undo()
    response = client.post("/api/admin/catalog-cache/reload")
    assert response.status_code == 200
    assert response.json()["last_error"] is None
    assert response.json()["products_count"] == 4
    assert "Temperature Log Book" in storefront_names(client)


def test_catalog_cache_status(catalog, cache, client):
    cache.reload()
    response = client.get("/api/admin/catalog-cache")
    assert response.status_code == 200
    data = response.json()
    assert data["populated"] is True
    assert data["categories_count"] == 2
    assert data["products_count"] == 3
    assert data["reload_in_progress"] is False


# ==================== КАТЕГОРИИ ====================


def test_created_category_visible_immediately(catalog, cache, client):
    cache.reload()
    response = client.post(
        "/api/admin/categories", json={"name": "Food Labels & Stickers", "sort_order": 5}
    )
    assert response.status_code == 200
    assert response.json()["slug"] == "food-labels-stickers"

    slugs = [c["slug"] for c in client.get("/api/categories").json()]
    assert slugs == ["haccp-equipment", "kitchen-supplies", "food-labels-stickers"]
    assert client.get("/api/products", params={"categorySlug": "food-labels-stickers"}).json() == []


def test_create_category_duplicate_slug(catalog, client):
    response = client.post("/api/admin/categories", json={"name": "HACCP Equipment"})
    assert response.status_code == 400


def test_renamed_category_slug_updates_product_filter(catalog, cache, client):
    cache.reload()
    haccp = catalog["haccp"]

    response = client.put(
        f"/api/admin/categories/{haccp.id}", json={"slug": "Food Safety"}
    )
    assert response.status_code == 200
    assert response.json()["slug"] == "food-safety"

    assert storefront_names(client, categorySlug="haccp-equipment") == []
    assert storefront_names(client, categorySlug="food-safety") == [
        "Digital Food Thermometer"
    ]
    product = client.get(f"/api/products/{catalog['products'][0].id}").json()
    assert product["category"]["slug"] == "food-safety"


def test_category_image(catalog, client):
    kitchen = catalog["kitchen"]
    response = client.put(
        f"/api/admin/categories/{kitchen.id}/image",
        json={"image_url": "/images/kitchen.webp"},
    )
    assert response.status_code == 200

    data = client.get("/api/categories/kitchen-supplies").json()
    assert data["image_url"] == "/images/kitchen.webp"


def test_delete_category(db, catalog, cache, client):
    empty = make_category(db, "Storage")
    cache.reload()

    response = client.delete(f"/api/admin/categories/{catalog['haccp'].id}")
    assert response.status_code == 400

    response = client.delete(f"/api/admin/categories/{empty.id}")
    assert response.status_code == 200
    assert client.get("/api/categories/storage").status_code == 404
    assert db.query(Category).filter_by(slug="storage").count() == 0


def test_admin_categories_with_products_count(catalog, client):
    response = client.get("/api/admin/categories")
    assert response.status_code == 200
    counts = {c["slug"]: c["products_count"] for c in response.json()}
    assert counts == {"haccp-equipment": 1, "kitchen-supplies": 2}


def test_homepage_reassignment(db, catalog, cache, client):
    labels = make_category(db, "Food Labels", is_homepage_featured=True, homepage_position=0)
    cache.reload()

    response = client.put(
        "/api/admin/categories/homepage",
        json={"category_ids": [catalog["kitchen"].id, catalog["haccp"].id]},
    )
    assert response.status_code == 200
    assert [c["homepage_position"] for c in response.json()] == [0, 1]

    slugs = [c["slug"] for c in client.get("/api/categories/homepage").json()]
    assert slugs == ["kitchen-supplies", "haccp-equipment"]

    db.refresh(labels)
    assert labels.is_homepage_featured is False
    assert labels.homepage_position is None


@pytest.mark.parametrize("category_ids", [[9999], [1, 1]])
def test_homepage_reassignment_invalid(catalog, client, category_ids):
    response = client.put(
        "/api/admin/categories/homepage", json={"category_ids": category_ids}
    )
    assert response.status_code == 400


# ==================== МАССОВЫЕ ОПЕРАЦИИ ====================


def test_bulk_set_price(catalog, cache, client):
    cache.reload()
    ids = [p.id for p in catalog["products"][1:]]

    response = client.post(
        "/api/admin/products/bulk-actions",
        json={"action": "set_price", "product_ids": ids, "price_cents": 500},
    )
    assert response.status_code == 200
    assert response.json()["updated"] == 2

    prices = [
        p["price_cents"]
        for p in client.get("/api/products", params={"categorySlug": "kitchen-supplies"}).json()
    ]
    assert prices == [500, 500]


def test_bulk_adjust_price(catalog, client):
    product = catalog["products"][0]
    response = client.post(
        "/api/admin/products/bulk-actions",
        json={"action": "adjust_price", "product_ids": [product.id], "percent": -10},
    )
    assert response.status_code == 200
    assert client.get(f"/api/products/{product.id}").json()["price_cents"] == 3149


def test_bulk_move_category(catalog, client):
    ids = [p.id for p in catalog["products"]]
    response = client.post(
        "/api/admin/products/bulk-actions",
        json={"action": "move_category", "product_ids": ids, "category_id": catalog["haccp"].id},
    )
    assert response.status_code == 200
    assert len(storefront_names(client, categorySlug="haccp-equipment")) == 3
    assert storefront_names(client, categorySlug="kitchen-supplies") == []


def test_bulk_set_status_and_stock(catalog, client):
    product = catalog["products"][2]
    response = client.post(
        "/api/admin/products/bulk-actions",
        json={"action": "set_status", "product_ids": [product.id], "status": "archived"},
    )
    assert response.status_code == 200
    response = client.post(
        "/api/admin/products/bulk-actions",
        json={"action": "set_stock", "product_ids": [product.id], "stock_quantity": 0},
    )
    assert response.status_code == 200

    data = client.get(f"/api/products/{product.id}").json()
    assert data["status"] == "archived"
    assert data["stock_quantity"] == 0
    assert data["in_stock"] is False


@pytest.mark.parametrize(
    "payload",
    [
        {"action": "set_price", "product_ids": [1]},
        {"action": "explode", "product_ids": [1]},
        {"action": "set_stock", "product_ids": [], "stock_quantity": 1},
    ],
)
def test_bulk_invalid_request(catalog, client, payload):
    response = client.post("/api/admin/products/bulk-actions", json=payload)
    assert response.status_code == 422


# ==================== ПОСТАВЩИКИ ====================


def test_supplier_rename_reflected_in_products(db, catalog, cache, client):
    supplier = make_supplier(db, "Hendi")
    product = catalog["products"][1]
    client.put(f"/api/admin/products/{product.id}", json={"supplier_id": supplier.id})
    assert client.get(f"/api/products/{product.id}").json()["supplier"]["name"] == "Hendi"

    response = client.put(f"/api/admin/suppliers/{supplier.id}", json={"name": "Hendi BV"})
    assert response.status_code == 200
    assert client.get(f"/api/products/{product.id}").json()["supplier"]["name"] == "Hendi BV"

    response = client.delete(f"/api/admin/suppliers/{supplier.id}")
    assert response.status_code == 200
    assert response.json()["detached_products"] == 1

    data = client.get(f"/api/products/{product.id}").json()
    assert data["supplier"] is None
    assert data["supplier_id"] is None


def test_create_and_list_suppliers(db, client):
    response = client.post("/api/admin/suppliers", json={"name": "Bartscher", "country": "DE"})
    assert response.status_code == 200
    assert response.json()["is_active"] is True

    names = [s["name"] for s in client.get("/api/admin/suppliers").json()]
    assert names == ["Bartscher"]


# ==================== ДОСТУП ====================


@pytest.mark.parametrize(
    "method,url",
    [
        ("get", "/api/admin/catalog-cache"),
        ("post", "/api/admin/catalog-cache/reload"),
        ("get", "/api/admin/products"),
        ("delete", "/api/admin/products/1"),
        ("get", "/api/admin/categories"),
    ],
)
def test_admin_requires_authentication(anon_client, method, url):
    response = getattr(anon_client, method)(url)
    assert response.status_code in (401, 403)


# ==================== ЯВНЫЙ NULL В ОБНОВЛЕНИЯХ ====================


@pytest.mark.parametrize(
    "field",
    [
        "name",
        "slug",
        "price_cents",
        "currency",
        "stock_quantity",
        "in_stock",
        "featured",
        "status",
        "images",
        "category_id",
    ],
)
def test_update_product_rejects_null_for_required_fields(db, catalog, cache, client, field):
    cache.reload()
    product = catalog["products"][0]

    response = client.put(f"/api/admin/products/{product.id}", json={field: None})
    assert response.status_code == 422

    # Снимок продолжает обновляться после отклоненного запроса
    response = client.post(
        "/api/admin/products",
        json={
            "name": "Temperature Log Book",
            "price_cents": 1299,
            "category_id": catalog["haccp"].id,
        },
    )
    assert response.status_code == 200
    assert cache.last_error is None
    assert "Temperature Log Book" in storefront_names(client)


def test_update_product_allows_null_for_optional_fields(catalog, client):
    product = catalog["products"][0]
    response = client.put(
        f"/api/admin/products/{product.id}",
        json={"description": None, "vat_rate": None, "supplier_id": None, "image_url": None},
    )
    assert response.status_code == 200
    assert client.get(f"/api/products/{product.id}").json()["vat_rate"] is None


@pytest.mark.parametrize("field", ["name", "slug", "sort_order", "is_homepage_featured"])
def test_update_category_rejects_null_for_required_fields(catalog, cache, client, field):
    cache.reload()
    kitchen = catalog["kitchen"]

    response = client.put(f"/api/admin/categories/{kitchen.id}", json={field: None})
    assert response.status_code == 422

    response = client.put(
        f"/api/admin/categories/{kitchen.id}", json={"description": "Tools", "sort_order": 3}
    )
    assert response.status_code == 200
    assert client.get("/api/categories/kitchen-supplies").json()["description"] == "Tools"


@pytest.mark.parametrize("field", ["name", "is_active"])
def test_update_supplier_rejects_null_for_required_fields(db, client, field):
    supplier = make_supplier(db, "Hendi")
    response = client.put(f"/api/admin/suppliers/{supplier.id}", json={field: None})
    assert response.status_code == 422

    response = client.put(f"/api/admin/suppliers/{supplier.id}", json={"country": None})
    assert response.status_code == 200


def test_admin_categories_schema_in_openapi(client):
    schema = client.get("/openapi.json").json()
    assert "products_count" in schema["components"]["schemas"]["CategoryWithCount"]["properties"]
