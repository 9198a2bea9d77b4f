"""pytest настройки и fixtures."""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CATALOG_REFRESH_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.core.auth import require_admin
from storefront.db.database import get_db
from storefront.db.models import Base, Category, Product, Supplier, User
from storefront.main import app
from storefront.services.catalog_cache import CatalogCache


# Тестовая in-memory SQLite БД
SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    """Тестовая сессия БД."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def override_require_admin():
    return User(
        username="admin",
        email="admin@example.com",
        hashed_password="-",
        is_active=True,
        is_admin=True,
    )


@pytest.fixture(scope="function")
def db():
    """Новая схема БД для каждого теста."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    yield db
    db.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def cache(db):
    """Кэш каталога поверх тестовой БД (еще не загружен)."""
    return CatalogCache(TestingSessionLocal)


@pytest.fixture
def anon_client(db, cache):
    """Клиент без подмены проверки администратора."""
    app.dependency_overrides[get_db] = override_get_db
    app.state.catalog_cache = cache

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def client(anon_client):
    """Клиент с правами администратора."""
    app.dependency_overrides[require_admin] = override_require_admin
    return anon_client


def make_category(db, name, slug=None, **kwargs) -> Category:
    category = Category(
        name=name,
        slug=slug or name.lower().replace(" ", "-"),
        **kwargs,
    )
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def make_product(db, category, name, slug=None, price_cents=1000, **kwargs) -> Product:
    product = Product(
        name=name,
        slug=slug or name.lower().replace(" ", "-"),
        price_cents=price_cents,
        category_id=category.id,
        **kwargs,
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def make_supplier(db, name, **kwargs) -> Supplier:
    supplier = Supplier(name=name, **kwargs)
    db.add(supplier)
    db.commit()
    db.refresh(supplier)
    return supplier


@pytest.fixture
def catalog(db):
    """Небольшой каталог: две категории и три товара."""
    haccp = make_category(db, "HACCP Equipment", sort_order=0)
    kitchen = make_category(db, "Kitchen Supplies", sort_order=1)
    products = [
        make_product(db, haccp, "Digital Food Thermometer", price_cents=3499),
        make_product(db, kitchen, "Chef Knife Set", price_cents=12999),
        make_product(db, kitchen, "Thermometer Probe Wipes", price_cents=599),
    ]
    return {"haccp": haccp, "kitchen": kitchen, "products": products}
