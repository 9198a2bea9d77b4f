"""
Демонстрационные данные каталога.

Используются init_db.py для наполнения пустой базы.
"""

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from storefront.db.models import Category, Product, Supplier

SAMPLE_CATEGORIES = [
    {
        "name": "Food Labels",
        "slug": "food-labels",
        "description": "Professional food labeling solutions for restaurants and food service",
        "is_homepage_featured": True,
        "homepage_position": 0,
    },
    {
        "name": "HACCP Equipment",
        "slug": "haccp-equipment",
        "description": "Essential equipment for HACCP compliance and food safety",
        "is_homepage_featured": True,
        "homepage_position": 1,
    },
    {
        "name": "Kitchen Supplies",
        "slug": "kitchen-supplies",
        "description": "Professional kitchen tools and supplies for commercial use",
        "is_homepage_featured": True,
        "homepage_position": 2,
    },
    {
        "name": "Cleaning & Sanitizing",
        "slug": "cleaning-sanitizing",
        "description": "Professional cleaning and sanitizing products for food service",
    },
    {
        "name": "Storage Solutions",
        "slug": "storage-solutions",
        "description": "Food storage containers and organization systems",
    },
]

# (категория, название, slug, цена в центах, старая цена, остаток, рекомендуемый)
SAMPLE_PRODUCTS = [
    ("food-labels", "Expiration Date Labels - 500 pack", "expiration-date-labels-500", 2499, 2999, 150, True),
    ("food-labels", "Day of the Week Labels - Complete Set", "day-of-week-labels-set", 1999, 2499, 200, True),
    ("haccp-equipment", "Digital Food Thermometer", "digital-food-thermometer", 3499, None, 75, True),
    ("haccp-equipment", "Temperature Log Book", "temperature-log-book", 1299, None, 120, False),
    ("kitchen-supplies", "Chef Knife Set", "chef-knife-set", 12999, 14999, 30, True),
    ("kitchen-supplies", "Color-Coded Cutting Boards", "color-coded-cutting-boards", 5999, None, 60, False),
    ("cleaning-sanitizing", "Food-Safe Sanitizer Spray", "food-safe-sanitizer-spray", 899, None, 300, False),
    ("storage-solutions", "Stackable Food Storage Containers", "stackable-food-storage-containers", 4599, 5299, 80, False),
]


def seed_catalog(db: Session) -> bool:
    """
    Наполнить пустой каталог демонстрационными данными.

    Returns:
        bool: False, если в каталоге уже есть категории
    """
    if db.scalar(select(func.count()).select_from(Category)):
        return False

    supplier = Supplier(name="KitchenPro Supply", country="Romania")
    db.add(supplier)

    categories = {}
    for position, data in enumerate(SAMPLE_CATEGORIES):
        category = Category(sort_order=position, **data)
        db.add(category)
        categories[category.slug] = category
    db.flush()

    for slug, name, product_slug, price, compare_at, stock, featured in SAMPLE_PRODUCTS:
        db.add(
            Product(
                name=name,
                slug=product_slug,
                price_cents=price,
                compare_at_price_cents=compare_at,
                stock_quantity=stock,
                in_stock=stock > 0,
                featured=featured,
                vat_rate=19,
                category_id=categories[slug].id,
                supplier=supplier,
            )
        )

    db.commit()
    return True
