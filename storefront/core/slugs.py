"""
Генерация URL-friendly идентификаторов.
"""

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """
    Преобразовать строку в slug.

    Example:
        slugify("Digital Food Thermometer") == "digital-food-thermometer"
    """
    return _NON_ALNUM.sub("-", value.lower()).strip("-")
