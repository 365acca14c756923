"""
Read-only product catalog.

Products live in data/products.json ({"meta": {...}, "products": [...]}) and
are loaded once per process. Nothing here mutates inventory.
"""
import json
import os
import sys
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from schemas import Product


def find_catalog_file(*roots) -> Path:
    """First existing data/products.json under the given roots, else the first candidate."""
    candidates = [Path(r) / "data" / "products.json" for r in roots]
    return next((c for c in candidates if c.exists()), candidates[0])


# Non-editable installs put the data file under the install prefix
DEFAULT_CATALOG_PATH = find_catalog_file(Path(__file__).parent, sys.prefix)
CATALOG_PATH = os.getenv("CATALOG_PATH", str(DEFAULT_CATALOG_PATH))


class Catalog(BaseModel):
    meta: Dict[str, Any] = {}
    products: List[Product] = []


@lru_cache(maxsize=None)
def load_catalog(path: str = CATALOG_PATH) -> Catalog:
    with open(path, "r", encoding="utf-8") as f:
        return Catalog.model_validate(json.load(f))


def get_products(catalog: Optional[Catalog] = None) -> List[Product]:
    catalog = catalog or load_catalog()
    return [p for p in catalog.products if p.active]


def get_product_by_sku(sku: str, catalog: Optional[Catalog] = None) -> Optional[Product]:
    return next((p for p in get_products(catalog) if p.sku == sku), None)


def get_featured_products(catalog: Optional[Catalog] = None) -> List[Product]:
    return [p for p in get_products(catalog) if p.featured]


def get_products_by_brand(brand: str, catalog: Optional[Catalog] = None) -> List[Product]:
    return [p for p in get_products(catalog) if p.brand.lower() == brand.lower()]


def get_products_by_category(category: str, catalog: Optional[Catalog] = None) -> List[Product]:
    return [p for p in get_products(catalog) if p.category == category]


def _unique(values) -> List[str]:
    # dict keeps first-seen order
    return list(dict.fromkeys(values))


def get_brands(catalog: Optional[Catalog] = None) -> List[str]:
    catalog = catalog or load_catalog()
    return _unique(p.brand for p in catalog.products)


def get_categories(catalog: Optional[Catalog] = None) -> List[str]:
    catalog = catalog or load_catalog()
    return _unique(p.category for p in catalog.products)


def get_site_metadata(catalog: Optional[Catalog] = None) -> Dict[str, Any]:
    return (catalog or load_catalog()).meta
