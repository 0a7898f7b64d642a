"""Process-wide engine and catalog snapshot shared by the API routes."""
from typing import Optional

from ..data.catalog_loader import load_catalog
from ..engine import Catalog, PricingEngine

engine = PricingEngine()

_catalog: Optional[Catalog] = None


def get_catalog() -> Catalog:
    """Catalog snapshot, loaded on first use."""
    global _catalog
    if _catalog is None:
        _catalog = load_catalog(settings=engine.settings)
    return _catalog


def set_catalog(catalog: Optional[Catalog]):
    """Swap the snapshot (None forces a reload on next use)."""
    global _catalog
    _catalog = catalog
