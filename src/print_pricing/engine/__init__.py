"""Engine subpackage - core pricing logic."""
from .pricing_engine import PricingEngine
from .base_price import quick_calculate
from .errors import PricingError, ValidationError, CatalogLookupError
from .validator import validate_custom_size, validate_custom_quantity
from .models import (
    Addon,
    BrokerCategoryDiscount,
    Catalog,
    PaperStock,
    PricingModel,
    PricingRequest,
    PricingResult,
    Quantity,
    SelectedAddon,
    Size,
    Turnaround,
)

__all__ = [
    'PricingEngine', 'quick_calculate', 'validate_custom_size', 'validate_custom_quantity',
    'PricingError', 'ValidationError', 'CatalogLookupError',
    'Addon', 'BrokerCategoryDiscount', 'Catalog', 'PaperStock', 'PricingModel',
    'PricingRequest', 'PricingResult', 'Quantity', 'SelectedAddon', 'Size', 'Turnaround',
]
