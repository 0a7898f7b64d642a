"""
Exceptions raised by the pricing engine.

Every failure aborts the calculation; no partial result is returned.
"""
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import QuantitySuggestion


class PricingError(Exception):
    """Base class for all pricing engine errors."""


class ValidationError(PricingError):
    """The request is malformed or breaks a business rule."""

    def __init__(self, errors: list[str], suggestion: Optional['QuantitySuggestion'] = None):
        self.errors = list(errors)
        self.suggestion = suggestion
        super().__init__("; ".join(self.errors))


class CatalogLookupError(PricingError):
    """The request references an id that is not in the supplied catalog."""

    user_message = "This configuration is no longer available. Please reconfigure your product."

    def __init__(self, entity: str, entity_id: Optional[str]):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} '{entity_id}' not found in catalog")
