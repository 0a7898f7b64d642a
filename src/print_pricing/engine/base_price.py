"""
Base price calculation.

Base Price = ((Base Paper Price × Sides Multiplier) × Size × Quantity)

- Size is the pre-calculated value for standard sizes, width × height for custom
- Quantity is the adjustment or calculation value for standard quantities below
  the increment threshold, the calculation value above it, the exact value for custom
- The sides multiplier only applies to double-sided exception (text) papers
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..config.settings import get_settings, Settings
from .arithmetic import ONE, Number, dec
from .models import PaperStock, PricingRequest, Quantity, Size


@dataclass
class BaseFigures:
    """Decimal intermediates of the base phase."""
    size: Decimal
    quantity: Decimal
    paper_price: Decimal
    sides_multiplier: Decimal
    base_price: Decimal


def effective_size(request: PricingRequest, size: Optional[Size]) -> Decimal:
    if request.size_selection == 'custom':
        return dec(request.custom_width) * dec(request.custom_height)
    # Pre-calculated value, never width × height
    return dec(size.pre_calculated_value)


def effective_quantity(request: PricingRequest, quantity: Optional[Quantity],
                       settings: Optional[Settings] = None) -> Decimal:
    if request.quantity_selection == 'custom':
        return dec(request.custom_quantity)

    settings = settings or get_settings()
    if quantity.display_value < settings.quantity_increment_threshold and quantity.adjustment_value is not None:
        return dec(quantity.adjustment_value)
    return dec(quantity.calculation_value)


def sides_multiplier(sides: str, paper_stock: PaperStock) -> Decimal:
    if sides == 'double' and paper_stock.is_exception_paper:
        return dec(paper_stock.double_sided_multiplier)
    return ONE


def base_formula(paper_price: Number, multiplier: Number, size: Number, quantity: Number) -> Decimal:
    return dec(paper_price) * dec(multiplier) * dec(size) * dec(quantity)


def calculate_base(request: PricingRequest, paper_stock: PaperStock, size: Optional[Size],
                   quantity: Optional[Quantity], settings: Optional[Settings] = None) -> BaseFigures:
    """Run the base formula for a validated request."""
    sq_inches = effective_size(request, size)
    qty = effective_quantity(request, quantity, settings)
    multiplier = sides_multiplier(request.sides, paper_stock)
    paper_price = dec(paper_stock.price_per_sq_inch)

    return BaseFigures(
        size=sq_inches,
        quantity=qty,
        paper_price=paper_price,
        sides_multiplier=multiplier,
        base_price=base_formula(paper_price, multiplier, sq_inches, qty),
    )


def quick_calculate(price_per_sq_inch: Number, size: Number, quantity: Number,
                    is_double_sided: bool = False, is_exception_paper: bool = False,
                    settings: Optional[Settings] = None) -> float:
    """Base formula only, for ad-hoc estimates without a catalog."""
    settings = settings or get_settings()
    multiplier = settings.default_double_sided_multiplier if (is_double_sided and is_exception_paper) else 1
    return float(base_formula(price_per_sq_inch, multiplier, size, quantity))
