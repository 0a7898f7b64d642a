"""
Request validation - rejects invalid configurations before any arithmetic.

Structural problems are collected and raised together as one
ValidationError; catalog misses raise CatalogLookupError.
"""
from dataclasses import dataclass
from typing import Optional

from ..config.settings import get_settings, Settings
from .adjustments import is_tagline_addon
from .arithmetic import HUNDRED, ZERO, ceil_multiple, dec, floor_multiple, fmt_number, is_multiple
from .errors import ValidationError
from .models import (
    Addon,
    Catalog,
    PaperStock,
    PricingRequest,
    Quantity,
    QuantitySuggestion,
    QuantityValidation,
    Size,
    SizeValidation,
    Turnaround,
)

VALID_SELECTIONS = ('standard', 'custom')
VALID_SIDES = ('single', 'double')


def _check_dimension(label: str, value, increment) -> Optional[str]:
    if value is None:
        return f"{label} is required"
    if not dec(value).is_finite():
        return f"{label} must be a number"
    # Zero is an unfinished selection and prices to 0
    if dec(value) < 0:
        return f"{label} cannot be negative"
    if not is_multiple(value, increment):
        lower = fmt_number(floor_multiple(value, increment))
        upper = fmt_number(ceil_multiple(value, increment))
        return f'{label} must be in {fmt_number(increment)} inch increments. Try {lower}" or {upper}"'
    return None


def validate_custom_size(width, height, settings: Optional[Settings] = None) -> SizeValidation:
    """
    Check that a custom width and height sit on the size increment grid.

    Each failing dimension gets its own message with the two nearest
    valid values, e.g. 5.3 -> 'Try 5.25" or 5.5"'.
    """
    settings = settings or get_settings()
    errors = []
    for label, value in (("Width", width), ("Height", height)):
        error = _check_dimension(label, value, settings.size_increment)
        if error:
            errors.append(error)
    return SizeValidation(is_valid=not errors, errors=errors)


def validate_custom_quantity(quantity, settings: Optional[Settings] = None) -> QuantityValidation:
    """
    Check the custom quantity rule.

    Any whole quantity up to the threshold is accepted, zero included; above
    it the quantity must be a multiple of the increment, and the nearest
    lower and upper multiples are suggested otherwise.
    """
    settings = settings or get_settings()
    increment = settings.quantity_increment
    threshold = settings.quantity_increment_threshold

    if quantity is None:
        return QuantityValidation(is_valid=False, error="Quantity is required")

    if not dec(quantity).is_finite():
        return QuantityValidation(is_valid=False, error="Quantity must be a number")

    if quantity < 0:
        return QuantityValidation(is_valid=False, error="Quantity cannot be negative")

    if dec(quantity) != dec(quantity).to_integral_value():
        return QuantityValidation(is_valid=False, error="Quantity must be a whole number")

    if quantity > threshold and not is_multiple(quantity, increment):
        lower = int(floor_multiple(quantity, increment))
        upper = int(ceil_multiple(quantity, increment))
        return QuantityValidation(
            is_valid=False,
            error=(
                f"Quantities above {threshold:,} must be in increments of {increment:,}. "
                f"Try {lower:,} or {upper:,}"
            ),
            suggestion=QuantitySuggestion(lower=lower, upper=upper),
        )

    return QuantityValidation(is_valid=True)


@dataclass
class ResolvedRequest:
    """Catalog records referenced by a validated request."""
    paper_stock: PaperStock
    turnaround: Turnaround
    size: Optional[Size]
    quantity: Optional[Quantity]
    addons: list[Addon]
    warnings: list[str]


def validate_request(request: PricingRequest, catalog: Catalog,
                     settings: Optional[Settings] = None) -> ResolvedRequest:
    """
    Validate a request and resolve every catalog id it references.

    Raises:
        ValidationError: the request is malformed or breaks a business rule
        CatalogLookupError: an id is missing from the catalog
    """
    settings = settings or get_settings()
    errors: list[str] = []
    warnings: list[str] = []
    suggestion = None

    # Size selection
    if request.size_selection == 'custom':
        if request.standard_size_id:
            errors.append("Choose either a standard size or a custom size, not both")
        if request.custom_width is None or request.custom_height is None:
            errors.append("Custom size requires both width and height")
        else:
            errors.extend(validate_custom_size(request.custom_width, request.custom_height, settings).errors)
            for label, value in (("width", request.custom_width), ("height", request.custom_height)):
                if not settings.min_custom_dimension <= value <= settings.max_custom_dimension:
                    warnings.append(
                        f"Custom {label} should be between {fmt_number(settings.min_custom_dimension)} "
                        f"and {fmt_number(settings.max_custom_dimension)} inches"
                    )
    elif request.size_selection == 'standard':
        if not request.standard_size_id:
            errors.append("Standard size ID is required")
        if request.custom_width is not None or request.custom_height is not None:
            errors.append("Choose either a standard size or a custom size, not both")
    else:
        errors.append('Size selection must be either "standard" or "custom"')

    # Quantity selection
    if request.quantity_selection == 'custom':
        if request.standard_quantity_id:
            errors.append("Choose either a standard quantity or a custom quantity, not both")
        qty_check = validate_custom_quantity(request.custom_quantity, settings)
        if not qty_check.is_valid:
            errors.append(f"{qty_check.error}. Received: {request.custom_quantity}")
            suggestion = qty_check.suggestion
        elif request.custom_quantity > settings.large_quantity_warning:
            warnings.append(
                f"Quantities above {settings.large_quantity_warning:,} may require special handling"
            )
    elif request.quantity_selection == 'standard':
        if not request.standard_quantity_id:
            errors.append("Standard quantity ID is required")
        if request.custom_quantity is not None:
            errors.append("Choose either a standard quantity or a custom quantity, not both")
    else:
        errors.append('Quantity selection must be either "standard" or "custom"')

    if request.sides not in VALID_SIDES:
        errors.append('Sides must be either "single" or "double"')
    if not request.paper_stock_id:
        errors.append("Paper stock is required")
    if not request.turnaround_id:
        errors.append("Turnaround time is required")

    # Discounts and add-on units come from the client; totals must stay non-negative
    for discount in request.broker_category_discounts:
        percent = dec(discount.discount_percent) if discount.discount_percent is not None else None
        if percent is None or not percent.is_finite() or not ZERO <= percent <= HUNDRED:
            errors.append(
                f"Broker discount for category {discount.category_id} must be between 0 and 100 percent. "
                f"Received: {discount.discount_percent}"
            )
    for selected in request.selected_addons:
        if selected.quantity is not None and selected.quantity < 0:
            errors.append(f"Add-on {selected.addon_id} quantity cannot be negative")

    if errors:
        raise ValidationError(errors, suggestion=suggestion)

    # Catalog resolution - any miss is fatal
    paper_stock = catalog.get_paper_stock(request.paper_stock_id)
    turnaround = catalog.get_turnaround(request.turnaround_id)
    size = catalog.get_size(request.standard_size_id) if request.size_selection == 'standard' else None
    quantity = (
        catalog.get_quantity(request.standard_quantity_id)
        if request.quantity_selection == 'standard' else None
    )
    addons = [catalog.get_addon(selected.addon_id) for selected in request.selected_addons]

    for addon in addons:
        percentage = getattr(addon.configuration, 'percentage', None)
        if is_tagline_addon(addon, settings) and percentage is not None and percentage > 100:
            raise ValidationError([f"{addon.name} discount cannot exceed 100 percent"])

    selected_ids = {addon.id for addon in addons}
    for addon in addons:
        conflicts = [c for c in addon.conflicts_with if c in selected_ids]
        if conflicts:
            names = ", ".join(catalog.get_addon(c).name for c in conflicts)
            warnings.append(f"{addon.name} conflicts with: {names}")

    return ResolvedRequest(
        paper_stock=paper_stock,
        turnaround=turnaround,
        size=size,
        quantity=quantity,
        addons=addons,
        warnings=warnings,
    )
