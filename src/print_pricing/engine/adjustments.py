"""
Adjustments and turnaround markup applied on top of the base price.

Order of application:
1. Broker category discount (brokers only)
2. "Our Tagline" promotional discount (never for brokers)
3. "Exact Size" markup
4. Turnaround markup on the adjusted price
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from ..config.settings import get_settings, Settings
from .arithmetic import ZERO, dec, percent_of
from .models import Addon, AppliesTo, PercentageConfig, PricingModel, PricingRequest, Turnaround


@dataclass
class AppliedAdjustment:
    applied: bool = False
    percentage: Decimal = ZERO
    amount: Decimal = ZERO


@dataclass
class AdjustmentFigures:
    broker_discount: AppliedAdjustment = field(default_factory=AppliedAdjustment)
    tagline_discount: AppliedAdjustment = field(default_factory=AppliedAdjustment)
    exact_size_markup: AppliedAdjustment = field(default_factory=AppliedAdjustment)
    after_adjustments: Decimal = ZERO


def is_tagline_addon(addon: Addon, settings: Optional[Settings] = None) -> bool:
    settings = settings or get_settings()
    return settings.tagline_addon_name in addon.name


def is_exact_size_addon(addon: Addon, settings: Optional[Settings] = None) -> bool:
    settings = settings or get_settings()
    return settings.exact_size_addon_name in addon.name


def is_reserved_addon(addon: Addon, settings: Optional[Settings] = None) -> bool:
    """Promotional add-ons that adjust the base price instead of adding a line item."""
    return is_tagline_addon(addon, settings) or is_exact_size_addon(addon, settings)


def _percent_settings(addon: Addon, default_percent, default_applies_to: AppliesTo):
    config = addon.configuration
    if isinstance(config, PercentageConfig) and config.percentage is not None:
        return dec(config.percentage), config.applies_to
    return dec(default_percent), default_applies_to


def apply_adjustments(request: PricingRequest, base_price: Decimal, addons: list[Addon],
                      settings: Optional[Settings] = None) -> AdjustmentFigures:
    """Apply broker, tagline and exact-size adjustments to the base price."""
    settings = settings or get_settings()
    figures = AdjustmentFigures()

    if request.is_broker:
        for discount in request.broker_category_discounts:
            if discount.category_id == request.category_id:
                pct = dec(discount.discount_percent)
                figures.broker_discount = AppliedAdjustment(True, pct, percent_of(base_price, pct))
                break

    tagline = next((a for a in addons if is_tagline_addon(a, settings)), None)
    # Tagline never combines with broker pricing
    if tagline is not None and not request.is_broker:
        pct, applies_to = _percent_settings(tagline, settings.tagline_default_percent, AppliesTo.BASE_PRICE)
        reference = base_price
        if applies_to != AppliesTo.BASE_PRICE:
            reference = base_price - figures.broker_discount.amount
        figures.tagline_discount = AppliedAdjustment(True, pct, percent_of(reference, pct))

    discounted = base_price - figures.broker_discount.amount - figures.tagline_discount.amount

    exact_size = next((a for a in addons if is_exact_size_addon(a, settings)), None)
    if exact_size is not None:
        pct, applies_to = _percent_settings(exact_size, settings.exact_size_default_percent,
                                            AppliesTo.ADJUSTED_BASE)
        reference = base_price if applies_to == AppliesTo.BASE_PRICE else discounted
        figures.exact_size_markup = AppliedAdjustment(True, pct, percent_of(reference, pct))

    figures.after_adjustments = discounted + figures.exact_size_markup.amount
    return figures


def turnaround_markup(turnaround: Turnaround, after_adjustments: Decimal) -> Decimal:
    """Markup for the selected production speed."""
    model = turnaround.pricing_model
    if model == PricingModel.FLAT:
        return dec(turnaround.base_price)
    if model == PricingModel.PERCENTAGE:
        return after_adjustments * dec(turnaround.price_multiplier)
    if model == PricingModel.CUSTOM:
        return after_adjustments * dec(turnaround.price_multiplier) + dec(turnaround.base_price)
    raise ValueError(f"Unsupported turnaround pricing model: {model.value}")
