"""
Pricing Engine - turns a product configuration into a final price.

Pipeline (strictly top to bottom):
1. Validate the request and resolve catalog records
2. Base price: ((Paper Price × Sides Multiplier) × Size × Quantity)
3. Adjustments: broker discount, tagline discount, exact-size markup
4. Turnaround markup
5. Add-on line items
6. Totals and display breakdown

The engine is stateless: the same request and catalog always produce the
same result.
"""
import logging
from decimal import Decimal
from typing import Optional

from ..config.settings import get_settings, Settings
from .addon_pricing import ReferenceAmounts, price_addons
from .adjustments import AppliedAdjustment, apply_adjustments, is_tagline_addon, turnaround_markup
from .arithmetic import ZERO, dec, fmt_money, fmt_number
from .base_price import calculate_base, quick_calculate
from .breakdown import build_breakdown
from .models import (
    Adjustment,
    AddonCharge,
    Adjustments,
    BaseCalculation,
    Catalog,
    PricingRequest,
    PricingResult,
    QuantityValidation,
    SizeValidation,
    Totals,
    TurnaroundCharge,
    ValidationSummary,
)
from .validator import validate_custom_quantity, validate_custom_size, validate_request

logger = logging.getLogger(__name__)


def _adjustment(applied: AppliedAdjustment) -> Adjustment:
    return Adjustment(
        applied=applied.applied,
        percentage=float(applied.percentage),
        amount=float(applied.amount),
    )


class PricingEngine:
    """
    Core pricing engine for print products.

    The catalog is passed in on every call; the engine never fetches data
    and keeps nothing between calls.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def validate_custom_size(self, width, height) -> SizeValidation:
        return validate_custom_size(width, height, self.settings)

    def validate_custom_quantity(self, quantity) -> QuantityValidation:
        return validate_custom_quantity(quantity, self.settings)

    def quick_calculate(self, price_per_sq_inch, size, quantity,
                        is_double_sided: bool = False, is_exception_paper: bool = False) -> float:
        return quick_calculate(price_per_sq_inch, size, quantity,
                               is_double_sided, is_exception_paper, self.settings)

    def calculate_price(self, request: PricingRequest, catalog: Catalog) -> PricingResult:
        """
        Calculate the price of a configuration with full traceability.

        Args:
            request: PricingRequest built from the customer's selections
            catalog: Catalog snapshot the request ids refer to

        Returns:
            PricingResult with base calculation, adjustments, turnaround,
            add-ons, totals, breakdown and trace

        Raises:
            ValidationError: invalid configuration
            CatalogLookupError: unknown catalog id
        """
        resolved = validate_request(request, catalog, self.settings)
        trace = []

        # Base price
        base = calculate_base(request, resolved.paper_stock, resolved.size, resolved.quantity, self.settings)
        if request.size_selection == 'custom':
            trace.append(("Size", f"Custom {fmt_number(request.custom_width)} × "
                                  f"{fmt_number(request.custom_height)}", f"{fmt_number(base.size)} sq in"))
        else:
            trace.append(("Size", f"Pre-calculated value for {resolved.size.name}",
                          f"{fmt_number(base.size)} sq in"))
        trace.append(("Quantity", "Calculation quantity", fmt_number(base.quantity)))
        trace.append(("Sides", f"{request.sides}-sided on {resolved.paper_stock.name}",
                      f"{fmt_number(base.sides_multiplier)}x"))
        trace.append(("Base Price", "Paper × Sides × Size × Quantity", fmt_money(base.base_price)))

        # Adjustments
        adjusted = apply_adjustments(request, base.base_price, resolved.addons, self.settings)
        if adjusted.broker_discount.applied:
            trace.append(("Broker Discount", f"{fmt_number(adjusted.broker_discount.percentage)}% "
                                             f"for category {request.category_id}",
                          f"-{fmt_money(adjusted.broker_discount.amount)}"))
        if adjusted.tagline_discount.applied:
            trace.append(("Tagline Discount", f"{fmt_number(adjusted.tagline_discount.percentage)}%",
                          f"-{fmt_money(adjusted.tagline_discount.amount)}"))
        elif request.is_broker and any(is_tagline_addon(a, self.settings) for a in resolved.addons):
            trace.append(("Tagline Discount", "Not applied to broker pricing", None))
        if adjusted.exact_size_markup.applied:
            trace.append(("Exact Size Markup", f"{fmt_number(adjusted.exact_size_markup.percentage)}%",
                          f"+{fmt_money(adjusted.exact_size_markup.amount)}"))
        after_adjustments = adjusted.after_adjustments

        # Turnaround
        turnaround = resolved.turnaround
        markup = turnaround_markup(turnaround, after_adjustments)
        after_turnaround = after_adjustments + markup
        trace.append(("Turnaround", f"{turnaround.name} ({turnaround.pricing_model.value})",
                      f"+{fmt_money(markup)}"))

        # Add-ons
        references = ReferenceAmounts(
            base_price=base.base_price,
            after_adjustments=after_adjustments,
            after_turnaround=after_turnaround,
        )
        addon_lines, addons_total = price_addons(
            request.selected_addons, resolved.addons, base.quantity, references, self.settings
        )
        for line in addon_lines:
            trace.append(("Add-on", line.name, fmt_money(line.cost)))

        # Totals
        final = after_adjustments + markup + addons_total
        display_quantity = self._display_quantity(request, resolved)
        unit_price = final / display_quantity if display_quantity > 0 else ZERO
        trace.append(("Final", "After adjustments + turnaround + add-ons", fmt_money(final)))

        result = PricingResult(
            base_calculation=BaseCalculation(
                size=float(base.size),
                quantity=float(base.quantity),
                paper_price=float(base.paper_price),
                sides_multiplier=float(base.sides_multiplier),
                base_price=float(base.base_price),
            ),
            adjustments=Adjustments(
                broker_discount=_adjustment(adjusted.broker_discount),
                tagline_discount=_adjustment(adjusted.tagline_discount),
                exact_size_markup=_adjustment(adjusted.exact_size_markup),
            ),
            turnaround=TurnaroundCharge(
                name=turnaround.name,
                pricing_model=turnaround.pricing_model,
                markup_percent=float(dec(turnaround.price_multiplier) * 100),
                markup_amount=float(markup),
                days=turnaround.business_days_label,
            ),
            addons=[
                AddonCharge(id=line.id, name=line.name, cost=float(line.cost), calculation=line.calculation)
                for line in addon_lines
            ],
            total_addons_cost=float(addons_total),
            totals=Totals(
                base_price=float(base.base_price),
                after_adjustments=float(after_adjustments),
                after_turnaround=float(after_turnaround),
                final=float(final),
                unit_price=float(unit_price),
            ),
            validation=ValidationSummary(is_valid=True, warnings=list(resolved.warnings)),
        )
        for step, desc, val in trace:
            result.add_trace(step, desc, val)
        result.display_breakdown = build_breakdown(result)

        logger.debug(
            "Priced paper=%s turnaround=%s base=%s final=%s",
            request.paper_stock_id, request.turnaround_id, base.base_price, final,
        )
        return result

    @staticmethod
    def _display_quantity(request: PricingRequest, resolved) -> Decimal:
        if request.quantity_selection == 'custom':
            return dec(request.custom_quantity)
        return dec(resolved.quantity.display_value)
