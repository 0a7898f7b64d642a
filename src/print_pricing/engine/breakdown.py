"""Display breakdown for a priced result. Section order is fixed."""
from .arithmetic import fmt_money, fmt_number
from .models import BreakdownSection, PricingResult

SECTION_ORDER = ('BASE CALCULATION', 'ADJUSTMENTS', 'TURNAROUND', 'ADD-ONS', 'FINAL TOTALS')


def build_breakdown(result: PricingResult) -> list[BreakdownSection]:
    base = result.base_calculation
    adjustments = result.adjustments
    turnaround = result.turnaround
    totals = result.totals

    base_lines = [
        f"Formula: {base.formula}",
        f"Paper Price: ${base.paper_price:.8f}/sq in",
        f"Sides Multiplier: {fmt_number(base.sides_multiplier)}x",
        f"Size: {fmt_number(base.size)} sq in",
        f"Quantity: {base.quantity:,.0f}",
        f"Base Price: {fmt_money(base.base_price)}",
    ]

    adjustment_lines = []
    if adjustments.broker_discount.applied:
        a = adjustments.broker_discount
        adjustment_lines.append(f"Broker Discount (-{fmt_number(a.percentage)}%): -{fmt_money(a.amount)}")
    if adjustments.tagline_discount.applied:
        a = adjustments.tagline_discount
        adjustment_lines.append(f"Our Tagline Discount (-{fmt_number(a.percentage)}%): -{fmt_money(a.amount)}")
    if adjustments.exact_size_markup.applied:
        a = adjustments.exact_size_markup
        adjustment_lines.append(f"Exact Size Markup (+{fmt_number(a.percentage)}%): +{fmt_money(a.amount)}")
    if not adjustment_lines:
        adjustment_lines.append("None")
    adjustment_lines.append(f"After Adjustments: {fmt_money(totals.after_adjustments)}")

    heading = turnaround.name
    if turnaround.days:
        heading = f"{heading} ({turnaround.days})"
    turnaround_lines = [
        heading,
        f"Markup (+{fmt_number(turnaround.markup_percent)}%): +{fmt_money(turnaround.markup_amount)}",
        f"After Turnaround: {fmt_money(totals.after_turnaround)}",
    ]

    addon_lines = []
    for addon in result.addons:
        addon_lines.append(f"{addon.name}: {fmt_money(addon.cost)}")
        addon_lines.append(f"  ({addon.calculation})")
    if not addon_lines:
        addon_lines.append("None")
    addon_lines.append(f"Total Add-ons: {fmt_money(result.total_addons_cost)}")

    total_lines = [
        f"Subtotal (before tax): {fmt_money(totals.final)}",
        f"Unit Price: {fmt_money(totals.unit_price, places=4)}",
    ]
    for warning in result.validation.warnings:
        total_lines.append(f"Warning: {warning}")

    bodies = (base_lines, adjustment_lines, turnaround_lines, addon_lines, total_lines)
    return [BreakdownSection(title=title, lines=lines) for title, lines in zip(SECTION_ORDER, bodies)]
