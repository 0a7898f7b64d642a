"""
Add-on pricing - additive line items on top of the adjusted subtotal.

Reserved promotional add-ons are skipped here; they are folded into the
adjustments instead.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..config.settings import Settings
from .adjustments import is_reserved_addon
from .arithmetic import ZERO, dec, fmt_money, fmt_number, percent_of
from .models import (
    Addon,
    AppliesTo,
    CustomConfig,
    FlatConfig,
    PercentageConfig,
    PerUnitConfig,
    SelectedAddon,
    TieredConfig,
)


@dataclass
class AddonLine:
    id: str
    name: str
    cost: Decimal
    calculation: str


@dataclass
class ReferenceAmounts:
    """Amounts a percentage-priced add-on may be taken from."""
    base_price: Decimal
    after_adjustments: Decimal
    after_turnaround: Decimal

    def for_target(self, applies_to: AppliesTo) -> Decimal:
        if applies_to == AppliesTo.BASE_PRICE:
            return self.base_price
        if applies_to == AppliesTo.AFTER_TURNAROUND:
            return self.after_turnaround
        return self.after_adjustments


def _plural(unit_type: str) -> str:
    return unit_type if unit_type.endswith('s') else f"{unit_type}s"


def price_addon(addon: Addon, selected: SelectedAddon, quantity: Decimal,
                references: ReferenceAmounts) -> tuple[Decimal, str]:
    """
    Cost and human-readable calculation for one add-on.

    Returns (cost, calculation description).
    """
    config = addon.configuration

    if isinstance(config, FlatConfig):
        cost = dec(config.flat_price)
        return cost, f"Flat fee: {fmt_money(cost)}"

    if isinstance(config, PerUnitConfig):
        units = dec(selected.quantity) if selected.quantity is not None else quantity
        setup = dec(config.setup_fee)
        per_unit = dec(config.price_per_unit)
        cost = setup + per_unit * units
        unit_text = f"${fmt_number(per_unit)} × {fmt_number(units)} {_plural(config.unit_type)}"
        if setup > 0:
            return cost, f"${fmt_number(setup)} setup + {unit_text}"
        return cost, unit_text

    if isinstance(config, PercentageConfig):
        cost = percent_of(references.for_target(config.applies_to), config.percentage)
        return cost, f"{fmt_number(config.percentage)}% of {config.applies_to.value}: {fmt_money(cost)}"

    if isinstance(config, CustomConfig):
        pct_part = percent_of(references.for_target(config.applies_to), config.percentage)
        flat = dec(config.flat_price)
        cost = pct_part + flat
        return cost, (
            f"{fmt_number(config.percentage)}% of {config.applies_to.value} ({fmt_money(pct_part)})"
            f" + {fmt_money(flat)} flat"
        )

    if isinstance(config, TieredConfig):
        tier = next((t for t in config.tiers if t.contains(quantity)), None)
        if tier is None:
            return ZERO, f"No tier for quantity {fmt_number(quantity)}"
        if tier.price_per_unit:
            cost = dec(tier.price) + dec(tier.price_per_unit) * quantity
            return cost, (
                f"Tier {tier.min_quantity}+: ${fmt_number(tier.price)} + "
                f"${fmt_number(tier.price_per_unit)}/pc × {fmt_number(quantity)}"
            )
        cost = dec(tier.price)
        return cost, f"Tier {tier.min_quantity}+: ${fmt_number(tier.price)}"

    raise ValueError(f"Unsupported add-on configuration for {addon.id}: {type(config).__name__}")


def price_addons(selected_addons: list[SelectedAddon], addons: list[Addon], quantity: Decimal,
                 references: ReferenceAmounts,
                 settings: Optional[Settings] = None) -> tuple[list[AddonLine], Decimal]:
    """
    Price every selected ordinary add-on.

    ``addons`` is parallel to ``selected_addons``. Zero-cost add-ons are
    left off the line items.
    """
    lines = []
    total = ZERO
    for selected, addon in zip(selected_addons, addons):
        if is_reserved_addon(addon, settings):
            continue
        cost, calculation = price_addon(addon, selected, quantity, references)
        if cost <= 0:
            continue
        lines.append(AddonLine(id=addon.id, name=addon.name, cost=cost, calculation=calculation))
        total += cost
    return lines, total
