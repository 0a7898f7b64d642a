"""
Data models for the pricing engine.

Uses dataclasses for structured, type-safe data representation. Catalog
entities are read-only snapshots supplied by the caller; the request and
result are built fresh for every calculation.
"""
import math
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Optional, Union

from .errors import CatalogLookupError


def _require_price(owner: str, name: str, value) -> None:
    """Catalog prices must be finite and non-negative."""
    if value is None:
        return
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"{owner}: {name} must be a non-negative number, got {value}")


class PricingModel(str, Enum):
    """Tag selecting how a turnaround or add-on is priced."""
    FLAT = "FLAT"
    PER_UNIT = "PER_UNIT"
    PERCENTAGE = "PERCENTAGE"
    CUSTOM = "CUSTOM"
    TIERED = "TIERED"


class AppliesTo(str, Enum):
    """Reference amount a percentage is taken from."""
    BASE_PRICE = "base_price"
    ADJUSTED_BASE = "adjusted_base"
    AFTER_TURNAROUND = "after_turnaround"

    @classmethod
    def parse(cls, value: Optional[str], default: 'AppliesTo' = None) -> 'AppliesTo':
        if value is None or value == "":
            return default or cls.ADJUSTED_BASE
        if isinstance(value, cls):
            return value
        value = str(value).strip().lower()
        if value == "adjusted_base_price":
            return cls.ADJUSTED_BASE
        return cls(value)


# ============================================================================
# Catalog entities
# ============================================================================

@dataclass(frozen=True)
class Size:
    id: str
    name: str
    width: float
    height: float
    pre_calculated_value: float  # authoritative sq. inches, not always width × height
    display_name: Optional[str] = None
    is_custom: bool = False
    is_active: bool = True
    sort_order: int = 0


@dataclass(frozen=True)
class Quantity:
    id: str
    display_value: int  # what the customer sees
    calculation_value: int  # what the formula uses
    adjustment_value: Optional[int] = None  # overrides calculation_value
    is_custom: bool = False
    is_active: bool = True
    sort_order: int = 0


@dataclass(frozen=True)
class PaperStock:
    id: str
    name: str
    price_per_sq_inch: float
    is_exception_paper: bool = False  # text papers
    double_sided_multiplier: float = 1.0
    paper_type: str = "cardstock"
    thickness: Optional[str] = None
    coating: Optional[str] = None

    def __post_init__(self):
        _require_price(f"Paper stock {self.id}", "price_per_sq_inch", self.price_per_sq_inch)
        _require_price(f"Paper stock {self.id}", "double_sided_multiplier", self.double_sided_multiplier)


TURNAROUND_MODELS = (PricingModel.FLAT, PricingModel.PERCENTAGE, PricingModel.CUSTOM)


@dataclass(frozen=True)
class Turnaround:
    id: str
    name: str
    pricing_model: PricingModel = PricingModel.PERCENTAGE
    base_price: float = 0.0
    price_multiplier: float = 0.0  # fraction: 0.25 means 25%
    min_business_days: Optional[int] = None
    max_business_days: Optional[int] = None
    is_standard: bool = False
    sort_order: int = 0

    def __post_init__(self):
        object.__setattr__(self, "pricing_model", PricingModel(self.pricing_model))
        if self.pricing_model not in TURNAROUND_MODELS:
            raise ValueError(
                f"Turnaround {self.id}: {self.pricing_model.value} pricing is not supported, "
                f"use FLAT, PERCENTAGE or CUSTOM"
            )
        _require_price(f"Turnaround {self.id}", "base_price", self.base_price)
        _require_price(f"Turnaround {self.id}", "price_multiplier", self.price_multiplier)

    @property
    def markup_percent(self) -> float:
        return self.price_multiplier * 100

    @property
    def business_days_label(self) -> str:
        if self.min_business_days is None and self.max_business_days is None:
            return ""
        low = self.min_business_days if self.min_business_days is not None else self.max_business_days
        high = self.max_business_days if self.max_business_days is not None else low
        if low == high:
            return f"{low} days"
        return f"{low}-{high} days"


# Add-on configuration payloads, one per pricing model

@dataclass(frozen=True)
class FlatConfig:
    flat_price: float = 0.0


@dataclass(frozen=True)
class PerUnitConfig:
    price_per_unit: float = 0.0
    setup_fee: float = 0.0
    unit_type: str = "piece"


@dataclass(frozen=True)
class PercentageConfig:
    percentage: Optional[float] = None  # None means use the configured default
    applies_to: AppliesTo = AppliesTo.ADJUSTED_BASE


@dataclass(frozen=True)
class CustomConfig:
    """Percentage of a reference amount plus a flat fee."""
    percentage: float = 0.0
    flat_price: float = 0.0
    applies_to: AppliesTo = AppliesTo.BASE_PRICE


@dataclass(frozen=True)
class PriceTier:
    min_quantity: int
    price: float
    max_quantity: Optional[int] = None
    price_per_unit: float = 0.0

    def contains(self, quantity) -> bool:
        if quantity < self.min_quantity:
            return False
        return self.max_quantity is None or quantity <= self.max_quantity


@dataclass(frozen=True)
class TieredConfig:
    tiers: tuple[PriceTier, ...] = ()


AddonConfiguration = Union[FlatConfig, PerUnitConfig, PercentageConfig, CustomConfig, TieredConfig]

_CONFIG_TYPES = {
    PricingModel.FLAT: FlatConfig,
    PricingModel.PER_UNIT: PerUnitConfig,
    PricingModel.PERCENTAGE: PercentageConfig,
    PricingModel.CUSTOM: CustomConfig,
    PricingModel.TIERED: TieredConfig,
}


def _pick(payload: dict, *keys, default=None):
    """First present key; catalogs exported from the admin use camelCase."""
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return default


def parse_addon_configuration(model: PricingModel, payload: Optional[dict]) -> AddonConfiguration:
    """Build the typed configuration for ``model`` from a raw dict."""
    payload = payload or {}
    model = PricingModel(model)

    if model == PricingModel.FLAT:
        return FlatConfig(flat_price=float(_pick(payload, 'flat_price', 'flatPrice', 'price', default=0)))

    if model == PricingModel.PER_UNIT:
        return PerUnitConfig(
            price_per_unit=float(_pick(payload, 'price_per_unit', 'pricePerUnit', default=0)),
            setup_fee=float(_pick(payload, 'setup_fee', 'setupFee', default=0)),
            unit_type=str(_pick(payload, 'unit_type', 'unitType', default='piece')),
        )

    if model == PricingModel.PERCENTAGE:
        percentage = _pick(payload, 'percentage')
        return PercentageConfig(
            percentage=float(percentage) if percentage is not None else None,
            applies_to=AppliesTo.parse(_pick(payload, 'applies_to', 'appliesTo')),
        )

    if model == PricingModel.CUSTOM:
        return CustomConfig(
            percentage=float(_pick(payload, 'percentage', default=0)),
            flat_price=float(_pick(payload, 'flat_price', 'flatPrice', 'price', default=0)),
            applies_to=AppliesTo.parse(_pick(payload, 'applies_to', 'appliesTo'), AppliesTo.BASE_PRICE),
        )

    tiers = []
    for raw in _pick(payload, 'tiers', default=[]):
        max_qty = _pick(raw, 'max_quantity', 'maxQuantity')
        tiers.append(PriceTier(
            min_quantity=int(_pick(raw, 'min_quantity', 'minQuantity', default=0)),
            max_quantity=int(max_qty) if max_qty is not None else None,
            price=float(_pick(raw, 'price', default=0)),
            price_per_unit=float(_pick(raw, 'price_per_unit', 'pricePerUnit', default=0)),
        ))
    return TieredConfig(tiers=tuple(tiers))


@dataclass(frozen=True)
class Addon:
    id: str
    name: str
    pricing_model: PricingModel
    configuration: AddonConfiguration
    category: Optional[str] = None
    is_active: bool = True
    sort_order: int = 0
    conflicts_with: tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "pricing_model", PricingModel(self.pricing_model))
        expected = _CONFIG_TYPES[self.pricing_model]
        if not isinstance(self.configuration, expected):
            raise TypeError(
                f"Add-on {self.id}: {self.pricing_model.value} pricing needs "
                f"{expected.__name__}, got {type(self.configuration).__name__}"
            )
        owner = f"Add-on {self.id}"
        if isinstance(self.configuration, TieredConfig):
            for tier in self.configuration.tiers:
                _require_price(owner, "tier price", tier.price)
                _require_price(owner, "tier price_per_unit", tier.price_per_unit)
            return
        for config_field in fields(self.configuration):
            value = getattr(self.configuration, config_field.name)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                _require_price(owner, config_field.name, value)


@dataclass(frozen=True)
class BrokerCategoryDiscount:
    category_id: str
    discount_percent: float


@dataclass
class Catalog:
    """Read-only reference data for one calculation."""
    sizes: list[Size] = field(default_factory=list)
    quantities: list[Quantity] = field(default_factory=list)
    paper_stocks: list[PaperStock] = field(default_factory=list)
    turnarounds: list[Turnaround] = field(default_factory=list)
    addons: list[Addon] = field(default_factory=list)

    @staticmethod
    def _find(items, item_id, entity: str):
        for item in items:
            if item.id == item_id:
                return item
        raise CatalogLookupError(entity, item_id)

    def get_size(self, size_id: str) -> Size:
        return self._find(self.sizes, size_id, "Size")

    def get_quantity(self, quantity_id: str) -> Quantity:
        return self._find(self.quantities, quantity_id, "Quantity")

    def get_paper_stock(self, paper_stock_id: str) -> PaperStock:
        return self._find(self.paper_stocks, paper_stock_id, "Paper stock")

    def get_turnaround(self, turnaround_id: str) -> Turnaround:
        return self._find(self.turnarounds, turnaround_id, "Turnaround")

    def get_addon(self, addon_id: str) -> Addon:
        return self._find(self.addons, addon_id, "Add-on")


# ============================================================================
# Request
# ============================================================================

@dataclass
class SelectedAddon:
    addon_id: str
    quantity: Optional[int] = None  # units for per-unit add-ons
    options: dict[str, Any] = field(default_factory=dict)


@dataclass
class PricingRequest:
    """A product configuration to price."""
    paper_stock_id: Optional[str]
    turnaround_id: Optional[str]
    sides: str = "single"  # "single" or "double"

    size_selection: str = "standard"  # "standard" or "custom"
    standard_size_id: Optional[str] = None
    custom_width: Optional[float] = None
    custom_height: Optional[float] = None

    quantity_selection: str = "standard"  # "standard" or "custom"
    standard_quantity_id: Optional[str] = None
    custom_quantity: Optional[int] = None

    selected_addons: list[SelectedAddon] = field(default_factory=list)

    category_id: Optional[str] = None
    product_id: Optional[str] = None
    is_broker: bool = False
    broker_category_discounts: list[BrokerCategoryDiscount] = field(default_factory=list)


# ============================================================================
# Result
# ============================================================================

@dataclass
class TraceStep:
    """A single step in the pricing trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class QuantitySuggestion:
    lower: int
    upper: int


@dataclass
class SizeValidation:
    is_valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass
class QuantityValidation:
    is_valid: bool
    error: Optional[str] = None
    suggestion: Optional[QuantitySuggestion] = None


@dataclass
class BaseCalculation:
    size: float
    quantity: float
    paper_price: float
    sides_multiplier: float
    base_price: float
    formula: str = "((Base Paper Price × Sides Multiplier) × Size × Quantity)"


@dataclass
class Adjustment:
    applied: bool = False
    percentage: float = 0.0
    amount: float = 0.0


@dataclass
class Adjustments:
    broker_discount: Adjustment = field(default_factory=Adjustment)
    tagline_discount: Adjustment = field(default_factory=Adjustment)
    exact_size_markup: Adjustment = field(default_factory=Adjustment)


@dataclass
class TurnaroundCharge:
    name: str
    pricing_model: PricingModel
    markup_percent: float
    markup_amount: float
    days: str = ""


@dataclass
class AddonCharge:
    id: str
    name: str
    cost: float
    calculation: str


@dataclass
class Totals:
    base_price: float
    after_adjustments: float
    after_turnaround: float
    final: float
    unit_price: float


@dataclass
class ValidationSummary:
    is_valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class BreakdownSection:
    title: str
    lines: list[str] = field(default_factory=list)


@dataclass
class PricingResult:
    """Complete result of a price calculation."""
    base_calculation: BaseCalculation
    adjustments: Adjustments
    turnaround: TurnaroundCharge
    addons: list[AddonCharge]
    total_addons_cost: float
    totals: Totals
    validation: ValidationSummary = field(default_factory=ValidationSummary)
    display_breakdown: list[BreakdownSection] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the result trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)

    def get_breakdown_text(self) -> str:
        """Render the display breakdown as a block of text."""
        blocks = []
        for section in self.display_breakdown:
            blocks.append("\n".join([f"{section.title}:"] + [f"  {line}" for line in section.lines]))
        return "\n\n".join(blocks)

    def to_dict(self) -> dict:
        """Convert to the camelCase shape consumed by the storefront."""
        def adjustment(a: Adjustment) -> dict:
            return {"applied": a.applied, "percentage": a.percentage, "amount": a.amount}

        return {
            "baseCalculation": {
                "basePrice": self.base_calculation.base_price,
                "size": self.base_calculation.size,
                "quantity": self.base_calculation.quantity,
                "paperPrice": self.base_calculation.paper_price,
                "sidesMultiplier": self.base_calculation.sides_multiplier,
                "formula": self.base_calculation.formula,
            },
            "adjustments": {
                "brokerDiscount": adjustment(self.adjustments.broker_discount),
                "taglineDiscount": adjustment(self.adjustments.tagline_discount),
                "exactSizeMarkup": adjustment(self.adjustments.exact_size_markup),
            },
            "turnaround": {
                "name": self.turnaround.name,
                "days": self.turnaround.days,
                "pricingModel": self.turnaround.pricing_model.value,
                "markupPercent": self.turnaround.markup_percent,
                "markupAmount": self.turnaround.markup_amount,
            },
            "addons": [
                {"id": a.id, "name": a.name, "cost": a.cost, "calculation": a.calculation}
                for a in self.addons
            ],
            "totalAddonsCost": self.total_addons_cost,
            "totals": {
                "basePrice": self.totals.base_price,
                "afterAdjustments": self.totals.after_adjustments,
                "afterTurnaround": self.totals.after_turnaround,
                "final": self.totals.final,
                "unitPrice": self.totals.unit_price,
            },
            "displayBreakdown": [
                {"title": s.title, "lines": list(s.lines)} for s in self.display_breakdown
            ],
            "validation": {
                "isValid": self.validation.is_valid,
                "errors": list(self.validation.errors),
                "warnings": list(self.validation.warnings),
            },
        }
