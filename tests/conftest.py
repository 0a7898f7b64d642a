import os
import sys

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from print_pricing.engine import (
    Addon,
    Catalog,
    PaperStock,
    PricingEngine,
    PricingModel,
    PricingRequest,
    Quantity,
    Size,
    Turnaround,
)
from print_pricing.engine.models import (
    AppliesTo,
    CustomConfig,
    FlatConfig,
    PercentageConfig,
    PerUnitConfig,
    PriceTier,
    TieredConfig,
)


@pytest.fixture
def catalog():
    return Catalog(
        sizes=[
            Size(id='size-4x6', name='4x6', width=4, height=6, pre_calculated_value=24),
            Size(id='size-8.5x11', name='8.5x11', width=8.5, height=11, pre_calculated_value=93.5),
        ],
        quantities=[
            Quantity(id='qty-100', display_value=100, calculation_value=125),
            Quantity(id='qty-500', display_value=500, calculation_value=600, adjustment_value=550),
            Quantity(id='qty-5000', display_value=5000, calculation_value=5000),
            Quantity(id='qty-10000', display_value=10000, calculation_value=10000, adjustment_value=9000),
        ],
        paper_stocks=[
            PaperStock(id='paper-14pt-cardstock', name='14pt Cardstock',
                       price_per_sq_inch=0.00145833333, double_sided_multiplier=1.0),
            PaperStock(id='paper-text-70lb', name='70lb Text Paper', price_per_sq_inch=0.002,
                       is_exception_paper=True, double_sided_multiplier=1.75, paper_type='text'),
        ],
        turnarounds=[
            Turnaround(id='turnaround-standard', name='Standard', price_multiplier=0,
                       min_business_days=5, max_business_days=7, is_standard=True),
            Turnaround(id='turnaround-rush', name='Rush', price_multiplier=0.25,
                       min_business_days=2, max_business_days=3),
            Turnaround(id='turnaround-next-day', name='Next Day', pricing_model=PricingModel.CUSTOM,
                       price_multiplier=0.5, base_price=15, min_business_days=1, max_business_days=1),
            Turnaround(id='turnaround-same-day', name='Same Day Pickup', pricing_model=PricingModel.FLAT,
                       base_price=75),
        ],
        addons=[
            Addon(id='addon-digital-proof', name='Digital Proof', pricing_model=PricingModel.FLAT,
                  configuration=FlatConfig(flat_price=5)),
            Addon(id='addon-perforation', name='Perforation', pricing_model=PricingModel.PER_UNIT,
                  configuration=PerUnitConfig(setup_fee=20, price_per_unit=0.01, unit_type='piece')),
            Addon(id='addon-our-tagline', name='Our Tagline', pricing_model=PricingModel.PERCENTAGE,
                  configuration=PercentageConfig(percentage=5, applies_to=AppliesTo.BASE_PRICE)),
            Addon(id='addon-exact-size', name='Exact Size', pricing_model=PricingModel.PERCENTAGE,
                  configuration=PercentageConfig(percentage=12.5, applies_to=AppliesTo.ADJUSTED_BASE)),
            Addon(id='addon-color-critical', name='Color Critical', pricing_model=PricingModel.PERCENTAGE,
                  configuration=PercentageConfig(percentage=10, applies_to=AppliesTo.ADJUSTED_BASE)),
            Addon(id='addon-design-review', name='Design Review', pricing_model=PricingModel.CUSTOM,
                  configuration=CustomConfig(percentage=2, flat_price=10, applies_to=AppliesTo.BASE_PRICE)),
            Addon(id='addon-banding', name='Banding', pricing_model=PricingModel.TIERED,
                  configuration=TieredConfig(tiers=(
                      PriceTier(min_quantity=1, max_quantity=999, price=10),
                      PriceTier(min_quantity=1000, price=15, price_per_unit=0.002),
                  ))),
            Addon(id='addon-free-sample', name='Free Sample', pricing_model=PricingModel.FLAT,
                  configuration=FlatConfig(flat_price=0)),
            Addon(id='addon-uv-coating', name='UV Coating', pricing_model=PricingModel.FLAT,
                  configuration=FlatConfig(flat_price=25), conflicts_with=('addon-matte-coating',)),
            Addon(id='addon-matte-coating', name='Matte Coating', pricing_model=PricingModel.FLAT,
                  configuration=FlatConfig(flat_price=20), conflicts_with=('addon-uv-coating',)),
        ],
    )


@pytest.fixture
def engine():
    return PricingEngine()


@pytest.fixture
def make_request():
    """Factory for requests defaulting to 4x6 / 5000 / 14pt / single / standard."""
    def _make(**overrides) -> PricingRequest:
        fields = dict(
            paper_stock_id='paper-14pt-cardstock',
            turnaround_id='turnaround-standard',
            sides='single',
            size_selection='standard',
            standard_size_id='size-4x6',
            quantity_selection='standard',
            standard_quantity_id='qty-5000',
        )
        fields.update(overrides)
        return PricingRequest(**fields)
    return _make
