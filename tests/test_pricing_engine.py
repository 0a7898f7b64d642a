"""
End-to-end pricing tests against a fixed mock catalog.

Figures follow the print shop's published examples (4x6 postcards on
14pt cardstock, 70lb text double-sided, broker and rush pricing).
"""
import pytest

from print_pricing.engine import (
    BrokerCategoryDiscount,
    CatalogLookupError,
    SelectedAddon,
    ValidationError,
)
from print_pricing.engine.breakdown import SECTION_ORDER
from print_pricing.engine.models import Addon, AppliesTo, PercentageConfig, PricingModel


def test_standard_size_and_quantity_base_price(engine, catalog, make_request):
    """((0.00145833333 × 1.0) × 24 × 5000) ≈ 175"""
    result = engine.calculate_price(make_request(), catalog)

    assert result.base_calculation.base_price == pytest.approx(175, abs=0.01)
    assert result.base_calculation.size == 24
    assert result.base_calculation.quantity == 5000
    assert result.base_calculation.sides_multiplier == 1.0


def test_calculation_value_used_for_small_runs(engine, catalog, make_request):
    result = engine.calculate_price(make_request(standard_quantity_id='qty-100'), catalog)
    assert result.base_calculation.quantity == 125


def test_adjustment_value_overrides_calculation_value(engine, catalog, make_request):
    result = engine.calculate_price(make_request(standard_quantity_id='qty-500'), catalog)
    assert result.base_calculation.quantity == 550


def test_adjustment_value_ignored_at_or_above_threshold(engine, catalog, make_request):
    result = engine.calculate_price(make_request(standard_quantity_id='qty-10000'), catalog)
    assert result.base_calculation.quantity == 10000


def test_double_sided_text_paper_multiplier(engine, catalog, make_request):
    """((0.002 × 1.75) × 24 × 125) = 10.5"""
    request = make_request(standard_quantity_id='qty-100', paper_stock_id='paper-text-70lb', sides='double')
    result = engine.calculate_price(request, catalog)

    assert result.base_calculation.sides_multiplier == 1.75
    assert result.base_calculation.base_price == pytest.approx(10.5, abs=1e-9)


def test_no_multiplier_for_double_sided_cardstock(engine, catalog, make_request):
    request = make_request(standard_quantity_id='qty-100', sides='double')
    result = engine.calculate_price(request, catalog)

    assert result.base_calculation.sides_multiplier == 1.0
    assert result.base_calculation.base_price == pytest.approx(0.00145833333 * 24 * 125, abs=1e-9)


def test_no_multiplier_for_single_sided_text_paper(engine, catalog, make_request):
    request = make_request(paper_stock_id='paper-text-70lb', sides='single')
    result = engine.calculate_price(request, catalog)
    assert result.base_calculation.sides_multiplier == 1.0


@pytest.mark.parametrize("size_id,size_value", [('size-4x6', 24), ('size-8.5x11', 93.5)])
@pytest.mark.parametrize("quantity_id,quantity_value", [
    ('qty-100', 125), ('qty-500', 550), ('qty-5000', 5000), ('qty-10000', 10000),
])
def test_base_price_matches_formula(engine, catalog, make_request, size_id, size_value,
                                    quantity_id, quantity_value):
    request = make_request(standard_size_id=size_id, standard_quantity_id=quantity_id, sides='double')
    result = engine.calculate_price(request, catalog)
    expected = 0.00145833333 * size_value * quantity_value
    assert result.base_calculation.base_price == pytest.approx(expected, abs=1e-9)


def test_custom_size_uses_width_times_height(engine, catalog, make_request):
    request = make_request(size_selection='custom', standard_size_id=None, custom_width=5.5, custom_height=8.5)
    result = engine.calculate_price(request, catalog)
    assert result.base_calculation.size == 46.75


def test_custom_size_off_increment_rejected(engine, catalog, make_request):
    request = make_request(size_selection='custom', standard_size_id=None, custom_width=5.3, custom_height=8.5)

    with pytest.raises(ValidationError) as excinfo:
        engine.calculate_price(request, catalog)

    assert any(
        e.startswith("Width") and '5.25"' in e and '5.5"' in e
        for e in excinfo.value.errors
    )


@pytest.mark.parametrize("qty", [2500, 5000, 10000])
def test_valid_custom_quantities(engine, catalog, make_request, qty):
    request = make_request(quantity_selection='custom', standard_quantity_id=None, custom_quantity=qty)
    result = engine.calculate_price(request, catalog)
    assert result.base_calculation.quantity == qty


def test_custom_quantity_off_increment_rejected(engine, catalog, make_request):
    request = make_request(quantity_selection='custom', standard_quantity_id=None, custom_quantity=5001)

    with pytest.raises(ValidationError) as excinfo:
        engine.calculate_price(request, catalog)

    assert excinfo.value.suggestion.lower == 5000
    assert excinfo.value.suggestion.upper == 10000


def test_broker_discount(engine, catalog, make_request):
    request = make_request(
        category_id='cat-postcards',
        is_broker=True,
        broker_category_discounts=[BrokerCategoryDiscount('cat-postcards', 10)],
    )
    result = engine.calculate_price(request, catalog)

    assert result.adjustments.broker_discount.applied is True
    assert result.adjustments.broker_discount.percentage == 10
    assert result.adjustments.broker_discount.amount == pytest.approx(17.5, abs=0.01)
    assert result.totals.after_adjustments == pytest.approx(157.5, abs=0.01)


def test_broker_discount_needs_matching_category(engine, catalog, make_request):
    request = make_request(
        category_id='cat-flyers',
        is_broker=True,
        broker_category_discounts=[BrokerCategoryDiscount('cat-postcards', 10)],
    )
    result = engine.calculate_price(request, catalog)

    assert result.adjustments.broker_discount.applied is False
    assert result.totals.after_adjustments == pytest.approx(175, abs=0.01)


def test_broker_discount_ignored_for_non_brokers(engine, catalog, make_request):
    request = make_request(
        category_id='cat-postcards',
        broker_category_discounts=[BrokerCategoryDiscount('cat-postcards', 10)],
    )
    result = engine.calculate_price(request, catalog)
    assert result.adjustments.broker_discount.applied is False


def test_tagline_discount_for_retail_customers(engine, catalog, make_request):
    request = make_request(selected_addons=[SelectedAddon('addon-our-tagline')])
    result = engine.calculate_price(request, catalog)

    assert result.adjustments.tagline_discount.applied is True
    assert result.adjustments.tagline_discount.percentage == 5
    assert result.adjustments.tagline_discount.amount == pytest.approx(8.75, abs=0.01)
    assert result.totals.after_adjustments == pytest.approx(166.25, abs=0.01)
    # Folded into adjustments, never a line item
    assert result.addons == []


def test_tagline_never_applies_to_brokers(engine, catalog, make_request):
    request = make_request(
        category_id='cat-postcards',
        is_broker=True,
        broker_category_discounts=[BrokerCategoryDiscount('cat-postcards', 10)],
        selected_addons=[SelectedAddon('addon-our-tagline')],
    )
    result = engine.calculate_price(request, catalog)

    assert result.adjustments.broker_discount.applied is True
    assert result.adjustments.tagline_discount.applied is False
    assert result.totals.after_adjustments == pytest.approx(157.5, abs=0.01)


def test_tagline_blocked_for_broker_without_category_discount(engine, catalog, make_request):
    request = make_request(is_broker=True, selected_addons=[SelectedAddon('addon-our-tagline')])
    result = engine.calculate_price(request, catalog)

    assert result.adjustments.broker_discount.applied is False
    assert result.adjustments.tagline_discount.applied is False


def test_exact_size_markup(engine, catalog, make_request):
    request = make_request(selected_addons=[SelectedAddon('addon-exact-size')])
    result = engine.calculate_price(request, catalog)

    assert result.adjustments.exact_size_markup.applied is True
    assert result.adjustments.exact_size_markup.amount == pytest.approx(21.875, abs=0.01)
    assert result.totals.after_adjustments == pytest.approx(196.875, abs=0.01)
    assert result.addons == []


def test_exact_size_markup_on_discounted_base(engine, catalog, make_request):
    request = make_request(selected_addons=[SelectedAddon('addon-our-tagline'), SelectedAddon('addon-exact-size')])
    result = engine.calculate_price(request, catalog)

    # 12.5% of (175 - 8.75)
    assert result.adjustments.exact_size_markup.amount == pytest.approx(20.78125, abs=0.01)
    assert result.totals.after_adjustments == pytest.approx(187.03125, abs=0.01)


@pytest.mark.parametrize("percent", [150, -10, float('nan')])
def test_broker_discount_outside_percent_range_rejected(engine, catalog, make_request, percent):
    request = make_request(
        category_id='cat-postcards',
        is_broker=True,
        broker_category_discounts=[BrokerCategoryDiscount('cat-postcards', percent)],
    )
    with pytest.raises(ValidationError) as excinfo:
        engine.calculate_price(request, catalog)
    assert "between 0 and 100 percent" in excinfo.value.errors[0]


def test_full_broker_discount_prices_to_zero(engine, catalog, make_request):
    request = make_request(
        category_id='cat-postcards',
        is_broker=True,
        broker_category_discounts=[BrokerCategoryDiscount('cat-postcards', 100)],
    )
    result = engine.calculate_price(request, catalog)
    assert result.totals.after_adjustments == pytest.approx(0, abs=1e-9)
    assert result.totals.final >= 0


def test_negative_addon_quantity_rejected(engine, catalog, make_request):
    request = make_request(selected_addons=[SelectedAddon('addon-perforation', quantity=-500)])
    with pytest.raises(ValidationError) as excinfo:
        engine.calculate_price(request, catalog)
    assert excinfo.value.errors == ["Add-on addon-perforation quantity cannot be negative"]


def test_zero_percent_tagline_gives_no_discount(engine, catalog, make_request):
    catalog.addons.append(Addon(
        id='addon-our-tagline-off', name='Our Tagline (paused)', pricing_model=PricingModel.PERCENTAGE,
        configuration=PercentageConfig(percentage=0, applies_to=AppliesTo.BASE_PRICE),
    ))
    result = engine.calculate_price(make_request(selected_addons=[SelectedAddon('addon-our-tagline-off')]), catalog)

    assert result.adjustments.tagline_discount.applied is True
    assert result.adjustments.tagline_discount.percentage == 0
    assert result.adjustments.tagline_discount.amount == 0
    assert result.totals.after_adjustments == pytest.approx(175, abs=0.01)


def test_tagline_without_percentage_uses_default(engine, catalog, make_request):
    catalog.addons.append(Addon(
        id='addon-our-tagline-default', name='Our Tagline', pricing_model=PricingModel.PERCENTAGE,
        configuration=PercentageConfig(applies_to=AppliesTo.BASE_PRICE),
    ))
    result = engine.calculate_price(
        make_request(selected_addons=[SelectedAddon('addon-our-tagline-default')]), catalog
    )
    assert result.adjustments.tagline_discount.percentage == 5


def test_zero_percent_exact_size_adds_nothing(engine, catalog, make_request):
    catalog.addons.append(Addon(
        id='addon-exact-size-free', name='Exact Size', pricing_model=PricingModel.PERCENTAGE,
        configuration=PercentageConfig(percentage=0),
    ))
    result = engine.calculate_price(make_request(selected_addons=[SelectedAddon('addon-exact-size-free')]), catalog)
    assert result.adjustments.exact_size_markup.amount == 0


def test_tagline_over_100_percent_rejected(engine, catalog, make_request):
    catalog.addons.append(Addon(
        id='addon-our-tagline-bad', name='Our Tagline', pricing_model=PricingModel.PERCENTAGE,
        configuration=PercentageConfig(percentage=120),
    ))
    with pytest.raises(ValidationError):
        engine.calculate_price(make_request(selected_addons=[SelectedAddon('addon-our-tagline-bad')]), catalog)


@pytest.mark.parametrize("width", [float('nan'), float('inf')])
def test_non_numeric_custom_width_rejected(engine, catalog, make_request, width):
    request = make_request(size_selection='custom', standard_size_id=None, custom_width=width, custom_height=4)
    with pytest.raises(ValidationError) as excinfo:
        engine.calculate_price(request, catalog)
    assert "Width must be a number" in excinfo.value.errors


def test_rush_turnaround_markup(engine, catalog, make_request):
    request = make_request(
        turnaround_id='turnaround-rush',
        category_id='cat-postcards',
        is_broker=True,
        broker_category_discounts=[BrokerCategoryDiscount('cat-postcards', 10)],
    )
    result = engine.calculate_price(request, catalog)

    assert result.turnaround.markup_percent == pytest.approx(25)
    assert result.turnaround.markup_amount == pytest.approx(39.375, abs=0.01)
    assert result.totals.after_turnaround == pytest.approx(196.875, abs=0.01)


def test_standard_turnaround_adds_nothing(engine, catalog, make_request):
    result = engine.calculate_price(make_request(), catalog)
    assert result.turnaround.markup_amount == 0
    assert result.turnaround.days == "5-7 days"


def test_flat_turnaround(engine, catalog, make_request):
    result = engine.calculate_price(make_request(turnaround_id='turnaround-same-day'), catalog)
    assert result.turnaround.markup_amount == 75


def test_custom_turnaround_combines_percentage_and_flat(engine, catalog, make_request):
    result = engine.calculate_price(make_request(turnaround_id='turnaround-next-day'), catalog)
    # 175 × 0.5 + 15
    assert result.turnaround.markup_amount == pytest.approx(102.5, abs=0.01)


def test_final_total_identity(engine, catalog, make_request):
    request = make_request(
        turnaround_id='turnaround-rush',
        selected_addons=[
            SelectedAddon('addon-digital-proof'),
            SelectedAddon('addon-perforation'),
            SelectedAddon('addon-our-tagline'),
            SelectedAddon('addon-exact-size'),
        ],
    )
    result = engine.calculate_price(request, catalog)

    expected = result.totals.after_adjustments + result.turnaround.markup_amount + result.total_addons_cost
    assert result.totals.final == pytest.approx(expected, abs=1e-9)
    assert result.total_addons_cost == pytest.approx(75, abs=1e-9)


def test_unit_price_uses_display_quantity(engine, catalog, make_request):
    result = engine.calculate_price(make_request(standard_quantity_id='qty-100'), catalog)
    assert result.totals.unit_price == pytest.approx(result.totals.final / 100)


def test_zero_size_prices_to_zero(engine, catalog, make_request):
    from print_pricing.engine import Size
    catalog.sizes.append(Size(id='size-placeholder', name='Pending', width=0, height=0, pre_calculated_value=0))

    result = engine.calculate_price(make_request(standard_size_id='size-placeholder'), catalog)

    assert result.base_calculation.base_price == 0
    assert result.totals.final == 0


def test_zero_quantity_prices_to_zero(engine, catalog, make_request):
    from print_pricing.engine import Quantity
    catalog.quantities.append(Quantity(id='qty-pending', display_value=0, calculation_value=0))

    result = engine.calculate_price(make_request(standard_quantity_id='qty-pending'), catalog)

    assert result.base_calculation.base_price == 0
    assert result.totals.unit_price == 0


def test_custom_zero_quantity_prices_to_zero(engine, catalog, make_request):
    request = make_request(quantity_selection='custom', standard_quantity_id=None, custom_quantity=0)
    result = engine.calculate_price(request, catalog)

    assert result.base_calculation.base_price == 0
    assert result.totals.unit_price == 0


def test_unknown_paper_stock(engine, catalog, make_request):
    with pytest.raises(CatalogLookupError) as excinfo:
        engine.calculate_price(make_request(paper_stock_id='paper-deleted'), catalog)
    assert excinfo.value.entity == "Paper stock"
    assert excinfo.value.entity_id == 'paper-deleted'


@pytest.mark.parametrize("overrides", [
    {'standard_size_id': 'size-missing'},
    {'standard_quantity_id': 'qty-missing'},
    {'turnaround_id': 'turnaround-missing'},
    {'selected_addons': [SelectedAddon('addon-missing')]},
])
def test_unknown_catalog_ids(engine, catalog, make_request, overrides):
    with pytest.raises(CatalogLookupError):
        engine.calculate_price(make_request(**overrides), catalog)


@pytest.mark.parametrize("overrides,message", [
    ({'paper_stock_id': None}, "Paper stock is required"),
    ({'turnaround_id': None}, "Turnaround time is required"),
    ({'sides': 'triple'}, 'Sides must be either "single" or "double"'),
    ({'standard_size_id': None}, "Standard size ID is required"),
    ({'size_selection': 'oversized'}, 'Size selection must be either "standard" or "custom"'),
    ({'custom_quantity': 500}, "Choose either a standard quantity or a custom quantity, not both"),
    ({'custom_width': 4}, "Choose either a standard size or a custom size, not both"),
])
def test_structural_validation(engine, catalog, make_request, overrides, message):
    with pytest.raises(ValidationError) as excinfo:
        engine.calculate_price(make_request(**overrides), catalog)
    assert message in excinfo.value.errors


def test_validation_collects_every_error(engine, catalog, make_request):
    request = make_request(
        size_selection='custom', standard_size_id=None, custom_width=5.3, custom_height=8.6,
        sides='both',
    )
    with pytest.raises(ValidationError) as excinfo:
        engine.calculate_price(request, catalog)
    assert len(excinfo.value.errors) == 3


def test_warnings_do_not_block_pricing(engine, catalog, make_request):
    request = make_request(
        size_selection='custom', standard_size_id=None, custom_width=60, custom_height=6,
        selected_addons=[SelectedAddon('addon-uv-coating'), SelectedAddon('addon-matte-coating')],
    )
    result = engine.calculate_price(request, catalog)

    assert result.validation.is_valid is True
    assert "Custom width should be between 1 and 48 inches" in result.validation.warnings
    assert "UV Coating conflicts with: Matte Coating" in result.validation.warnings
    assert result.base_calculation.size == 360


def test_breakdown_sections_in_order(engine, catalog, make_request):
    result = engine.calculate_price(make_request(), catalog)

    assert [s.title for s in result.display_breakdown] == list(SECTION_ORDER)
    assert SECTION_ORDER == ('BASE CALCULATION', 'ADJUSTMENTS', 'TURNAROUND', 'ADD-ONS', 'FINAL TOTALS')
    assert result.display_breakdown[1].lines[0] == "None"

    text = result.get_breakdown_text()
    assert text.index("BASE CALCULATION:") < text.index("ADJUSTMENTS:") < text.index("FINAL TOTALS:")
    assert "Base Price: $175.00" in text


def test_breakdown_lists_addons(engine, catalog, make_request):
    request = make_request(selected_addons=[SelectedAddon('addon-perforation')])
    result = engine.calculate_price(request, catalog)

    addon_section = result.display_breakdown[3]
    assert addon_section.lines[0] == "Perforation: $70.00"
    assert "$20 setup + $0.01 × 5000 pieces" in addon_section.lines[1]


def test_trace_records_each_phase(engine, catalog, make_request):
    request = make_request(
        is_broker=True,
        selected_addons=[SelectedAddon('addon-our-tagline')],
    )
    result = engine.calculate_price(request, catalog)
    steps = [t.step for t in result.trace]

    assert steps[:4] == ["Size", "Quantity", "Sides", "Base Price"]
    assert "Tagline Discount" in steps
    assert steps[-1] == "Final"
    assert "Not applied to broker pricing" in result.get_trace_text()


def test_calculation_is_idempotent(engine, catalog, make_request):
    request = make_request(
        turnaround_id='turnaround-rush',
        selected_addons=[SelectedAddon('addon-exact-size'), SelectedAddon('addon-banding')],
    )
    assert engine.calculate_price(request, catalog) == engine.calculate_price(request, catalog)


def test_to_dict_shape(engine, catalog, make_request):
    data = engine.calculate_price(make_request(), catalog).to_dict()

    assert set(data) == {
        'baseCalculation', 'adjustments', 'turnaround', 'addons', 'totalAddonsCost',
        'totals', 'displayBreakdown', 'validation',
    }
    assert data['baseCalculation']['basePrice'] == pytest.approx(175, abs=0.01)
    assert data['adjustments']['brokerDiscount'] == {'applied': False, 'percentage': 0.0, 'amount': 0.0}
    assert data['turnaround']['pricingModel'] == 'PERCENTAGE'
    assert data['validation']['isValid'] is True


def test_quick_calculate(engine):
    assert engine.quick_calculate(0.00145833333, 24, 5000) == pytest.approx(175, abs=0.01)
    assert engine.quick_calculate(0.002, 24, 125, is_double_sided=True, is_exception_paper=True) == \
        pytest.approx(10.5, abs=1e-9)
    assert engine.quick_calculate(0.002, 24, 125, is_double_sided=True) == pytest.approx(6.0, abs=1e-9)
