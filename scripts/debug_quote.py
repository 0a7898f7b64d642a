#!/usr/bin/env python
"""
Price a sample configuration against the shipped catalog and print the breakdown.

Usage:
    python scripts/debug_quote.py
"""
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from print_pricing.data.catalog_loader import load_catalog
from print_pricing.engine import (
    BrokerCategoryDiscount,
    PricingEngine,
    PricingRequest,
    SelectedAddon,
    ValidationError,
)


def debug():
    engine = PricingEngine()
    catalog = load_catalog()

    print("Loaded Catalog:")
    print(f"  Sizes: {[s.name for s in catalog.sizes]}")
    print(f"  Paper: {[p.name for p in catalog.paper_stocks]}")
    print(f"  Turnarounds: {[t.name for t in catalog.turnarounds]}")
    print(f"  Add-ons: {[a.name for a in catalog.addons]}")

    # Test Case: 4x6 postcards, 5000 on 14pt, rush, perforated
    print("\n--- Testing 4x6 / 5000 / Rush ---")
    req = PricingRequest(
        paper_stock_id="paper-14pt-cardstock",
        turnaround_id="turnaround-rush",
        standard_size_id="size-4x6",
        standard_quantity_id="qty-5000",
        selected_addons=[SelectedAddon("addon-perforation"), SelectedAddon("addon-our-tagline")],
    )
    result = engine.calculate_price(req, catalog)
    print(result.get_breakdown_text())
    print("\nTrace:")
    print(result.get_trace_text())

    # Test Case: same order for a broker with a 10% category discount
    print("\n--- Testing Broker Pricing ---")
    req.is_broker = True
    req.category_id = "postcards"
    req.broker_category_discounts = [BrokerCategoryDiscount("postcards", 10)]
    result = engine.calculate_price(req, catalog)
    print(result.get_breakdown_text())

    # Test Case: custom quantity off the increment grid
    print("\n--- Testing Custom Quantity 57000 ---")
    req.quantity_selection = "custom"
    req.standard_quantity_id = None
    req.custom_quantity = 57000
    try:
        engine.calculate_price(req, catalog)
    except ValidationError as e:
        print(f"Rejected: {e.errors}")
        print(f"Suggestion: {e.suggestion}")


if __name__ == "__main__":
    debug()
