#!/usr/bin/env python
"""
Check pipeline - loads the catalog snapshot and runs the test suite.

Usage:
    python scripts/build_all.py [catalog source]
"""
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from print_pricing.data.catalog_loader import load_catalog


def main():
    print("=" * 60)
    print("PRINT PRICING CHECK PIPELINE")
    print("=" * 60)
    print()
    
    # Load catalog
    print("[1/2] Loading catalog...")
    source = sys.argv[1] if len(sys.argv) > 1 else None
    try:
        catalog = load_catalog(source)
    except (FileNotFoundError, ValueError) as e:
        print("\n❌ CATALOG LOAD FAILED")
        print(f"  ERROR: {e}")
        sys.exit(1)
    
    print()
    print("[2/2] Running tests...")
    
    # Run tests
    import subprocess
    test_result = subprocess.run(
        [sys.executable, '-m', 'pytest', 'tests', '-v', '--tb=short'],
        cwd=Path(__file__).parent.parent
    )
    
    if test_result.returncode != 0:
        print("\n❌ TESTS FAILED")
        sys.exit(1)
    
    print()
    print("=" * 60)
    print("✅ CHECK COMPLETE")
    print("=" * 60)
    print()
    print("Summary:")
    print(f"  Sizes: {len(catalog.sizes)}")
    print(f"  Quantities: {len(catalog.quantities)}")
    print(f"  Paper stocks: {len(catalog.paper_stocks)}")
    print(f"  Turnarounds: {len(catalog.turnarounds)}")
    print(f"  Add-ons: {len(catalog.addons)}")


if __name__ == "__main__":
    main()
