"""
Catalog Loader - builds a Catalog snapshot from CSV exports or an Excel workbook.

Sources:
- a directory holding sizes.csv, quantities.csv, paper_stocks.csv,
  turnarounds.csv and addons.csv
- an .xlsx workbook with the sheets Sizes, Quantities, Paper Stocks,
  Turnarounds and Add-ons

Turnaround markups are stored as percentages and converted to the
fraction the engine expects.
"""
import json
import logging
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from ..config.settings import get_settings, Settings
from ..engine.models import (
    Addon,
    Catalog,
    PaperStock,
    PricingModel,
    Quantity,
    Size,
    Turnaround,
    parse_addon_configuration,
)

logger = logging.getLogger(__name__)

CSV_FILES = {
    'sizes': 'sizes.csv',
    'quantities': 'quantities.csv',
    'paper_stocks': 'paper_stocks.csv',
    'turnarounds': 'turnarounds.csv',
    'addons': 'addons.csv',
}

SHEET_NAMES = {
    'sizes': 'Sizes',
    'quantities': 'Quantities',
    'paper_stocks': 'Paper Stocks',
    'turnarounds': 'Turnarounds',
    'addons': 'Add-ons',
}

TRUE_VALUES = {'true', '1', 'yes', 'y', 'on'}


def _clean(value):
    """Map pandas NaN and blank strings to None."""
    if value is None:
        return None
    if isinstance(value, float) and pd.isna(value):
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _bool(value, default: bool = False) -> bool:
    value = _clean(value)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).lower() in TRUE_VALUES


def _int(value, default: Optional[int] = None) -> Optional[int]:
    value = _clean(value)
    if value is None:
        return default
    return int(float(value))


def _float(value, default: Optional[float] = None) -> Optional[float]:
    value = _clean(value)
    if value is None:
        return default
    return float(value)


def _str(value, default: Optional[str] = None) -> Optional[str]:
    value = _clean(value)
    if value is None:
        return default
    return str(value)


def _records(df: pd.DataFrame) -> list[dict]:
    df.columns = [str(c).strip() for c in df.columns]
    return df.to_dict(orient='records')


def _size(row: dict) -> Size:
    return Size(
        id=_str(row['id']),
        name=_str(row['name']),
        display_name=_str(row.get('display_name')),
        width=_float(row['width']),
        height=_float(row['height']),
        pre_calculated_value=_float(row['pre_calculated_value']),
        is_custom=_bool(row.get('is_custom')),
        is_active=_bool(row.get('is_active'), True),
        sort_order=_int(row.get('sort_order'), 0),
    )


def _quantity(row: dict) -> Quantity:
    display = _int(row['display_value'])
    return Quantity(
        id=_str(row['id']),
        display_value=display,
        calculation_value=_int(row.get('calculation_value'), display),
        adjustment_value=_int(row.get('adjustment_value')),
        is_custom=_bool(row.get('is_custom')),
        is_active=_bool(row.get('is_active'), True),
        sort_order=_int(row.get('sort_order'), 0),
    )


def _paper_stock(row: dict) -> PaperStock:
    return PaperStock(
        id=_str(row['id']),
        name=_str(row['name']),
        price_per_sq_inch=_float(row['price_per_sq_inch']),
        is_exception_paper=_bool(row.get('is_exception_paper')),
        double_sided_multiplier=_float(row.get('double_sided_multiplier'), 1.0),
        paper_type=_str(row.get('paper_type'), 'cardstock'),
        thickness=_str(row.get('thickness')),
        coating=_str(row.get('coating')),
    )


def _turnaround(row: dict) -> Turnaround:
    percent = _float(row.get('price_markup_percent'), 0.0)
    return Turnaround(
        id=_str(row['id']),
        name=_str(row['name']),
        pricing_model=PricingModel(_str(row.get('pricing_model'), 'PERCENTAGE').upper()),
        base_price=_float(row.get('base_price'), 0.0),
        price_multiplier=percent / 100,
        min_business_days=_int(row.get('min_business_days')),
        max_business_days=_int(row.get('max_business_days')),
        is_standard=_bool(row.get('is_standard')),
        sort_order=_int(row.get('sort_order'), 0),
    )


def _addon(row: dict) -> Addon:
    model = PricingModel(_str(row['pricing_model']).upper())
    raw_config = _str(row.get('configuration'))
    payload = json.loads(raw_config) if raw_config else {}
    conflicts = _str(row.get('conflicts_with'))
    return Addon(
        id=_str(row['id']),
        name=_str(row['name']),
        category=_str(row.get('category')),
        pricing_model=model,
        configuration=parse_addon_configuration(model, payload),
        is_active=_bool(row.get('is_active'), True),
        sort_order=_int(row.get('sort_order'), 0),
        conflicts_with=tuple(c.strip() for c in conflicts.split(';') if c.strip()) if conflicts else (),
    )


BUILDERS = {
    'sizes': _size,
    'quantities': _quantity,
    'paper_stocks': _paper_stock,
    'turnarounds': _turnaround,
    'addons': _addon,
}


def catalog_from_frames(frames: dict[str, pd.DataFrame]) -> Catalog:
    """Build a Catalog from one DataFrame per entity, sorted by sort order."""
    entries = {}
    for key, builder in BUILDERS.items():
        frame = frames.get(key)
        items = [builder(row) for row in _records(frame)] if frame is not None else []
        if items and hasattr(items[0], 'sort_order'):
            items.sort(key=lambda item: item.sort_order)
        entries[key] = items
    return Catalog(**entries)


def _read_csv_dir(directory: Path) -> dict[str, pd.DataFrame]:
    frames = {}
    for key, filename in CSV_FILES.items():
        path = directory / filename
        if path.exists():
            frames[key] = pd.read_csv(path, dtype=str, keep_default_na=False)
        else:
            logger.warning("Catalog file %s not found, %s will be empty", path, key)
    return frames


def _read_workbook(path: Path) -> dict[str, pd.DataFrame]:
    sheets = pd.read_excel(path, sheet_name=None, dtype=str)
    frames = {}
    for key, sheet in SHEET_NAMES.items():
        if sheet in sheets:
            frames[key] = sheets[sheet]
        else:
            logger.warning("Sheet '%s' missing from %s, %s will be empty", sheet, path.name, key)
    return frames


def load_catalog(source: Optional[Union[str, Path]] = None,
                 settings: Optional[Settings] = None) -> Catalog:
    """
    Load a catalog snapshot.

    Args:
        source: CSV directory or .xlsx workbook; defaults to the configured
            workbook if present, else the configured CSV directory

    Returns:
        Catalog ready to pass to PricingEngine.calculate_price
    """
    settings = settings or get_settings()
    if source is None:
        source = settings.catalog_workbook or settings.catalog_dir
    source = Path(source)

    if not source.exists():
        raise FileNotFoundError(f"Catalog source not found at {source}.")

    if source.is_dir():
        frames = _read_csv_dir(source)
    elif source.suffix.lower() in ('.xlsx', '.xlsm'):
        frames = _read_workbook(source)
    else:
        raise ValueError(f"Unsupported catalog source: {source}")

    catalog = catalog_from_frames(frames)
    logger.info(
        "Loaded catalog from %s: %d sizes, %d quantities, %d paper stocks, %d turnarounds, %d add-ons",
        source, len(catalog.sizes), len(catalog.quantities), len(catalog.paper_stocks),
        len(catalog.turnarounds), len(catalog.addons),
    )
    return catalog
