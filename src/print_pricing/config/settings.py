"""
Centralized settings, path configuration and business constants for the pricing engine.
"""
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


# Business rules shared by the validator and the calculators
SIZE_INCREMENT = 0.25
QUANTITY_INCREMENT = 5000
QUANTITY_INCREMENT_THRESHOLD = 5000
DEFAULT_DOUBLE_SIDED_MULTIPLIER = 1.75

TAGLINE_ADDON_NAME = "Our Tagline"
TAGLINE_DEFAULT_PERCENT = 5
EXACT_SIZE_ADDON_NAME = "Exact Size"
EXACT_SIZE_DEFAULT_PERCENT = 12.5


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path

    # Catalog snapshot: a directory of CSVs, optionally an Excel workbook
    catalog_dir: Path
    catalog_workbook: Optional[Path] = None

    # Custom size rules (inches)
    size_increment: float = SIZE_INCREMENT
    min_custom_dimension: float = 1
    max_custom_dimension: float = 48

    # Custom quantity rules
    quantity_increment: int = QUANTITY_INCREMENT
    quantity_increment_threshold: int = QUANTITY_INCREMENT_THRESHOLD
    large_quantity_warning: int = 1_000_000

    default_double_sided_multiplier: float = DEFAULT_DOUBLE_SIDED_MULTIPLIER

    # Reserved promotional add-ons, matched by name
    tagline_addon_name: str = TAGLINE_ADDON_NAME
    tagline_default_percent: float = TAGLINE_DEFAULT_PERCENT
    exact_size_addon_name: str = EXACT_SIZE_ADDON_NAME
    exact_size_default_percent: float = EXACT_SIZE_DEFAULT_PERCENT

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure."""
        root = project_root or get_project_root()
        package_dir = Path(__file__).resolve().parent.parent

        workbook = root / 'catalog.xlsx'

        return cls(
            project_root=root,
            catalog_dir=package_dir / 'data' / 'catalog',
            catalog_workbook=workbook if workbook.exists() else None,
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
