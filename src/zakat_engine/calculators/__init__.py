"""Zakat calculators — nisab, asset categories, liabilities, aggregation."""

from .aggregate import Aggregate, aggregate, compute_zakat_due
from .assets import (
    CATEGORY_LABELS,
    categorize_assets,
    rate_overrides_for,
    retirement_accessible,
)
from .liabilities import LIABILITY_KINDS, resolve_liabilities
from .nisab import compute_nisab

__all__ = [
    "CATEGORY_LABELS",
    "LIABILITY_KINDS",
    "Aggregate",
    "aggregate",
    "categorize_assets",
    "compute_nisab",
    "compute_zakat_due",
    "rate_overrides_for",
    "resolve_liabilities",
    "retirement_accessible",
]
