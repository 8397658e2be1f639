"""Methodology-driven zakat calculation engine."""

__version__ = "0.1.0"

from .core.exceptions import ConfigurationError, SnapshotError, UnknownMethodologyError, ZakatEngineError
from .engine import calculate_zakat, compare_methodologies
from .methodology import MethodologyConfig, MethodologyRegistry, default_registry, load_presets
from .models import CalculatedCategory, FinancialSnapshot, ZakatReport

__all__ = [
    "CalculatedCategory",
    "ConfigurationError",
    "FinancialSnapshot",
    "MethodologyConfig",
    "MethodologyRegistry",
    "SnapshotError",
    "UnknownMethodologyError",
    "ZakatEngineError",
    "ZakatReport",
    "__version__",
    "calculate_zakat",
    "compare_methodologies",
    "default_registry",
    "load_presets",
]
