"""
Calculation pipeline.

    snapshot -> methodology -> nisab -> asset categories -> liabilities
             -> aggregate -> report

Every stage is a pure function of its inputs: the same snapshot, prices and
methodology always produce an equal report.  Metal prices are supplied by the
caller on every call; the engine never fetches or caches them.

Usage:
    report = calculate_zakat(snapshot, gold_price_per_gram=65.0, silver_price_per_gram=0.80)
    reports = compare_methodologies(snapshot, 65.0, 0.80, ["bradford", "hanafi"])
"""

from __future__ import annotations

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor

from loguru import logger

from .calculators import aggregate, categorize_assets, compute_nisab, rate_overrides_for, resolve_liabilities
from .methodology.registry import MethodologyRegistry, default_registry
from .methodology.schema import MethodologyConfig
from .models import FinancialSnapshot, ZakatReport
from .report import assemble_report, compute_purification


def _evaluate(
    snapshot: FinancialSnapshot,
    config: MethodologyConfig,
    methodology_id: str,
    gold_price_per_gram: float,
    silver_price_per_gram: float,
    used_default: bool = False,
    warnings: Iterable[str] = (),
) -> ZakatReport:
    warnings = list(warnings)

    nisab = compute_nisab(config, gold_price_per_gram, silver_price_per_gram, snapshot.nisab_standard)
    if nisab.threshold <= 0:
        warnings.append(f"{nisab.standard.capitalize()} price is not positive; nisab threshold treated as 0")

    breakdown = categorize_assets(snapshot, config, gold_price_per_gram, silver_price_per_gram)
    liabilities = resolve_liabilities(snapshot, config.liabilities)
    result = aggregate(
        breakdown,
        liabilities,
        nisab.threshold,
        config,
        snapshot.calendar_type,
        rate_overrides_for(snapshot, config),
    )

    logger.debug(
        f"{methodology_id}: assets {result.total_assets:,.2f}, liabilities {result.total_liabilities:,.2f}, "
        f"zakat {result.zakat_due:,.2f}"
    )
    return assemble_report(
        snapshot,
        methodology_id=methodology_id,
        methodology_name=config.meta.name,
        used_default_methodology=used_default,
        result=result,
        breakdown=breakdown,
        liabilities=liabilities,
        purification=compute_purification(snapshot),
        nisab=nisab,
        calendar_type=snapshot.calendar_type,
        warnings=warnings,
    )


def calculate_zakat(
    snapshot: FinancialSnapshot,
    gold_price_per_gram: float,
    silver_price_per_gram: float,
    registry: MethodologyRegistry | None = None,
    config: MethodologyConfig | None = None,
) -> ZakatReport:
    """Compute zakat for one snapshot.

    The methodology is ``snapshot.methodology`` looked up in ``registry``
    (the process-wide default registry when omitted).  An unknown id falls
    back to the registry default; the report says so through
    ``used_default_methodology`` and a warning.  Passing ``config`` bypasses
    the registry entirely.

    Args:
        snapshot: The household's finances.
        gold_price_per_gram: Current gold price in the snapshot currency.
        silver_price_per_gram: Current silver price in the snapshot currency.
        registry: Methodologies to resolve ``snapshot.methodology`` against.
        config: Explicit methodology to use instead of a registry lookup.
    """
    if config is not None:
        return _evaluate(snapshot, config, config.meta.id, gold_price_per_gram, silver_price_per_gram)

    registry = registry or default_registry()
    resolution = registry.resolve(snapshot.methodology)
    warnings = []
    if resolution.used_default:
        warnings.append(
            f"Unknown methodology '{snapshot.methodology}'; calculated with default '{resolution.key}' instead"
        )
    return _evaluate(
        snapshot,
        resolution.config,
        resolution.key,
        gold_price_per_gram,
        silver_price_per_gram,
        used_default=resolution.used_default,
        warnings=warnings,
    )


def compare_methodologies(
    snapshot: FinancialSnapshot,
    gold_price_per_gram: float,
    silver_price_per_gram: float,
    methodology_ids: Iterable[str] | None = None,
    registry: MethodologyRegistry | None = None,
    max_workers: int | None = None,
) -> dict[str, ZakatReport]:
    """Evaluate one snapshot under several methodologies.

    ``snapshot.methodology`` is ignored.  Lookups are strict: an unknown id
    raises ``UnknownMethodologyError`` before anything is computed.

    Returns:
        Reports keyed by the requested ids, in request order.
    """
    registry = registry or default_registry()
    ids = list(methodology_ids) if methodology_ids is not None else registry.ids()
    for methodology_id in ids:
        registry.get(methodology_id)
    # Reports carry the canonical key, whatever spelling was requested
    resolutions = {methodology_id: registry.resolve(methodology_id) for methodology_id in ids}

    def run(methodology_id: str) -> ZakatReport:
        resolution = resolutions[methodology_id]
        return _evaluate(snapshot, resolution.config, resolution.key, gold_price_per_gram, silver_price_per_gram)

    if max_workers is not None and max_workers > 1 and len(resolutions) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            reports = list(executor.map(run, resolutions))
    else:
        reports = [run(methodology_id) for methodology_id in resolutions]

    return dict(zip(resolutions, reports))
