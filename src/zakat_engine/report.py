"""Report assembly and purification."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from .calculators.aggregate import Aggregate
from .models import CalculatedCategory, FinancialSnapshot, LiabilityResolution, NisabResult, Purification, ZakatReport


def compute_purification(snapshot: FinancialSnapshot) -> Purification:
    """Impermissible income to give away, reported separately from zakat.

    All interest earned is purified; dividends only by the share the user
    attributes to non-compliant business activity.
    """
    interest = max(0.0, snapshot.interest_earned)
    dividends = max(0.0, snapshot.dividends * snapshot.dividend_purification_percent / 100)
    return Purification(interest_to_purify=interest, dividends_to_purify=dividends)


def assemble_report(
    snapshot: FinancialSnapshot,
    methodology_id: str,
    methodology_name: str,
    used_default_methodology: bool,
    result: Aggregate,
    breakdown: Mapping[str, CalculatedCategory],
    liabilities: LiabilityResolution,
    purification: Purification,
    nisab: NisabResult,
    calendar_type: str,
    warnings: Iterable[str] = (),
) -> ZakatReport:
    return ZakatReport(
        input=snapshot,
        methodology_id=methodology_id,
        methodology_name=methodology_name,
        used_default_methodology=used_default_methodology,
        total_assets=result.total_assets,
        total_liabilities=result.total_liabilities,
        net_zakatable_wealth=result.net_zakatable_wealth,
        nisab=nisab.threshold,
        nisab_standard=nisab.standard,
        zakat_rate=result.zakat_rate,
        calendar_type=calendar_type,
        is_above_nisab=result.is_above_nisab,
        zakat_due=result.zakat_due,
        breakdown=MappingProxyType(dict(breakdown)),
        liabilities=liabilities,
        purification=purification,
        rate_overrides=result.rate_overrides,
        warnings=tuple(warnings),
    )
