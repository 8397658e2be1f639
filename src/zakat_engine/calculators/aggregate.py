"""
Obligation aggregator: categorized assets and liabilities to zakat due.

Uses Decimal for the final rate multiplication and rounds half-up to cents;
everything before that stays in float.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from loguru import logger

from ..methodology.schema import MethodologyConfig
from ..models import CalculatedCategory, LiabilityResolution, RateOverride

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class Aggregate:
    total_assets: float
    total_liabilities: float
    net_zakatable_wealth: float
    nisab: float
    zakat_rate: float
    is_above_nisab: bool
    zakat_due: float
    rate_overrides: tuple[RateOverride, ...] = ()


def _round_cents(value: Decimal) -> float:
    return float(value.quantize(CENTS, rounding=ROUND_HALF_UP))


def cap_liabilities(
    total: float,
    cap: str | None,
    categories: Mapping[str, CalculatedCategory],
    total_assets: float,
) -> float:
    """Apply a methodology's ``personal_debt.cap`` to the liability total."""
    match cap:
        case None | "none":
            return total
        case "total_assets":
            limit = total_assets
        case "total_cash":
            cash = categories.get("liquid_assets")
            limit = cash.zakatable_amount if cash else 0.0
        case _:
            raise ValueError(f"Unknown liability cap: {cap}")

    if total > limit:
        logger.debug(f"Liabilities capped at {cap}: {total:,.2f} -> {limit:,.2f}")
        return limit
    return total


def compute_zakat_due(net: float, rate: float, rate_overrides: Iterable[RateOverride] = ()) -> float:
    """Zakat on ``net`` wealth, taxing override pools at their own rate.

    Override pools are drawn from ``net`` first and can never exceed it.
    """
    remaining = Decimal(str(net))
    due = Decimal("0")
    for override in rate_overrides:
        pool = min(Decimal(str(override.amount)), remaining)
        if pool <= 0:
            continue
        due += pool * Decimal(str(override.rate))
        remaining -= pool
    due += remaining * Decimal(str(rate))
    return _round_cents(due)


def aggregate(
    categories: Mapping[str, CalculatedCategory],
    liabilities: LiabilityResolution,
    nisab: float,
    config: MethodologyConfig,
    calendar_type: str,
    rate_overrides: Iterable[RateOverride] = (),
) -> Aggregate:
    """Combine categories and liabilities into the final obligation."""
    overrides = tuple(rate_overrides)
    total_assets = sum(category.zakatable_amount for category in categories.values())
    total_liabilities = cap_liabilities(
        liabilities.total, config.liabilities.personal_debt.cap, categories, total_assets
    )
    net = max(0.0, total_assets - total_liabilities)
    rate = config.zakat_rate_for(calendar_type)
    is_above_nisab = net >= nisab

    if is_above_nisab:
        zakat_due = compute_zakat_due(net, rate, overrides)
    else:
        logger.info(f"Net zakatable wealth {net:,.2f} below nisab {nisab:,.2f}; no zakat due")
        zakat_due = 0.0

    return Aggregate(
        total_assets=total_assets,
        total_liabilities=total_liabilities,
        net_zakatable_wealth=net,
        nisab=nisab,
        zakat_rate=rate,
        is_above_nisab=is_above_nisab,
        zakat_due=zakat_due,
        rate_overrides=overrides,
    )
