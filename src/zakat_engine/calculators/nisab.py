"""Nisab threshold from caller-supplied metal prices.

Prices are never cached here: the caller fetches them fresh for every
calculation so price movements are never hidden inside the engine.
"""

from __future__ import annotations

from loguru import logger

from ..methodology.schema import MethodologyConfig
from ..models import NisabResult


def compute_nisab(
    config: MethodologyConfig,
    gold_price_per_gram: float,
    silver_price_per_gram: float,
    standard: str | None = None,
) -> NisabResult:
    """Nisab threshold for the methodology's standard (or an explicit override).

    Args:
        config: Methodology whose gram thresholds and default standard apply.
        gold_price_per_gram: Current gold price in the report currency.
        silver_price_per_gram: Current silver price in the report currency.
        standard: "gold" or "silver" to override the methodology default.
    """
    nisab_rules = config.thresholds.nisab
    basis = standard or nisab_rules.default_standard

    if basis == "gold":
        grams, price = nisab_rules.gold_grams, gold_price_per_gram
    else:
        grams, price = nisab_rules.silver_grams, silver_price_per_gram

    if price <= 0:
        logger.warning(f"Non-positive {basis} price ({price}); nisab threshold is 0")
        price = 0.0

    threshold = grams * price
    logger.debug(f"Nisab ({config.meta.id}): {grams}g {basis} @ {price}/g = {threshold:,.2f}")
    return NisabResult(standard=basis, grams=grams, price_per_gram=price, threshold=threshold)
