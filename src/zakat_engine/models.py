"""Engine data models.

``FinancialSnapshot`` is the caller-owned input: a flat, frozen record of
optional numeric fields grouped by asset family.  Everything the engine
produces (``CalculatedCategory``, ``LiabilityResolution``, ``ZakatReport``)
is frozen as well; a new calculation always yields a new report.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Literal

from loguru import logger

from .core.exceptions import SnapshotError

CalendarType = Literal["lunar", "solar"]

_CALENDAR_TYPES = ("lunar", "solar")
_NISAB_STANDARDS = ("gold", "silver")

# Recurring liabilities are entered as monthly amounts
RECURRING_LIABILITY_FIELDS = ("monthly_living_expenses", "monthly_mortgage")


@dataclass(frozen=True)
class FinancialSnapshot:
    """Point-in-time view of a household's finances.

    Monetary fields default to 0 and are never negative in well-formed
    input; clamping untrusted values is the caller's job.  ``age`` and
    ``estimated_tax_rate`` only matter for retirement accounts.
    """

    # Preferences
    methodology: str = "bradford"
    calendar_type: CalendarType = "lunar"
    currency: str = "USD"
    nisab_standard: Literal["gold", "silver"] | None = None

    # Personal
    age: float = 30
    estimated_tax_rate: float = 0.25

    # Liquid cash
    checking_accounts: float = 0.0
    savings_accounts: float = 0.0
    cash_on_hand: float = 0.0
    digital_wallets: float = 0.0
    foreign_currency: float = 0.0
    interest_earned: float = 0.0

    # Precious metals (value, or weight valued at the supplied price)
    gold_investment_value: float = 0.0
    gold_jewelry_value: float = 0.0
    silver_investment_value: float = 0.0
    silver_jewelry_value: float = 0.0
    gold_investment_grams: float = 0.0
    gold_jewelry_grams: float = 0.0
    silver_investment_grams: float = 0.0
    silver_jewelry_grams: float = 0.0

    # Crypto
    crypto_currency: float = 0.0
    crypto_trading: float = 0.0
    staked_assets: float = 0.0
    staked_rewards_vested: float = 0.0
    staked_rewards_unvested: float = 0.0
    liquidity_pool_value: float = 0.0

    # Investments
    active_investments: float = 0.0
    passive_investments_value: float = 0.0
    reits_value: float = 0.0
    dividends: float = 0.0
    dividend_purification_percent: float = 0.0

    # Retirement
    roth_ira_contributions: float = 0.0
    roth_ira_earnings: float = 0.0
    traditional_ira_balance: float = 0.0
    four_oh_one_k_vested_balance: float = 0.0
    four_oh_one_k_unvested_match: float = 0.0
    ira_withdrawals: float = 0.0
    esa_withdrawals: float = 0.0
    five_twenty_nine_withdrawals: float = 0.0
    hsa_balance: float = 0.0
    retirement_withdrawal_allowed: bool = True
    retirement_withdrawal_limit: float = 1.0

    # Real estate
    primary_residence_value: float = 0.0
    rental_property_value: float = 0.0
    rental_property_income: float = 0.0
    real_estate_for_sale: float = 0.0
    land_banking_value: float = 0.0

    # Business
    business_cash_and_receivables: float = 0.0
    business_inventory: float = 0.0
    business_fixed_assets: float = 0.0

    # Trusts
    revocable_trust_value: float = 0.0
    irrevocable_trust_value: float = 0.0
    irrevocable_trust_accessible: bool = False
    clat_value: float = 0.0

    # Debts owed to the user
    good_debt_owed_to_user: float = 0.0
    bad_debt_owed_to_user: float = 0.0
    bad_debt_recovered: bool = False

    # Other / illiquid
    illiquid_assets_value: float = 0.0
    livestock_value: float = 0.0

    # Liabilities
    monthly_living_expenses: float = 0.0
    monthly_mortgage: float = 0.0
    insurance_expenses: float = 0.0
    credit_card_balance: float = 0.0
    unpaid_bills: float = 0.0
    student_loans_due: float = 0.0
    property_tax: float = 0.0
    late_tax_payments: float = 0.0

    def __post_init__(self):
        if self.calendar_type not in _CALENDAR_TYPES:
            raise SnapshotError(f"calendar_type must be one of {_CALENDAR_TYPES}, got {self.calendar_type!r}")
        if self.nisab_standard is not None and self.nisab_standard not in _NISAB_STANDARDS:
            raise SnapshotError(f"nisab_standard must be one of {_NISAB_STANDARDS}, got {self.nisab_standard!r}")

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        *,
        default_age: float | None = None,
        default_tax_rate: float | None = None,
    ) -> FinancialSnapshot:
        """Build a snapshot from loosely-typed input (YAML, JSON, form data).

        Unknown keys are ignored, ``None`` means absent, and numeric strings
        are coerced.  A value that cannot be read as a number raises
        ``SnapshotError``.
        """
        known = {f.name: f for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        if default_age is not None:
            kwargs["age"] = float(default_age)
        if default_tax_rate is not None:
            kwargs["estimated_tax_rate"] = float(default_tax_rate)

        for key, value in data.items():
            if key not in known:
                logger.debug(f"Ignoring unknown snapshot field: {key}")
                continue
            if value is None:
                continue
            kwargs[key] = _coerce(key, value, known[key].type)

        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _coerce(key: str, value: Any, annotation: Any) -> Any:
    # Annotations are strings under `from __future__ import annotations`
    kind = str(annotation)
    if kind == "bool":
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "y", "on")
        return bool(value)
    if kind == "float":
        if isinstance(value, bool):
            raise SnapshotError(f"{key} must be a number, got a boolean")
        try:
            number = float(value)
        except (TypeError, ValueError) as e:
            raise SnapshotError(f"{key} must be a number, got {value!r}") from e
        if math.isnan(number) or math.isinf(number):
            raise SnapshotError(f"{key} must be a finite number, got {value!r}")
        return number
    if isinstance(value, str):
        return value.strip().lower() if key in ("calendar_type", "nisab_standard", "methodology") else value.strip()
    return value


@dataclass(frozen=True)
class CategoryItem:
    """A single line inside a category (e.g. "Checking Accounts")."""

    name: str
    value: float
    zakatable_percent: float
    zakatable_amount: float
    exempt: bool = False


@dataclass(frozen=True)
class CalculatedCategory:
    """Categorized result for one asset family.

    ``zakatable_percent`` is the effective ratio shown to users; for rules
    that are not a flat rate it is derived from the amount, and it is 0 when
    ``gross_total`` is 0.
    """

    key: str
    label: str
    gross_total: float
    zakatable_percent: float
    zakatable_amount: float
    items: tuple[CategoryItem, ...]
    rule_label: str

    @classmethod
    def from_items(cls, key: str, label: str, items: list[CategoryItem], rule_label: str) -> CalculatedCategory:
        gross = sum(item.value for item in items)
        zakatable = sum(item.zakatable_amount for item in items)
        percent = zakatable / gross if gross > 0 else 0.0
        return cls(
            key=key,
            label=label,
            gross_total=gross,
            zakatable_percent=percent,
            zakatable_amount=zakatable,
            items=tuple(items),
            rule_label=rule_label,
        )


@dataclass(frozen=True)
class LiabilityLine:
    """How one liability kind was treated."""

    kind: str
    name: str
    amount: float
    rule: str
    multiplier: int
    deduction: float


@dataclass(frozen=True)
class LiabilityResolution:
    method: str
    total: float
    items: tuple[LiabilityLine, ...] = ()

    @property
    def per_item(self) -> dict[str, float]:
        return {line.kind: line.deduction for line in self.items}


@dataclass(frozen=True)
class NisabResult:
    standard: str
    grams: float
    price_per_gram: float
    threshold: float


@dataclass(frozen=True)
class RateOverride:
    """An asset pool taxed at its own rate instead of the global zakat rate."""

    label: str
    amount: float
    rate: float


@dataclass(frozen=True)
class Purification:
    interest_to_purify: float = 0.0
    dividends_to_purify: float = 0.0

    @property
    def total(self) -> float:
        return self.interest_to_purify + self.dividends_to_purify


@dataclass(frozen=True)
class ZakatReport:
    """Complete, immutable result of one calculation."""

    input: FinancialSnapshot
    methodology_id: str
    methodology_name: str
    used_default_methodology: bool
    total_assets: float
    total_liabilities: float
    net_zakatable_wealth: float
    nisab: float
    nisab_standard: str
    zakat_rate: float
    calendar_type: str
    is_above_nisab: bool
    zakat_due: float
    breakdown: Mapping[str, CalculatedCategory]
    liabilities: LiabilityResolution
    purification: Purification
    rate_overrides: tuple[RateOverride, ...] = ()
    warnings: tuple[str, ...] = field(default=())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "methodology": {
                "id": self.methodology_id,
                "name": self.methodology_name,
                "used_default": self.used_default_methodology,
            },
            "calendar_type": self.calendar_type,
            "nisab": {
                "standard": self.nisab_standard,
                "threshold": round(self.nisab, 2),
                "is_above_nisab": self.is_above_nisab,
            },
            "totals": {
                "total_assets": round(self.total_assets, 2),
                "total_liabilities": round(self.total_liabilities, 2),
                "net_zakatable_wealth": round(self.net_zakatable_wealth, 2),
            },
            "zakat": {
                "rate": self.zakat_rate,
                "due": self.zakat_due,
            },
            "breakdown": {
                key: {
                    "label": cat.label,
                    "gross_total": round(cat.gross_total, 2),
                    "zakatable_percent": round(cat.zakatable_percent, 4),
                    "zakatable_amount": round(cat.zakatable_amount, 2),
                    "rule": cat.rule_label,
                    "items": [asdict(item) for item in cat.items],
                }
                for key, cat in self.breakdown.items()
            },
            "liabilities": {
                "method": self.liabilities.method,
                "total": round(self.liabilities.total, 2),
                "items": [asdict(line) for line in self.liabilities.items],
            },
            "rate_overrides": [asdict(o) for o in self.rate_overrides],
            "purification": {
                "interest_to_purify": round(self.purification.interest_to_purify, 2),
                "dividends_to_purify": round(self.purification.dividends_to_purify, 2),
            },
            "warnings": list(self.warnings),
            "input": self.input.to_dict(),
        }
