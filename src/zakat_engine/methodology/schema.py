"""Pydantic models for methodology rulesets.

A methodology (Hanafi, Shafi'i, Bradford, AMJA, ...) is a complete,
immutable ruleset describing how every asset family is valued for zakat and
how debts reduce the zakatable base.  Every computational section is
required: a partially-specified ruleset cannot be defaulted field by field
without silently changing what the methodology rules, so validation happens
once at load time and the calculators can trust the shape afterwards.

Descriptive fields (``description``, ``scholarly_basis``, ``tooltip``) are
accepted everywhere and never read by the calculators.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

Rate = Annotated[float, Field(ge=0, le=1)]

NisabStandard = Literal["gold", "silver"]
PassiveTreatment = Literal["market_value", "underlying_assets", "income_only"]
RetirementZakatability = Literal["full", "net_accessible", "deferred_upon_access", "conditional_age", "exempt"]
PostThresholdMethod = Literal["net_accessible", "proxy_rate", "full"]
TaxRateSource = Literal["user_input", "flat_rate"]
LiabilityMethod = Literal["full_deduction", "no_deduction", "12_month_rule", "current_due_only"]
DebtRule = Literal["full", "12_months", "current_due", "none"]
DebtCap = Literal["none", "total_assets", "total_cash"]
LiabilityKind = Literal[
    "housing",
    "student_loans",
    "credit_cards",
    "living_expenses",
    "insurance",
    "unpaid_bills",
    "taxes",
]


class _Rules(BaseModel):
    """Base for every rule section: frozen, unknown keys rejected."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    description: str | None = None
    scholarly_basis: str | None = None
    tooltip: str | None = None


# ---------------------------------------------------------------------------
# Meta & thresholds
# ---------------------------------------------------------------------------


class MethodologyReference(_Rules):
    authority: str | None = None
    date: str | None = None
    url: str | None = None


class MethodologyMeta(_Rules):
    """Identity and attribution. Not used in computation."""

    id: str
    name: str
    version: str = "1.0.0"
    zmcs_version: str = "1.0.0"
    author: str = ""
    ui_label: str | None = None
    scholar_url: str | None = None
    reference: MethodologyReference | None = None
    tier: Literal["official", "community"] = "community"


class NisabRules(_Rules):
    default_standard: NisabStandard
    gold_grams: float = Field(ge=0)
    silver_grams: float = Field(ge=0)


class ZakatRateRules(_Rules):
    lunar: Rate
    solar: Rate


class Thresholds(_Rules):
    nisab: NisabRules
    zakat_rate: ZakatRateRules


# ---------------------------------------------------------------------------
# Asset families
# ---------------------------------------------------------------------------


class CashRules(_Rules):
    zakatable: bool
    rate: Rate


class JewelryRules(_Rules):
    zakatable: bool
    rate: Rate
    conditions: tuple[str, ...] = ()


class PreciousMetalsRules(_Rules):
    investment_gold_rate: Rate
    investment_silver_rate: Rate
    jewelry: JewelryRules


class StakingRules(_Rules):
    principal_rate: Rate
    rewards_rate: Rate
    vested_only: bool


class CryptoRules(_Rules):
    currency_rate: Rate
    trading_rate: Rate
    staking: StakingRules


class PassiveInvestmentRules(_Rules):
    """Passive holdings: 1.0 = market value, 0.30 = proxy for underlying assets, income_only = principal exempt."""

    rate: Rate
    treatment: PassiveTreatment


class DividendRules(_Rules):
    zakatable: bool
    deduct_purification: bool


class InvestmentRules(_Rules):
    active_trading_rate: Rate
    passive_investments: PassiveInvestmentRules
    reits_rate: Rate
    dividends: DividendRules


class RetirementRules(_Rules):
    """Tax-deferred retirement accounts.

    ``conditional_age`` exempts balances below ``exemption_age`` and then
    applies ``post_threshold_method``; which strategy applies after the age
    threshold is a methodology choice, not a code branch.
    """

    zakatability: RetirementZakatability
    exemption_age: float | None = Field(default=None, ge=0)
    post_threshold_method: PostThresholdMethod | None = None
    post_threshold_rate: Rate | None = None
    pension_vested_rate: Rate = 1.0
    penalty_rate: Rate = 0.10
    tax_rate_source: TaxRateSource = "user_input"
    roth_contributions_rate: Rate
    roth_earnings_follow_traditional: bool
    distributions_always_zakatable: bool

    @model_validator(mode="after")
    def _conditional_age_complete(self) -> RetirementRules:
        if self.zakatability == "conditional_age":
            if self.exemption_age is None:
                raise ValueError("conditional_age retirement rules require exemption_age")
            if self.post_threshold_method is None:
                raise ValueError("conditional_age retirement rules require post_threshold_method")
        if self.post_threshold_method == "proxy_rate" and self.post_threshold_rate is None:
            raise ValueError("post_threshold_method 'proxy_rate' requires post_threshold_rate")
        return self


class PrimaryResidenceRules(_Rules):
    zakatable: Literal[False] = False


class RentalPropertyRules(_Rules):
    zakatable: bool
    income_zakatable: bool
    income_rate: Rate | None = None


class TradedPropertyRules(_Rules):
    zakatable: bool
    rate: Rate


class RealEstateRules(_Rules):
    primary_residence: PrimaryResidenceRules
    rental_property: RentalPropertyRules
    for_sale: TradedPropertyRules
    land_banking: TradedPropertyRules


class BusinessRules(_Rules):
    cash_receivables_rate: Rate
    inventory_rate: Rate
    # Fixed assets are exempt in every methodology; the field exists for
    # documentation only and must stay 0.
    fixed_assets_rate: float = 0.0

    @model_validator(mode="after")
    def _fixed_assets_exempt(self) -> BusinessRules:
        if self.fixed_assets_rate != 0:
            raise ValueError(f"business fixed assets are never zakatable, got fixed_assets_rate={self.fixed_assets_rate}")
        return self


class DebtsOwedRules(_Rules):
    good_debt_rate: Rate
    bad_debt_rate: Rate
    bad_debt_on_recovery: bool


class TrustRules(_Rules):
    revocable_rate: Rate
    irrevocable_rate: Rate


class IlliquidAssetRules(_Rules):
    rate: Rate


class AssetRules(_Rules):
    cash: CashRules
    precious_metals: PreciousMetalsRules
    crypto: CryptoRules
    investments: InvestmentRules
    retirement: RetirementRules
    real_estate: RealEstateRules
    business: BusinessRules
    debts_owed_to_user: DebtsOwedRules
    trusts: TrustRules
    illiquid_assets: IlliquidAssetRules


# ---------------------------------------------------------------------------
# Liabilities
# ---------------------------------------------------------------------------


class PersonalDebtRules(_Rules):
    deductible: bool
    cap: DebtCap | None = None
    types: dict[LiabilityKind, DebtRule] | None = None


class LiabilityRules(_Rules):
    method: LiabilityMethod
    commercial_debt: Literal["fully_deductible", "deductible_from_business_assets", "none"] = "fully_deductible"
    personal_debt: PersonalDebtRules

    def rule_for(self, kind: str) -> DebtRule | None:
        """Per-kind override, or None when the kind has no entry."""
        types = self.personal_debt.types or {}
        return types.get(kind)  # type: ignore[call-overload]


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


class MethodologyConfig(BaseModel):
    """A complete, validated methodology ruleset."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    schema_uri: str | None = Field(default=None, alias="$schema")
    meta: MethodologyMeta
    thresholds: Thresholds
    assets: AssetRules
    liabilities: LiabilityRules

    @property
    def id(self) -> str:
        return self.meta.id

    @property
    def name(self) -> str:
        return self.meta.name

    def zakat_rate_for(self, calendar_type: str) -> float:
        """Solar-adjusted rate for Gregorian years, lunar rate otherwise."""
        if calendar_type == "solar":
            return self.thresholds.zakat_rate.solar
        return self.thresholds.zakat_rate.lunar
