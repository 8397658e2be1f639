"""
Asset categorizer — applies a methodology's per-family rules to a snapshot.

Each asset family (cash, precious metals, crypto, investments, retirement,
trusts, real estate, business, debts owed to the user, illiquid assets) has
its own function returning a ``CalculatedCategory`` with line items, the
zakatable amount, and a human-readable label for the rule that produced it.
Families are independent of each other and may be evaluated in any order.

Missing fields are zero. Negative inputs are not rejected here, but no item
ever contributes a negative zakatable amount.
"""

from __future__ import annotations

from loguru import logger

from ..methodology.schema import (
    AssetRules,
    BusinessRules,
    CashRules,
    CryptoRules,
    DebtsOwedRules,
    IlliquidAssetRules,
    InvestmentRules,
    MethodologyConfig,
    PreciousMetalsRules,
    RealEstateRules,
    RetirementRules,
    TrustRules,
)
from ..models import CalculatedCategory, CategoryItem, FinancialSnapshot, RateOverride

# Age after which US retirement withdrawals carry no early-withdrawal penalty
PENALTY_FREE_AGE = 59.5
# Tax rate used when a methodology ignores the user's own estimate
FLAT_RETIREMENT_TAX_RATE = 0.30

CATEGORY_LABELS = {
    "liquid_assets": "Cash & Savings",
    "precious_metals": "Precious Metals",
    "crypto": "Crypto & Digital",
    "investments": "Investments",
    "retirement": "Retirement",
    "trusts": "Trusts",
    "real_estate": "Real Estate",
    "business": "Business",
    "debt_owed_to_user": "Debt Owed to You",
    "illiquid_assets": "Illiquid Assets",
}


def _pct(rate: float) -> str:
    return f"{rate * 100:g}%"


def _item(name: str, value: float, rate: float) -> CategoryItem:
    amount = max(0.0, value * rate)
    return CategoryItem(name=name, value=value, zakatable_percent=rate, zakatable_amount=amount)


def _amount_item(name: str, value: float, amount: float) -> CategoryItem:
    """Item whose zakatable amount comes from a formula rather than a flat rate."""
    amount = max(0.0, amount)
    percent = amount / value if value > 0 else 0.0
    return CategoryItem(name=name, value=value, zakatable_percent=percent, zakatable_amount=amount)


def _exempt_item(name: str, value: float) -> CategoryItem:
    return CategoryItem(name=name, value=value, zakatable_percent=0.0, zakatable_amount=0.0, exempt=True)


def _category(key: str, items: list[CategoryItem], rule_label: str) -> CalculatedCategory:
    return CalculatedCategory.from_items(key, CATEGORY_LABELS[key], items, rule_label)


# ---------------------------------------------------------------------------
# Liquid cash
# ---------------------------------------------------------------------------


def categorize_cash(snapshot: FinancialSnapshot, rules: CashRules) -> CalculatedCategory:
    rate = rules.rate if rules.zakatable else 0.0
    items = [
        _item(name, value, rate)
        for name, value in (
            ("Checking Accounts", snapshot.checking_accounts),
            ("Savings Accounts", snapshot.savings_accounts),
            ("Cash on Hand", snapshot.cash_on_hand),
            ("Digital Wallets", snapshot.digital_wallets),
            ("Foreign Currency", snapshot.foreign_currency),
        )
        if value
    ]
    label = f"{_pct(rate)} of balances" if rules.zakatable else "Cash not zakatable"
    return _category("liquid_assets", items, label)


# ---------------------------------------------------------------------------
# Precious metals
# ---------------------------------------------------------------------------


def _metal_value(value: float, grams: float, price_per_gram: float) -> float:
    # Whichever of the stated value and the weight at market price is larger
    weighed = grams * price_per_gram if grams > 0 and price_per_gram > 0 else 0.0
    return max(value, weighed)


def categorize_precious_metals(
    snapshot: FinancialSnapshot,
    rules: PreciousMetalsRules,
    gold_price_per_gram: float = 0.0,
    silver_price_per_gram: float = 0.0,
) -> CalculatedCategory:
    jewelry = rules.jewelry
    lines = (
        (
            "Gold Investment",
            _metal_value(snapshot.gold_investment_value, snapshot.gold_investment_grams, gold_price_per_gram),
            rules.investment_gold_rate,
            False,
        ),
        (
            "Gold Jewelry",
            _metal_value(snapshot.gold_jewelry_value, snapshot.gold_jewelry_grams, gold_price_per_gram),
            jewelry.rate,
            True,
        ),
        (
            "Silver Investment",
            _metal_value(snapshot.silver_investment_value, snapshot.silver_investment_grams, silver_price_per_gram),
            rules.investment_silver_rate,
            False,
        ),
        (
            "Silver Jewelry",
            _metal_value(snapshot.silver_jewelry_value, snapshot.silver_jewelry_grams, silver_price_per_gram),
            jewelry.rate,
            True,
        ),
    )

    items = []
    for name, value, rate, is_jewelry in lines:
        if not value:
            continue
        if is_jewelry and not jewelry.zakatable:
            items.append(_exempt_item(name, value))
        else:
            items.append(_item(name, value, rate))

    if jewelry.zakatable:
        label = "Investment metal and jewelry zakatable"
    else:
        conditions = ", ".join(jewelry.conditions) or "personal use"
        label = f"Investment metal zakatable; jewelry exempt ({conditions})"
    return _category("precious_metals", items, label)


# ---------------------------------------------------------------------------
# Crypto
# ---------------------------------------------------------------------------


def categorize_crypto(snapshot: FinancialSnapshot, rules: CryptoRules) -> CalculatedCategory:
    staking = rules.staking
    items = []
    if snapshot.crypto_currency:
        items.append(_item("Currency Coins", snapshot.crypto_currency, rules.currency_rate))
    if snapshot.crypto_trading:
        items.append(_item("Trading Altcoins", snapshot.crypto_trading, rules.trading_rate))
    if snapshot.staked_assets:
        items.append(_item("Staked Principal", snapshot.staked_assets, staking.principal_rate))
    if snapshot.staked_rewards_vested:
        items.append(_item("Staking Rewards (Vested)", snapshot.staked_rewards_vested, staking.rewards_rate))
    if snapshot.staked_rewards_unvested:
        if staking.vested_only:
            items.append(_exempt_item("Staking Rewards (Unvested)", snapshot.staked_rewards_unvested))
        else:
            items.append(_item("Staking Rewards (Unvested)", snapshot.staked_rewards_unvested, staking.rewards_rate))
    if snapshot.liquidity_pool_value:
        items.append(_item("Liquidity Pools", snapshot.liquidity_pool_value, rules.trading_rate))

    label = f"Currency {_pct(rules.currency_rate)}, trading {_pct(rules.trading_rate)}"
    if staking.vested_only:
        label += ", vested staking rewards only"
    return _category("crypto", items, label)


# ---------------------------------------------------------------------------
# Investments
# ---------------------------------------------------------------------------


def passive_investment_label(rules: InvestmentRules) -> str:
    passive = rules.passive_investments
    match passive.treatment:
        case "market_value":
            return f"Passive holdings at {_pct(passive.rate)} of market value"
        case "underlying_assets":
            return f"{_pct(passive.rate)} proxy for underlying zakatable assets"
        case "income_only":
            return "Passive principal exempt; income only"
        case _:
            raise ValueError(f"Unknown passive investment treatment: {passive.treatment}")


def categorize_investments(snapshot: FinancialSnapshot, rules: InvestmentRules) -> CalculatedCategory:
    passive = rules.passive_investments
    items = []

    if snapshot.active_investments:
        items.append(_item("Active Investments", snapshot.active_investments, rules.active_trading_rate))

    if snapshot.passive_investments_value:
        if passive.treatment == "income_only":
            logger.debug(f"Passive investments {snapshot.passive_investments_value:,.2f} excluded (income_only)")
            items.append(_exempt_item("Passive Investments", snapshot.passive_investments_value))
        else:
            items.append(_item("Passive Investments", snapshot.passive_investments_value, passive.rate))

    if snapshot.reits_value:
        items.append(_item("REITs (Equity)", snapshot.reits_value, rules.reits_rate))

    if snapshot.dividends:
        if rules.dividends.zakatable:
            amount = snapshot.dividends
            if rules.dividends.deduct_purification:
                amount -= snapshot.dividends * snapshot.dividend_purification_percent / 100
            items.append(_amount_item("Dividends", snapshot.dividends, amount))
        else:
            items.append(_exempt_item("Dividends", snapshot.dividends))

    return _category("investments", items, passive_investment_label(rules))


# ---------------------------------------------------------------------------
# Retirement
# ---------------------------------------------------------------------------


def retirement_accessible(
    balance: float,
    age: float,
    tax_rate: float,
    rules: RetirementRules,
    withdrawal_allowed: bool = True,
    withdrawal_limit: float = 1.0,
) -> float:
    """Zakatable portion of one tax-deferred retirement balance.

    ``conditional_age`` exempts the balance below ``exemption_age`` and then
    hands off to ``post_threshold_method``; net-accessible treatment is what
    the holder could put in their pocket today after tax and penalty.
    """
    method = rules.zakatability

    if method == "conditional_age":
        threshold = rules.exemption_age
        if age < threshold:
            logger.debug(f"Retirement: conditional_age, age {age} < {threshold} -> exempt")
            return 0.0
        method = rules.post_threshold_method

    match method:
        case "exempt" | "deferred_upon_access":
            logger.debug(f"Retirement: {method} -> 0")
            return 0.0
        case "full":
            return max(0.0, balance)
        case "proxy_rate":
            return max(0.0, balance * rules.post_threshold_rate)
        case "net_accessible":
            if not withdrawal_allowed:
                logger.debug("Retirement: net_accessible, withdrawal not allowed -> 0")
                return 0.0
            principal = balance * withdrawal_limit * rules.pension_vested_rate
            penalty = rules.penalty_rate if age < PENALTY_FREE_AGE else 0.0
            tax = FLAT_RETIREMENT_TAX_RATE if rules.tax_rate_source == "flat_rate" else tax_rate
            net_factor = max(0.0, 1 - (tax + penalty))
            result = max(0.0, principal * net_factor)
            logger.debug(
                f"Retirement: net_accessible, balance {balance:,.2f}, limit {withdrawal_limit}, "
                f"tax {tax}, penalty {penalty} -> {result:,.2f}"
            )
            return result
        case _:
            raise ValueError(f"Unknown retirement method: {method}")


def retirement_label(rules: RetirementRules) -> str:
    def describe(method: str) -> str:
        match method:
            case "exempt":
                return "Exempt"
            case "deferred_upon_access":
                return "Deferred until withdrawn"
            case "full":
                return "Full vested balance"
            case "proxy_rate":
                return f"{_pct(rules.post_threshold_rate)} proxy on market value"
            case "net_accessible":
                return f"Net of tax and {_pct(rules.penalty_rate)} early-withdrawal penalty"
            case _:
                return method

    if rules.zakatability == "conditional_age":
        return f"Exempt below age {rules.exemption_age:g}, then {describe(rules.post_threshold_method).lower()}"
    return describe(rules.zakatability)


def categorize_retirement(snapshot: FinancialSnapshot, rules: RetirementRules) -> CalculatedCategory:
    def accessible(balance: float) -> float:
        return retirement_accessible(
            balance,
            snapshot.age,
            snapshot.estimated_tax_rate,
            rules,
            snapshot.retirement_withdrawal_allowed,
            snapshot.retirement_withdrawal_limit,
        )

    items = []
    if snapshot.roth_ira_contributions:
        items.append(_item("Roth IRA Contributions", snapshot.roth_ira_contributions, rules.roth_contributions_rate))

    if snapshot.roth_ira_earnings:
        if rules.roth_earnings_follow_traditional:
            earnings = accessible(snapshot.roth_ira_earnings)
        else:
            earnings = snapshot.roth_ira_earnings
        items.append(_amount_item("Roth IRA Earnings", snapshot.roth_ira_earnings, earnings))

    if snapshot.four_oh_one_k_vested_balance:
        balance = snapshot.four_oh_one_k_vested_balance
        items.append(_amount_item("401(k) Vested", balance, accessible(balance)))

    if snapshot.traditional_ira_balance:
        balance = snapshot.traditional_ira_balance
        items.append(_amount_item("Traditional IRA", balance, accessible(balance)))

    distribution_rate = 1.0 if rules.distributions_always_zakatable else 0.0
    for name, value in (
        ("IRA Withdrawals", snapshot.ira_withdrawals),
        ("ESA Withdrawals", snapshot.esa_withdrawals),
        ("529 Withdrawals", snapshot.five_twenty_nine_withdrawals),
        ("HSA Balance", snapshot.hsa_balance),
    ):
        if value:
            items.append(_item(name, value, distribution_rate))

    if snapshot.four_oh_one_k_unvested_match:
        items.append(_exempt_item("401(k) Unvested Match", snapshot.four_oh_one_k_unvested_match))

    return _category("retirement", items, retirement_label(rules))


# ---------------------------------------------------------------------------
# Trusts
# ---------------------------------------------------------------------------


def trust_label(rules: TrustRules) -> str:
    return f"Revocable at {_pct(rules.revocable_rate)}; irrevocable at {_pct(rules.irrevocable_rate)} when accessible"


def categorize_trusts(snapshot: FinancialSnapshot, rules: TrustRules) -> CalculatedCategory:
    items = []
    if snapshot.revocable_trust_value:
        items.append(_item("Revocable Trust", snapshot.revocable_trust_value, rules.revocable_rate))
    if snapshot.irrevocable_trust_value:
        if snapshot.irrevocable_trust_accessible:
            items.append(_item("Irrevocable Trust (Accessible)", snapshot.irrevocable_trust_value, rules.irrevocable_rate))
        else:
            items.append(_exempt_item("Irrevocable Trust", snapshot.irrevocable_trust_value))
    if snapshot.clat_value:
        items.append(_exempt_item("CLAT", snapshot.clat_value))
    return _category("trusts", items, trust_label(rules))


# ---------------------------------------------------------------------------
# Real estate
# ---------------------------------------------------------------------------


def real_estate_label(rules: RealEstateRules) -> str:
    rental = rules.rental_property
    parts = ["Residence exempt"]
    parts.append("rental property at market value" if rental.zakatable else "rental principal exempt")
    if not rental.income_zakatable:
        parts.append("rental income exempt")
    elif rental.income_rate is not None:
        parts.append(f"rental income taxed at {_pct(rental.income_rate)}")
    else:
        parts.append("rental income zakatable")
    for name, traded in (("property for sale", rules.for_sale), ("land banking", rules.land_banking)):
        parts.append(f"{name} at {_pct(traded.rate)}" if traded.zakatable else f"{name} exempt")
    return "; ".join(parts)


def categorize_real_estate(snapshot: FinancialSnapshot, rules: RealEstateRules) -> CalculatedCategory:
    rental = rules.rental_property
    items = []

    if snapshot.primary_residence_value:
        items.append(_exempt_item("Primary Residence", snapshot.primary_residence_value))

    if snapshot.rental_property_value:
        # Principal of an exploited asset is exempt unless the methodology says otherwise
        if rental.zakatable:
            items.append(_item("Rental Property", snapshot.rental_property_value, 1.0))
        else:
            items.append(_exempt_item("Rental Property", snapshot.rental_property_value))

    if snapshot.rental_property_income:
        if rental.income_zakatable:
            items.append(_item("Rental Income", snapshot.rental_property_income, 1.0))
        else:
            items.append(_exempt_item("Rental Income", snapshot.rental_property_income))

    for name, value, traded in (
        ("Property for Sale", snapshot.real_estate_for_sale, rules.for_sale),
        ("Land Banking", snapshot.land_banking_value, rules.land_banking),
    ):
        if not value:
            continue
        if traded.zakatable:
            items.append(_item(name, value, traded.rate))
        else:
            items.append(_exempt_item(name, value))

    return _category("real_estate", items, real_estate_label(rules))


# ---------------------------------------------------------------------------
# Business
# ---------------------------------------------------------------------------


def categorize_business(snapshot: FinancialSnapshot, rules: BusinessRules) -> CalculatedCategory:
    items = []
    if snapshot.business_cash_and_receivables:
        items.append(_item("Cash & Receivables", snapshot.business_cash_and_receivables, rules.cash_receivables_rate))
    if snapshot.business_inventory:
        items.append(_item("Inventory", snapshot.business_inventory, rules.inventory_rate))
    if snapshot.business_fixed_assets:
        items.append(_exempt_item("Fixed Assets", snapshot.business_fixed_assets))
    return _category("business", items, "Cash, receivables and inventory; fixed assets exempt")


# ---------------------------------------------------------------------------
# Debts owed to the user
# ---------------------------------------------------------------------------


def categorize_debts_owed(snapshot: FinancialSnapshot, rules: DebtsOwedRules) -> CalculatedCategory:
    items = []
    if snapshot.good_debt_owed_to_user:
        items.append(_item("Collectible Loans", snapshot.good_debt_owed_to_user, rules.good_debt_rate))

    if snapshot.bad_debt_owed_to_user:
        if snapshot.bad_debt_recovered:
            # Recovered bad debt is cash in hand
            items.append(_item("Recovered Bad Debt", snapshot.bad_debt_owed_to_user, 1.0))
        elif rules.bad_debt_on_recovery or not rules.bad_debt_rate:
            items.append(_exempt_item("Doubtful Debt", snapshot.bad_debt_owed_to_user))
        else:
            items.append(_item("Doubtful Debt", snapshot.bad_debt_owed_to_user, rules.bad_debt_rate))

    if rules.bad_debt_on_recovery:
        label = f"Collectible debts at {_pct(rules.good_debt_rate)}; bad debts only once recovered"
    else:
        label = f"Collectible debts at {_pct(rules.good_debt_rate)}; bad debts at {_pct(rules.bad_debt_rate)}"
    return _category("debt_owed_to_user", items, label)


# ---------------------------------------------------------------------------
# Illiquid assets
# ---------------------------------------------------------------------------


def categorize_illiquid(snapshot: FinancialSnapshot, rules: IlliquidAssetRules) -> CalculatedCategory:
    items = [
        _item(name, value, rules.rate)
        for name, value in (
            ("Illiquid Assets", snapshot.illiquid_assets_value),
            ("Livestock", snapshot.livestock_value),
        )
        if value
    ]
    return _category("illiquid_assets", items, f"{_pct(rules.rate)} of value")


# ---------------------------------------------------------------------------
# All families
# ---------------------------------------------------------------------------


def categorize_assets(
    snapshot: FinancialSnapshot,
    config: MethodologyConfig,
    gold_price_per_gram: float = 0.0,
    silver_price_per_gram: float = 0.0,
) -> dict[str, CalculatedCategory]:
    """Categorize every asset family; keys follow ``CATEGORY_LABELS`` order."""
    assets: AssetRules = config.assets
    categories = [
        categorize_cash(snapshot, assets.cash),
        categorize_precious_metals(snapshot, assets.precious_metals, gold_price_per_gram, silver_price_per_gram),
        categorize_crypto(snapshot, assets.crypto),
        categorize_investments(snapshot, assets.investments),
        categorize_retirement(snapshot, assets.retirement),
        categorize_trusts(snapshot, assets.trusts),
        categorize_real_estate(snapshot, assets.real_estate),
        categorize_business(snapshot, assets.business),
        categorize_debts_owed(snapshot, assets.debts_owed_to_user),
        categorize_illiquid(snapshot, assets.illiquid_assets),
    ]
    return {category.key: category for category in categories}


def rate_overrides_for(snapshot: FinancialSnapshot, config: MethodologyConfig) -> list[RateOverride]:
    """Asset pools a methodology taxes at their own rate (e.g. rental income at 10%).

    These amounts are already part of total assets; the aggregator moves them
    out of the standard pool.
    """
    overrides = []
    rental = config.assets.real_estate.rental_property
    income = snapshot.rental_property_income
    if rental.income_rate is not None and rental.income_zakatable and income > 0:
        overrides.append(RateOverride(label="Rental Income", amount=income, rate=rental.income_rate))
        logger.debug(f"Rate override: rental income {income:,.2f} at {_pct(rental.income_rate)}")
    return overrides
