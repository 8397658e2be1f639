"""
Liability resolver — how much of a household's debt reduces the zakatable base.

The methodology's ``method`` picks the overall approach; for the annualizing
methods a per-kind table (housing, credit cards, ...) overrides the default
treatment of each kind.  Recurring kinds are entered as monthly amounts.
"""

from __future__ import annotations

from loguru import logger

from ..methodology.schema import LiabilityRules
from ..models import FinancialSnapshot, LiabilityLine, LiabilityResolution

MONTHS_PER_YEAR = 12

# kind -> (display name, snapshot fields, recurring)
LIABILITY_KINDS: dict[str, tuple[str, tuple[str, ...], bool]] = {
    "housing": ("Mortgage", ("monthly_mortgage",), True),
    "living_expenses": ("Living Expenses", ("monthly_living_expenses",), True),
    "student_loans": ("Student Loans", ("student_loans_due",), False),
    "credit_cards": ("Credit Cards", ("credit_card_balance",), False),
    "insurance": ("Insurance", ("insurance_expenses",), False),
    "unpaid_bills": ("Unpaid Bills", ("unpaid_bills",), False),
    "taxes": ("Taxes", ("property_tax", "late_tax_payments"), False),
}


def _multiplier(rule: str, recurring: bool) -> int:
    match rule:
        case "full" | "12_months":
            return MONTHS_PER_YEAR if recurring else 1
        case "current_due":
            return 1
        case "none":
            return 0
        case _:
            raise ValueError(f"Unknown debt rule: {rule}")


def _default_rule(method: str) -> str:
    match method:
        case "current_due_only":
            return "current_due"
        case "full_deduction":
            return "full"
        case _:
            return "12_months"


def resolve_liabilities(snapshot: FinancialSnapshot, rules: LiabilityRules) -> LiabilityResolution:
    """Deductible liabilities for a snapshot under one methodology.

    ``no_deduction`` (or a non-deductible personal debt section) yields 0,
    though each liability is still listed with a zero deduction.
    Every other method consults the per-kind table first. Kinds with no entry
    fall back to the method default: ``full_deduction`` takes the liability
    at face value, ``12_month_rule`` annualizes it, and ``current_due_only``
    counts what is due now. Recurring kinds are annualized under both the
    ``full`` and ``12_months`` rules.
    """
    method = rules.method
    deductible = method != "no_deduction" and rules.personal_debt.deductible
    if not deductible:
        logger.debug(f"Liabilities: {method}, personal debt not deductible -> 0")

    lines = []
    for kind, (name, field_names, recurring) in LIABILITY_KINDS.items():
        amount = sum(max(0.0, getattr(snapshot, f)) for f in field_names)
        if not amount:
            continue

        rule = (rules.rule_for(kind) or _default_rule(method)) if deductible else "none"

        multiplier = _multiplier(rule, recurring)
        deduction = amount * multiplier
        lines.append(
            LiabilityLine(kind=kind, name=name, amount=amount, rule=rule, multiplier=multiplier, deduction=deduction)
        )

    total = sum(line.deduction for line in lines)
    logger.debug(f"Liabilities: {method} -> {total:,.2f} across {len(lines)} kinds")
    return LiabilityResolution(method=method, total=total, items=tuple(lines))
