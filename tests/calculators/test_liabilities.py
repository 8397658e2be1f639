"""Tests for zakat_engine.calculators.liabilities."""

import pytest

from zakat_engine.calculators.liabilities import resolve_liabilities
from zakat_engine.models import FinancialSnapshot

HOUSEHOLD = FinancialSnapshot(
    monthly_living_expenses=2_000,
    monthly_mortgage=3_000,
    credit_card_balance=1_000,
)

FULL_HOUSEHOLD = FinancialSnapshot(
    monthly_living_expenses=2_000,
    monthly_mortgage=3_000,
    credit_card_balance=1_000,
    student_loans_due=500,
    insurance_expenses=200,
    unpaid_bills=300,
    property_tax=400,
    late_tax_payments=100,
)


@pytest.mark.smoke
class TestTwelveMonthRule:
    def test_annualizes_recurring_liabilities(self, methodology):
        resolution = resolve_liabilities(HOUSEHOLD, methodology("bradford").liabilities)
        assert resolution.method == "12_month_rule"
        assert resolution.total == pytest.approx(61_000)
        assert resolution.per_item == {
            "housing": pytest.approx(36_000),
            "living_expenses": pytest.approx(24_000),
            "credit_cards": pytest.approx(1_000),
        }

    def test_per_kind_table(self, methodology):
        resolution = resolve_liabilities(FULL_HOUSEHOLD, methodology("maliki").liabilities)
        lines = {line.kind: line for line in resolution.items}
        assert lines["housing"].multiplier == 12
        # Maliki only deducts the current month of living expenses
        assert lines["living_expenses"].multiplier == 1
        assert lines["taxes"].amount == pytest.approx(500)
        assert resolution.total == pytest.approx(36_000 + 2_000 + 1_000 + 500 + 200 + 300 + 500)

    def test_kind_without_entry_uses_method_default(self, methodology):
        rules = methodology("bradford").liabilities
        rules = rules.model_copy(update={"personal_debt": rules.personal_debt.model_copy(update={"types": None})})
        resolution = resolve_liabilities(HOUSEHOLD, rules)
        assert resolution.per_item["housing"] == pytest.approx(36_000)
        assert resolution.per_item["credit_cards"] == pytest.approx(1_000)
        assert {line.rule for line in resolution.items} == {"12_months"}

    def test_none_rule(self, methodology):
        rules = methodology("bradford").liabilities
        personal = rules.personal_debt.model_copy(update={"types": {**rules.personal_debt.types, "credit_cards": "none"}})
        rules = rules.model_copy(update={"personal_debt": personal})
        resolution = resolve_liabilities(HOUSEHOLD, rules)
        assert resolution.per_item["credit_cards"] == 0
        assert resolution.total == pytest.approx(60_000)


class TestOtherMethods:
    def test_full_deduction_honors_table(self, methodology):
        resolution = resolve_liabilities(FULL_HOUSEHOLD, methodology("tahir_anwar").liabilities)
        lines = {line.kind: line for line in resolution.items}
        assert lines["housing"].rule == "current_due"
        assert lines["housing"].deduction == pytest.approx(3_000)
        assert lines["credit_cards"].rule == "full"
        assert resolution.total == pytest.approx(3_000 + 2_000 + 1_000 + 500 + 200 + 300 + 500)

    def test_mortgage_current_due_under_full_deduction(self, methodology):
        snapshot = FinancialSnapshot(monthly_mortgage=3_000)
        resolution = resolve_liabilities(snapshot, methodology("tahir_anwar").liabilities)
        assert resolution.total == pytest.approx(3_000)

    def test_full_deduction_default_is_full(self, methodology):
        rules = methodology("tahir_anwar").liabilities
        rules = rules.model_copy(update={"personal_debt": rules.personal_debt.model_copy(update={"types": None})})
        resolution = resolve_liabilities(FULL_HOUSEHOLD, rules)
        assert {line.rule for line in resolution.items} == {"full"}
        assert resolution.total == pytest.approx(24_000 + 36_000 + 1_000 + 500 + 200 + 300 + 500)

    def test_current_due_only(self, methodology):
        resolution = resolve_liabilities(HOUSEHOLD, methodology("amja").liabilities)
        assert resolution.total == pytest.approx(2_000 + 3_000 + 1_000)

    def test_current_due_only_default_is_current_due(self, methodology):
        rules = methodology("amja").liabilities
        rules = rules.model_copy(update={"personal_debt": rules.personal_debt.model_copy(update={"types": None})})
        resolution = resolve_liabilities(HOUSEHOLD, rules)
        assert resolution.total == pytest.approx(6_000)

    def test_no_deduction(self, methodology):
        resolution = resolve_liabilities(FULL_HOUSEHOLD, methodology("shafii").liabilities)
        assert resolution.total == 0
        assert len(resolution.items) == 7
        assert all(line.deduction == 0 for line in resolution.items)

    def test_not_deductible_flag(self, methodology):
        rules = methodology("hanafi").liabilities
        rules = rules.model_copy(update={"personal_debt": rules.personal_debt.model_copy(update={"deductible": False})})
        assert resolve_liabilities(HOUSEHOLD, rules).total == 0

    def test_no_liabilities(self, methodology):
        resolution = resolve_liabilities(FinancialSnapshot(), methodology("hanafi").liabilities)
        assert resolution.total == 0
        assert resolution.items == ()
