"""Tests for zakat_engine.models."""

import dataclasses

import pytest

from zakat_engine.core.exceptions import SnapshotError
from zakat_engine.models import CalculatedCategory, CategoryItem, FinancialSnapshot


class TestFinancialSnapshot:
    def test_defaults(self):
        snapshot = FinancialSnapshot()
        assert snapshot.methodology == "bradford"
        assert snapshot.calendar_type == "lunar"
        assert snapshot.nisab_standard is None
        assert snapshot.checking_accounts == 0
        assert snapshot.retirement_withdrawal_allowed is True

    def test_frozen(self):
        snapshot = FinancialSnapshot()
        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.checking_accounts = 5

    def test_invalid_calendar(self):
        with pytest.raises(SnapshotError, match="calendar_type"):
            FinancialSnapshot(calendar_type="julian")

    def test_invalid_nisab_standard(self):
        with pytest.raises(SnapshotError, match="nisab_standard"):
            FinancialSnapshot(nisab_standard="platinum")


class TestFromDict:
    def test_coerces_values(self):
        snapshot = FinancialSnapshot.from_dict(
            {
                "methodology": " Hanafi ",
                "calendar_type": "SOLAR",
                "checking_accounts": "1500.50",
                "age": 41,
                "irrevocable_trust_accessible": "yes",
                "retirement_withdrawal_allowed": "false",
            }
        )
        assert snapshot.methodology == "hanafi"
        assert snapshot.calendar_type == "solar"
        assert snapshot.checking_accounts == 1500.5
        assert snapshot.age == 41.0
        assert snapshot.irrevocable_trust_accessible is True
        assert snapshot.retirement_withdrawal_allowed is False

    def test_unknown_keys_and_none_ignored(self):
        snapshot = FinancialSnapshot.from_dict({"yacht_value": 1_000_000, "savings_accounts": None})
        assert snapshot.savings_accounts == 0

    def test_defaults_from_settings(self):
        snapshot = FinancialSnapshot.from_dict({}, default_age=62, default_tax_rate=0.3)
        assert snapshot.age == 62
        assert snapshot.estimated_tax_rate == 0.3

    def test_explicit_values_beat_settings_defaults(self):
        snapshot = FinancialSnapshot.from_dict({"age": 35}, default_age=62)
        assert snapshot.age == 35

    @pytest.mark.parametrize("value", ["lots", True, float("nan"), [1, 2]])
    def test_non_numeric_rejected(self, value):
        with pytest.raises(SnapshotError, match="checking_accounts"):
            FinancialSnapshot.from_dict({"checking_accounts": value})

    def test_to_dict_roundtrip(self):
        snapshot = FinancialSnapshot(checking_accounts=100, methodology="amja")
        assert FinancialSnapshot.from_dict(snapshot.to_dict()) == snapshot


class TestCalculatedCategory:
    def test_from_items(self):
        items = [
            CategoryItem(name="Passive", value=1000, zakatable_percent=0.3, zakatable_amount=300),
            CategoryItem(name="Active", value=1000, zakatable_percent=1.0, zakatable_amount=1000),
        ]
        category = CalculatedCategory.from_items("investments", "Investments", items, "mixed")
        assert category.gross_total == 2000
        assert category.zakatable_amount == 1300
        assert category.zakatable_percent == pytest.approx(0.65)
        assert isinstance(category.items, tuple)

    def test_empty(self):
        category = CalculatedCategory.from_items("trusts", "Trusts", [], "n/a")
        assert category.zakatable_percent == 0
