"""Tests for zakat_engine.methodology.schema."""

import copy
from importlib import resources

import pytest
import yaml
from pydantic import ValidationError

from zakat_engine.methodology.schema import MethodologyConfig, RetirementRules


@pytest.fixture(scope="module")
def bradford_data():
    text = (resources.files("zakat_engine.methodology") / "presets" / "bradford.yaml").read_text(encoding="utf-8")
    return yaml.safe_load(text)


@pytest.fixture
def data(bradford_data):
    return copy.deepcopy(bradford_data)


class TestMethodologyConfig:
    def test_valid_preset(self, data):
        config = MethodologyConfig.model_validate(data)
        assert config.id == "bradford"
        assert config.name == "Sheikh Joe Bradford"
        assert config.thresholds.nisab.default_standard == "silver"
        assert config.assets.investments.passive_investments.treatment == "underlying_assets"
        assert config.liabilities.method == "12_month_rule"

    def test_frozen(self, data):
        config = MethodologyConfig.model_validate(data)
        with pytest.raises(ValidationError):
            config.assets.cash.rate = 0.5

    def test_schema_alias(self, data):
        data["$schema"] = "https://example.org/zmcs.json"
        config = MethodologyConfig.model_validate(data)
        assert config.schema_uri == "https://example.org/zmcs.json"

    def test_zakat_rate_for(self, data):
        config = MethodologyConfig.model_validate(data)
        assert config.zakat_rate_for("lunar") == 0.025
        assert config.zakat_rate_for("solar") == 0.02577

    def test_missing_asset_family_rejected(self, data):
        del data["assets"]["trusts"]
        with pytest.raises(ValidationError, match="trusts"):
            MethodologyConfig.model_validate(data)

    def test_unknown_key_rejected(self, data):
        data["assets"]["cash"]["bonus_rate"] = 0.5
        with pytest.raises(ValidationError):
            MethodologyConfig.model_validate(data)

    def test_unused_exemptions_section_rejected(self, data):
        data["exemptions"] = {"tools_of_trade": True}
        with pytest.raises(ValidationError, match="exemptions"):
            MethodologyConfig.model_validate(data)
        assert "exemptions" not in MethodologyConfig.model_fields

    def test_rate_out_of_range(self, data):
        data["assets"]["cash"]["rate"] = 1.5
        with pytest.raises(ValidationError):
            MethodologyConfig.model_validate(data)

    def test_unknown_passive_treatment(self, data):
        data["assets"]["investments"]["passive_investments"]["treatment"] = "book_value"
        with pytest.raises(ValidationError):
            MethodologyConfig.model_validate(data)

    def test_unknown_liability_method(self, data):
        data["liabilities"]["method"] = "half_deduction"
        with pytest.raises(ValidationError):
            MethodologyConfig.model_validate(data)

    def test_unknown_debt_kind(self, data):
        data["liabilities"]["personal_debt"]["types"]["car_loans"] = "full"
        with pytest.raises(ValidationError):
            MethodologyConfig.model_validate(data)

    def test_primary_residence_never_zakatable(self, data):
        data["assets"]["real_estate"]["primary_residence"]["zakatable"] = True
        with pytest.raises(ValidationError):
            MethodologyConfig.model_validate(data)

    def test_business_fixed_assets_never_zakatable(self, data):
        data["assets"]["business"]["fixed_assets_rate"] = 0.5
        with pytest.raises(ValidationError, match="fixed assets"):
            MethodologyConfig.model_validate(data)

    def test_descriptive_fields_accepted(self, data):
        data["assets"]["cash"]["tooltip"] = "Checking, savings and cash on hand"
        config = MethodologyConfig.model_validate(data)
        assert config.assets.cash.tooltip == "Checking, savings and cash on hand"


class TestLiabilityRules:
    def test_rule_for_known_kind(self, data):
        config = MethodologyConfig.model_validate(data)
        assert config.liabilities.rule_for("housing") == "12_months"
        assert config.liabilities.rule_for("student_loans") == "current_due"

    def test_rule_for_missing_kind(self, data):
        del data["liabilities"]["personal_debt"]["types"]["insurance"]
        config = MethodologyConfig.model_validate(data)
        assert config.liabilities.rule_for("insurance") is None

    def test_rule_for_without_table(self, data):
        data["liabilities"]["personal_debt"].pop("types")
        config = MethodologyConfig.model_validate(data)
        assert config.liabilities.rule_for("housing") is None


class TestRetirementRules:
    base = {
        "roth_contributions_rate": 1.0,
        "roth_earnings_follow_traditional": True,
        "distributions_always_zakatable": True,
    }

    def test_defaults(self):
        rules = RetirementRules(zakatability="net_accessible", **self.base)
        assert rules.penalty_rate == 0.10
        assert rules.pension_vested_rate == 1.0
        assert rules.tax_rate_source == "user_input"

    def test_conditional_age_requires_exemption_age(self):
        with pytest.raises(ValidationError, match="exemption_age"):
            RetirementRules(zakatability="conditional_age", post_threshold_method="full", **self.base)

    def test_conditional_age_requires_post_threshold_method(self):
        with pytest.raises(ValidationError, match="post_threshold_method"):
            RetirementRules(zakatability="conditional_age", exemption_age=59.5, **self.base)

    def test_proxy_rate_requires_rate(self):
        with pytest.raises(ValidationError, match="post_threshold_rate"):
            RetirementRules(
                zakatability="conditional_age",
                exemption_age=59.5,
                post_threshold_method="proxy_rate",
                **self.base,
            )

    def test_unknown_zakatability(self):
        with pytest.raises(ValidationError):
            RetirementRules(zakatability="sometimes", **self.base)
