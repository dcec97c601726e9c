"""Unit tests for data models."""
from __future__ import annotations

import math
from dataclasses import replace

import pytest

from market_bootstrap.models import Bank, BankReport, Group, RiskParameters, TokenPlan


class TestRiskParameters:
    def test_ordered_values_follow_declaration_order(
        self, sample_params: RiskParameters
    ) -> None:
        assert sample_params.ordered_values() == (
            0.4, 0.07, 0.8, 0.9, 0.63, 0.0005, 1.5, 0.8, 0.6, 1.2, 1.4, 0.02,
        )

    def test_weights_are_not_interchangeable(self, sample_params: RiskParameters) -> None:
        swapped = replace(
            sample_params,
            maint_asset_weight=sample_params.init_asset_weight,
            init_asset_weight=sample_params.maint_asset_weight,
        )
        assert swapped != sample_params
        assert swapped.ordered_values()[7:9] == (0.6, 0.8)

    def test_optional_scaling_fields_appended_when_set(
        self, sample_params: RiskParameters
    ) -> None:
        scaled = replace(
            sample_params,
            deposit_weight_scale_start_quote=5_000_000.0,
            borrow_weight_scale_start_quote=2_000_000.0,
        )
        assert scaled.ordered_values()[-2:] == (5_000_000.0, 2_000_000.0)
        assert len(scaled.ordered_values()) == 14

    def test_as_dict_omits_unset_optionals(self, sample_params: RiskParameters) -> None:
        d = sample_params.as_dict()
        assert d["max_rate"] == 0.63
        assert "deposit_weight_scale_start_quote" not in d

    def test_rejects_non_finite(self, sample_params: RiskParameters) -> None:
        with pytest.raises(ValueError, match="finite"):
            replace(sample_params, rate0=math.nan)

    def test_rejects_non_numeric(self, sample_params: RiskParameters) -> None:
        with pytest.raises(ValueError, match="number"):
            replace(sample_params, rate1="0.9")  # type: ignore[arg-type]

    def test_rejects_unordered_breakpoints(self, sample_params: RiskParameters) -> None:
        with pytest.raises(ValueError, match="utilization"):
            replace(sample_params, util0=0.9, util1=0.8)

    def test_rejects_non_positive_weight(self, sample_params: RiskParameters) -> None:
        with pytest.raises(ValueError, match="init_liab_weight"):
            replace(sample_params, init_liab_weight=0.0)

    def test_frozen(self, sample_params: RiskParameters) -> None:
        with pytest.raises(AttributeError):
            sample_params.max_rate = 2.0  # type: ignore[misc]


class TestTokenPlan:
    def test_stub_oracle_flag(self, sample_params: RiskParameters) -> None:
        assert TokenPlan("USDC", 1, sample_params, stub_oracle_price=1.0).uses_stub_oracle
        assert not TokenPlan("SOL", 2, sample_params).uses_stub_oracle

    def test_default_conf_filter(self, sample_params: RiskParameters) -> None:
        assert TokenPlan("SOL", 2, sample_params).oracle_conf_filter == 0.1


class TestGroup:
    def test_banks_by_index(self, sample_params: RiskParameters) -> None:
        bank = Bank(
            address="bank1",
            group="g",
            name="SOL",
            token_index=2,
            mint="mint",
            oracle="oracle",
            params=sample_params,
        )
        group = Group(address="g", admin="a", group_number=0, permissionless=True, banks=(bank,))
        assert group.banks_by_index() == {2: bank}

    def test_defaults(self) -> None:
        group = Group(address="g", admin="a", group_number=0, permissionless=True)
        assert group.banks == ()


class TestBankReport:
    def test_describe(self) -> None:
        report = BankReport(name="BTC", token_index=0, address="B1", mint="M1", oracle="O1")
        assert report.describe() == "...registered Bank BTC 0 B1, mint M1, oracle O1"
