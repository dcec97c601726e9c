"""Unit tests for the verification reporter."""
from __future__ import annotations

from market_bootstrap.models import Bank, Group, RiskParameters
from market_bootstrap.services.reporter import VerificationReporter


def _bank(name: str, index: int, params: RiskParameters) -> Bank:
    return Bank(
        address=f"bank-{name}",
        group="g",
        name=name,
        token_index=index,
        mint=f"mint-{name}",
        oracle=f"oracle-{name}",
        params=params,
    )


class TestReport:
    def test_one_record_per_bank_in_client_order(self, sample_params: RiskParameters) -> None:
        group = Group(
            address="g",
            admin="a",
            group_number=0,
            permissionless=True,
            banks=(_bank("SOL", 2, sample_params), _bank("BTC", 0, sample_params)),
        )

        reports = VerificationReporter().report(group)

        assert [r.name for r in reports] == ["SOL", "BTC"]
        assert reports[0].token_index == 2
        assert reports[0].address == "bank-SOL"
        assert reports[0].mint == "mint-SOL"
        assert reports[0].oracle == "oracle-SOL"

    def test_empty_group(self) -> None:
        group = Group(address="g", admin="a", group_number=0, permissionless=True)
        reports = VerificationReporter().report(group)
        assert reports == []
        assert VerificationReporter.render(reports) == "No banks registered."

    def test_render(self, sample_params: RiskParameters) -> None:
        group = Group(
            address="g",
            admin="a",
            group_number=0,
            permissionless=True,
            banks=(_bank("BTC", 0, sample_params),),
        )
        text = VerificationReporter.render(VerificationReporter().report(group))
        assert text == "...registered Bank BTC 0 bank-BTC, mint mint-BTC, oracle oracle-BTC"
