"""Data models — all frozen (immutable)."""
from __future__ import annotations

import math
from dataclasses import dataclass, field, fields


@dataclass(frozen=True)
class Asset:
    """Catalog entry: an on-chain mint and, optionally, its external oracle."""

    symbol: str
    mint: str
    oracle: str | None = None


@dataclass(frozen=True)
class RiskParameters:
    """Risk profile of a registered token.

    Field declaration order is the serialization order used whenever the
    values have to be flattened for the chain; do not reorder.
    """

    util0: float
    rate0: float
    util1: float
    rate1: float
    max_rate: float
    loan_fee_rate: float
    loan_origination_fee_rate: float
    maint_asset_weight: float
    init_asset_weight: float
    maint_liab_weight: float
    init_liab_weight: float
    liquidation_fee: float
    deposit_weight_scale_start_quote: float | None = None
    borrow_weight_scale_start_quote: float | None = None

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{f.name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise ValueError(f"{f.name} must be finite, got {value!r}")
        if not 0.0 <= self.util0 <= self.util1 <= 1.0:
            raise ValueError(
                f"utilization breakpoints must satisfy 0 <= util0 <= util1 <= 1 "
                f"(got util0={self.util0}, util1={self.util1})"
            )
        for name in (
            "maint_asset_weight",
            "init_asset_weight",
            "maint_liab_weight",
            "init_liab_weight",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")

    def ordered_values(self) -> tuple[float, ...]:
        """Values in declaration order, trailing unset optionals omitted."""
        values = [getattr(self, f.name) for f in fields(self)]
        while values and values[-1] is None:
            values.pop()
        return tuple(values)

    def as_dict(self) -> dict[str, float]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


@dataclass(frozen=True)
class TokenPlan:
    """One token registration in the bootstrap sequence."""

    symbol: str
    token_index: int
    params: RiskParameters
    oracle_conf_filter: float = 0.1
    stub_oracle_price: float | None = None

    @property
    def uses_stub_oracle(self) -> bool:
        return self.stub_oracle_price is not None


@dataclass(frozen=True)
class StubOracle:
    address: str
    group: str
    mint: str
    price: float


@dataclass(frozen=True)
class Bank:
    """A token registered into a group."""

    address: str
    group: str
    name: str
    token_index: int
    mint: str
    oracle: str
    params: RiskParameters
    oracle_conf_filter: float = 0.1


@dataclass(frozen=True)
class Group:
    """Top-level market container plus its locally cached banks."""

    address: str
    admin: str
    group_number: int
    permissionless: bool
    banks: tuple[Bank, ...] = field(default=())

    def banks_by_index(self) -> dict[int, Bank]:
        return {bank.token_index: bank for bank in self.banks}


@dataclass(frozen=True)
class BankReport:
    """One line of the verification report."""

    name: str
    token_index: int
    address: str
    mint: str
    oracle: str

    def describe(self) -> str:
        return (
            f"...registered Bank {self.name} {self.token_index} {self.address}, "
            f"mint {self.mint}, oracle {self.oracle}"
        )
