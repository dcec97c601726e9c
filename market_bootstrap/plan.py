"""Default token registration plan for a fresh group."""
from __future__ import annotations

from dataclasses import replace

from .models import RiskParameters, TokenPlan

_BASE_PARAMS = RiskParameters(
    util0=0.4,
    rate0=0.07,
    util1=0.8,
    rate1=0.9,
    max_rate=0.88,
    loan_fee_rate=0.0005,
    loan_origination_fee_rate=1.5,
    maint_asset_weight=0.8,
    init_asset_weight=0.6,
    maint_liab_weight=1.2,
    init_liab_weight=1.4,
    liquidation_fee=0.02,
)

BTC_PARAMS = _BASE_PARAMS
USDC_PARAMS = replace(_BASE_PARAMS, max_rate=1.5)
SOL_PARAMS = replace(_BASE_PARAMS, max_rate=0.63)

DEFAULT_TOKEN_PLAN: tuple[TokenPlan, ...] = (
    TokenPlan(symbol="BTC", token_index=0, params=BTC_PARAMS),
    TokenPlan(symbol="USDC", token_index=1, params=USDC_PARAMS, stub_oracle_price=1.0),
    TokenPlan(symbol="SOL", token_index=2, params=SOL_PARAMS),
)
