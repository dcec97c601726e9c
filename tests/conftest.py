"""Shared test fixtures and sample data."""
from __future__ import annotations

import json
import textwrap
from pathlib import Path

import pytest
from solders.keypair import Keypair

from market_bootstrap.catalog import AssetCatalog
from market_bootstrap.chains.memory import InMemoryMarketClient
from market_bootstrap.config import (
    MANGO_V4_PROGRAM_ID,
    AdminConfig,
    AppConfig,
    ClusterConfig,
    GroupConfig,
    PolicyConfig,
)
from market_bootstrap.models import RiskParameters, TokenPlan
from market_bootstrap.plan import DEFAULT_TOKEN_PLAN


# ---------------------------------------------------------------------------
# Key fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def admin_keypair() -> Keypair:
    return Keypair.from_seed(bytes(range(32)))


@pytest.fixture()
def keypair_file(tmp_path: Path, admin_keypair: Keypair) -> Path:
    path = tmp_path / "admin.json"
    path.write_text(json.dumps(list(bytes(admin_keypair))))
    return path


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_cluster_config() -> ClusterConfig:
    return ClusterConfig(
        name="devnet",
        rpc_endpoints=("https://rpc1.example.com", "https://rpc2.example.com"),
        rpc_timeout=10,
    )


@pytest.fixture()
def sample_app_config(
    sample_cluster_config: ClusterConfig, keypair_file: Path
) -> AppConfig:
    return AppConfig(
        cluster=sample_cluster_config,
        admin=AdminConfig(keypair_path=str(keypair_file)),
        group=GroupConfig(group_number=0, permissionless=True),
        policy=PolicyConfig(halt_on_transient=False),
    )


# ---------------------------------------------------------------------------
# Domain fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def catalog() -> AssetCatalog:
    return AssetCatalog.mainnet()


@pytest.fixture()
def token_plan() -> tuple[TokenPlan, ...]:
    return DEFAULT_TOKEN_PLAN


@pytest.fixture()
def sample_params() -> RiskParameters:
    return RiskParameters(
        util0=0.4,
        rate0=0.07,
        util1=0.8,
        rate1=0.9,
        max_rate=0.63,
        loan_fee_rate=0.0005,
        loan_origination_fee_rate=1.5,
        maint_asset_weight=0.8,
        init_asset_weight=0.6,
        maint_liab_weight=1.2,
        init_liab_weight=1.4,
        liquidation_fee=0.02,
    )


@pytest.fixture()
def ledger(admin_keypair: Keypair) -> InMemoryMarketClient:
    return InMemoryMarketClient(str(admin_keypair.pubkey()), MANGO_V4_PROGRAM_ID)


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    cluster:
      name: devnet
      rpc_endpoints: ["https://rpc.example.com"]
      rpc_timeout: 10
    admin:
      keypair_path: "/keys/admin.json"
    group:
      group_number: 3
      permissionless: false
    policy:
      halt_on_transient: true
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
