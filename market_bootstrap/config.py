"""Configuration loader — reads config.yaml and the environment, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .catalog import MAINNET_MINTS, MAINNET_ORACLES
from .errors import ConfigError
from .models import RiskParameters, TokenPlan
from .plan import DEFAULT_TOKEN_PLAN

logger = logging.getLogger(__name__)

MANGO_V4_PROGRAM_ID = "4MangoMjqJ2firMokCjjGgoK8d4MXcrgL7XJaL3w6fVg"

RPC_URL_ENV = "CLUSTER_URL"
KEYPAIR_PATH_ENV = "MANGO_MAINNET_PAYER_KEYPAIR"
CLUSTER_NAME_ENV = "MARKET_BOOTSTRAP_CLUSTER"

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ClusterConfig:
    name: str = "mainnet-beta"
    rpc_endpoints: tuple[str, ...] = ()
    rpc_timeout: int = 30
    program_id: str = MANGO_V4_PROGRAM_ID


@dataclass(frozen=True)
class AdminConfig:
    keypair_path: str = ""


@dataclass(frozen=True)
class GroupConfig:
    group_number: int = 0
    permissionless: bool = True


@dataclass(frozen=True)
class PolicyConfig:
    halt_on_transient: bool = False


@dataclass(frozen=True)
class CatalogConfig:
    mints: dict[str, str] = field(default_factory=lambda: dict(MAINNET_MINTS))
    oracles: dict[str, str] = field(default_factory=lambda: dict(MAINNET_ORACLES))


@dataclass(frozen=True)
class AppConfig:
    cluster: ClusterConfig = field(default_factory=ClusterConfig)
    admin: AdminConfig = field(default_factory=AdminConfig)
    group: GroupConfig = field(default_factory=GroupConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    tokens: tuple[TokenPlan, ...] = DEFAULT_TOKEN_PLAN


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


def _split_endpoints(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_cluster(raw: dict[str, Any]) -> ClusterConfig:
    endpoints = raw.get("rpc_endpoints")
    if endpoints is None:
        endpoints = _split_endpoints(os.environ.get(RPC_URL_ENV, ""))
    elif isinstance(endpoints, str):
        endpoints = _split_endpoints(endpoints)
    return ClusterConfig(
        name=raw.get("name") or os.environ.get(CLUSTER_NAME_ENV, "mainnet-beta"),
        rpc_endpoints=tuple(e for e in endpoints if e),
        rpc_timeout=int(raw.get("rpc_timeout", 30)),
        program_id=raw.get("program_id", MANGO_V4_PROGRAM_ID),
    )


def _build_admin(raw: dict[str, Any]) -> AdminConfig:
    return AdminConfig(
        keypair_path=raw.get("keypair_path") or os.environ.get(KEYPAIR_PATH_ENV, ""),
    )


def _build_group(raw: dict[str, Any]) -> GroupConfig:
    return GroupConfig(
        group_number=int(raw.get("group_number", 0)),
        permissionless=bool(raw.get("permissionless", True)),
    )


def _build_policy(raw: dict[str, Any]) -> PolicyConfig:
    return PolicyConfig(halt_on_transient=bool(raw.get("halt_on_transient", False)))


def _build_catalog(raw: dict[str, Any]) -> CatalogConfig:
    return CatalogConfig(
        mints=dict(raw.get("mints", MAINNET_MINTS)),
        oracles=dict(raw.get("oracles", MAINNET_ORACLES)),
    )


def _build_tokens(raw: list[dict[str, Any]] | None) -> tuple[TokenPlan, ...]:
    if raw is None:
        return DEFAULT_TOKEN_PLAN

    tokens: list[TokenPlan] = []
    for t in raw:
        try:
            params = RiskParameters(**t.get("params", {}))
        except (TypeError, ValueError) as e:
            raise ConfigError(
                f"Invalid risk parameters for token '{t.get('symbol', '?')}': {e}"
            ) from e
        price = t.get("stub_oracle_price")
        tokens.append(
            TokenPlan(
                symbol=t.get("symbol", ""),
                token_index=int(t.get("token_index", -1)),
                params=params,
                oracle_conf_filter=float(t.get("oracle_conf_filter", 0.1)),
                stub_oracle_price=float(price) if price is not None else None,
            )
        )
    return tuple(tokens)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    config_path: str | Path | None = None, *, dry_run: bool = False
) -> AppConfig:
    """Load and validate configuration from the environment and optional YAML.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root, which may be absent; an explicit path must exist.
        dry_run: Skip the checks that only matter when talking to a cluster.
    """
    load_dotenv()

    raw: dict[str, Any] = {}
    if config_path is None:
        default_path = Path(__file__).resolve().parent.parent / "config.yaml"
        if default_path.exists():
            config_path = default_path
    else:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

    if config_path is not None:
        with open(config_path) as f:
            try:
                raw = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Cannot parse {config_path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"Top level of {config_path} must be a mapping")
        raw = _interpolate_env(raw)

    try:
        cfg = AppConfig(
            cluster=_build_cluster(raw.get("cluster") or {}),
            admin=_build_admin(raw.get("admin") or {}),
            group=_build_group(raw.get("group") or {}),
            policy=_build_policy(raw.get("policy") or {}),
            catalog=_build_catalog(raw.get("catalog") or {}),
            tokens=_build_tokens(raw.get("tokens")),
        )
    except ConfigError:
        raise
    except (AttributeError, TypeError, ValueError) as e:
        raise ConfigError(f"Malformed configuration: {e}") from e

    _validate(cfg, dry_run=dry_run)
    if config_path is not None:
        logger.info("Configuration loaded from %s", config_path)
    else:
        logger.info("Configuration loaded from environment")
    return cfg


def _validate(cfg: AppConfig, dry_run: bool = False) -> None:
    """Raise ConfigError on invalid configuration."""
    if not dry_run:
        if not cfg.cluster.rpc_endpoints:
            raise ConfigError(
                f"No RPC endpoint configured (set {RPC_URL_ENV} or cluster.rpc_endpoints)"
            )
        if not cfg.admin.keypair_path:
            raise ConfigError(
                f"No admin keypair configured (set {KEYPAIR_PATH_ENV} or admin.keypair_path)"
            )

    if cfg.group.group_number < 0:
        raise ConfigError("group_number must be non-negative")

    if not cfg.tokens:
        raise ConfigError("At least one token must be planned")

    seen_indices: set[int] = set()
    seen_symbols: set[str] = set()
    for token in cfg.tokens:
        if not token.symbol:
            raise ConfigError(f"Token at index {token.token_index} has no symbol")
        if token.token_index < 0:
            raise ConfigError(f"Token '{token.symbol}' has no valid token_index")
        if token.token_index in seen_indices:
            raise ConfigError(f"Duplicate token_index {token.token_index}")
        if token.symbol in seen_symbols:
            raise ConfigError(f"Duplicate token symbol '{token.symbol}'")
        if token.stub_oracle_price is not None and token.stub_oracle_price <= 0:
            raise ConfigError(f"Token '{token.symbol}' has a non-positive stub price")
        seen_indices.add(token.token_index)
        seen_symbols.add(token.symbol)
