"""Command-line interface for bootstrapping a lending market group."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from solders.keypair import Keypair

from .catalog import AssetCatalog
from .chains import InMemoryMarketClient, RpcMarketClient
from .config import AppConfig, load_config
from .errors import PreconditionError
from .interfaces.chain import MarketAdminClient
from .keys import load_keypair
from .logging_setup import configure_logging
from .services import BootstrapOrchestrator, VerificationReporter

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="market-bootstrap",
        description="Create a market group and register its tokens",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root, if any)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Run against an in-memory ledger with a throwaway admin key",
    )
    return parser


def build_client(config: AppConfig, dry_run: bool = False) -> MarketAdminClient:
    """Create the chain client for this run."""
    if dry_run:
        admin = Keypair()
        return InMemoryMarketClient(str(admin.pubkey()), config.cluster.program_id)
    keypair = load_keypair(config.admin.keypair_path)
    return RpcMarketClient(config.cluster, keypair)


async def _run(args: argparse.Namespace) -> int:
    """Execute the bootstrap sequence and print the report."""
    configure_logging(args.log_level)
    try:
        config = load_config(args.config, dry_run=args.dry_run)
        catalog = AssetCatalog.from_mappings(config.catalog.mints, config.catalog.oracles)
        client = build_client(config, dry_run=args.dry_run)
        reporter = VerificationReporter()
        orchestrator = BootstrapOrchestrator(
            client,
            catalog,
            config.tokens,
            group_config=config.group,
            policy=config.policy,
            reporter=reporter,
        )
    except (PreconditionError, FileNotFoundError) as e:
        logger.error("Cannot start bootstrap: %s", e)
        return 1

    print(f"Admin {client.admin}")
    result = await orchestrator.run()
    print(reporter.render(result.banks))
    # Partial failures are expected on re-runs and do not change the exit code.
    return 0


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()
    sys.exit(asyncio.run(_run(args)))
