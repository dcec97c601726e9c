"""Bootstrap orchestration — create a group, register tokens, reconcile.

Every mutating step is run through ``_run_step`` which turns the outcome
into a ``StepOutcome`` instead of letting the exception escape. The
driver loop in ``run`` decides what to do next from the status alone:
anything but ``FATAL`` advances to the next step. Re-running the whole
sequence is the retry mechanism; on a re-run the steps that already
succeeded are rejected as duplicates and recorded as ``TOLERATED``.
"""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TypeVar

from ..catalog import AssetCatalog
from ..config import GroupConfig, PolicyConfig
from ..errors import (
    ChainClientError,
    ConfigError,
    DependencyError,
    DuplicateResourceError,
    ResourceNotFoundError,
    TransientChainError,
)
from ..interfaces.chain import MarketAdminClient
from ..models import Asset, BankReport, Group, TokenPlan
from .reporter import VerificationReporter

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StepStatus(Enum):
    SUCCEEDED = "succeeded"
    TOLERATED = "tolerated"
    SKIPPED = "skipped"
    FATAL = "fatal"


class BootstrapState(Enum):
    NO_GROUP = "no_group"
    GROUP_CREATED = "group_created"
    ORACLE_PENDING = "oracle_pending"
    ORACLE_READY = "oracle_ready"
    TOKEN_PENDING = "token_pending"
    TOKEN_REGISTERED = "token_registered"
    DONE = "done"


@dataclass(frozen=True)
class StepOutcome:
    step: str
    status: StepStatus
    detail: str = ""
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.status is StepStatus.SUCCEEDED


@dataclass(frozen=True)
class ResolvedToken:
    """A planned token joined with its catalog entry."""

    plan: TokenPlan
    asset: Asset


@dataclass
class BootstrapResult:
    group: Group | None = None
    outcomes: list[StepOutcome] = field(default_factory=list)
    state: BootstrapState = BootstrapState.NO_GROUP
    banks: list[BankReport] = field(default_factory=list)

    def outcome(self, step: str) -> StepOutcome | None:
        for outcome in self.outcomes:
            if outcome.step == step:
                return outcome
        return None

    @property
    def failed_steps(self) -> list[StepOutcome]:
        return [o for o in self.outcomes if not o.ok]


def resolve_plan(
    catalog: AssetCatalog, tokens: Sequence[TokenPlan]
) -> list[ResolvedToken]:
    """Join each planned token with its catalog entry.

    Raises UnknownSymbolError for symbols missing from the catalog and
    ConfigError when an external oracle is required but not catalogued.
    """
    resolved: list[ResolvedToken] = []
    for plan in tokens:
        asset = catalog.lookup(plan.symbol)
        if not plan.uses_stub_oracle and asset.oracle is None:
            raise ConfigError(
                f"Token '{plan.symbol}' needs an external oracle but the catalog has none"
            )
        resolved.append(ResolvedToken(plan=plan, asset=asset))
    return resolved


class BootstrapOrchestrator:
    """Drives the provisioning sequence against a ``MarketAdminClient``."""

    def __init__(
        self,
        client: MarketAdminClient,
        catalog: AssetCatalog,
        tokens: Sequence[TokenPlan],
        group_config: GroupConfig | None = None,
        policy: PolicyConfig | None = None,
        reporter: VerificationReporter | None = None,
    ) -> None:
        self._client = client
        self._group_config = group_config or GroupConfig()
        self._policy = policy or PolicyConfig()
        self._reporter = reporter or VerificationReporter()
        # Preconditions are checked here, before any network call.
        self._tokens = resolve_plan(catalog, tokens)

    # ------------------------------------------------------------------
    # Step boundary
    # ------------------------------------------------------------------

    def _classify(self, step: str, error: Exception, mutating: bool) -> StepOutcome:
        if isinstance(error, DuplicateResourceError):
            logger.warning("%s: already exists, continuing (%s)", step, error)
            return StepOutcome(step, StepStatus.TOLERATED, "duplicate", error)
        if isinstance(error, ResourceNotFoundError):
            logger.warning("%s: not found, re-run later (%s)", step, error)
            return StepOutcome(step, StepStatus.TOLERATED, "not found", error)
        if isinstance(error, TransientChainError):
            if mutating and self._policy.halt_on_transient:
                logger.error("%s: transient failure, halting (%s)", step, error)
                return StepOutcome(step, StepStatus.FATAL, "transient", error)
            logger.warning("%s: transient failure, continuing (%s)", step, error)
            return StepOutcome(step, StepStatus.TOLERATED, "transient", error)
        if isinstance(error, ChainClientError):
            logger.warning("%s: chain client error, continuing (%s)", step, error)
            return StepOutcome(step, StepStatus.TOLERATED, "chain error", error)
        logger.exception("%s: unexpected failure, continuing", step)
        return StepOutcome(step, StepStatus.TOLERATED, "unexpected", error)

    async def _run_step(
        self,
        result: BootstrapResult,
        step: str,
        call: Callable[[], Awaitable[T]],
        mutating: bool = True,
        required: bool = False,
    ) -> tuple[StepOutcome, T | None]:
        try:
            value = await call()
        except Exception as e:
            outcome = self._classify(step, e, mutating)
            if required and outcome.status is not StepStatus.FATAL:
                logger.error("%s: required step failed, halting", step)
                outcome = StepOutcome(step, StepStatus.FATAL, outcome.detail, e)
            result.outcomes.append(outcome)
            return outcome, None
        outcome = StepOutcome(step, StepStatus.SUCCEEDED)
        result.outcomes.append(outcome)
        return outcome, value

    def _skip(self, result: BootstrapResult, step: str, reason: str) -> StepOutcome:
        logger.warning("%s: skipped (%s)", step, reason)
        outcome = StepOutcome(step, StepStatus.SKIPPED, reason, DependencyError(reason))
        result.outcomes.append(outcome)
        return outcome

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _setup_group(self, result: BootstrapResult) -> Group | None:
        cfg = self._group_config
        logger.info("Creating Group...")
        created, _ = await self._run_step(
            result,
            "create_group",
            lambda: self._client.create_group(cfg.group_number, cfg.permissionless),
        )
        if created.status is StepStatus.FATAL:
            return None

        _, group = await self._run_step(
            result,
            "fetch_group",
            lambda: self._client.get_group_for_admin(
                self._client.admin, cfg.group_number
            ),
            mutating=False,
            # Nothing downstream can run without a group handle.
            required=True,
        )
        if group is None:
            return None

        logger.info("...registered group %s", group.address)
        result.state = BootstrapState.GROUP_CREATED
        return group

    async def _resolve_oracle(
        self, result: BootstrapResult, group: Group, token: ResolvedToken
    ) -> tuple[StepOutcome | None, str | None]:
        plan, asset = token.plan, token.asset
        if not plan.uses_stub_oracle:
            return None, asset.oracle

        result.state = BootstrapState.ORACLE_PENDING
        logger.info("Creating %s stub oracle...", plan.symbol)
        created, _ = await self._run_step(
            result,
            f"create_stub_oracle:{plan.symbol}",
            lambda: self._client.create_stub_oracle(
                group, asset.mint, plan.stub_oracle_price
            ),
        )
        if created.status is StepStatus.FATAL:
            return created, None

        # The creation call is never trusted for the address; read it back.
        fetched, oracle = await self._run_step(
            result,
            f"fetch_stub_oracle:{plan.symbol}",
            lambda: self._client.get_stub_oracle(group, asset.mint),
            mutating=False,
        )
        if oracle is None:
            return fetched, None

        logger.info("...created stub oracle %s", oracle.address)
        result.state = BootstrapState.ORACLE_READY
        return fetched, oracle.address

    async def _register(
        self, result: BootstrapResult, group: Group, token: ResolvedToken
    ) -> tuple[StepOutcome, Group]:
        plan, asset = token.plan, token.asset
        step = f"register_token:{plan.symbol}"

        oracle_outcome, oracle = await self._resolve_oracle(result, group, token)
        if oracle_outcome is not None and oracle_outcome.status is StepStatus.FATAL:
            return oracle_outcome, group
        if oracle is None:
            return self._skip(result, step, f"no oracle address for {plan.symbol}"), group

        result.state = BootstrapState.TOKEN_PENDING
        logger.info("Registering %s...", plan.symbol)
        registered, _ = await self._run_step(
            result,
            step,
            lambda: self._client.register_token(
                group,
                asset.mint,
                oracle,
                plan.oracle_conf_filter,
                plan.token_index,
                plan.symbol,
                plan.params,
            ),
        )
        if not registered.ok:
            return registered, group

        result.state = BootstrapState.TOKEN_REGISTERED
        _, reloaded = await self._run_step(
            result,
            f"reload_group:{plan.symbol}",
            lambda: self._client.reload_group(group),
            mutating=False,
        )
        return registered, reloaded or group

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    async def run(self) -> BootstrapResult:
        """Run the full sequence; always ends in ``BootstrapState.DONE``."""
        result = BootstrapResult()
        logger.info("Admin %s", self._client.admin)

        group = await self._setup_group(result)
        if group is not None:
            for token in self._tokens:
                outcome, group = await self._register(result, group, token)
                if outcome.status is StepStatus.FATAL:
                    logger.error("Stopping after fatal failure at %s", outcome.step)
                    break

            # A re-run registers nothing new; reconcile once more so the
            # report still reflects everything on chain.
            _, reloaded = await self._run_step(
                result,
                "final_reload",
                lambda: self._client.reload_group(group),
                mutating=False,
            )
            group = reloaded or group
            result.banks = self._reporter.report(group)

        result.group = group
        result.state = BootstrapState.DONE
        self._log_summary(result)
        return result

    @staticmethod
    def _log_summary(result: BootstrapResult) -> None:
        failed = result.failed_steps
        if failed:
            logger.warning(
                "Bootstrap finished with %d of %d steps not succeeded: %s",
                len(failed),
                len(result.outcomes),
                ", ".join(f"{o.step} ({o.status.value})" for o in failed),
            )
        else:
            logger.info("Bootstrap finished, all %d steps succeeded", len(result.outcomes))