"""
clm_services.analysis_service -- scoped analysis snapshots for a session.

Responsibility:
    Load the contracts visible to a ``SessionContext``, resolve one
    reference date, and run every derivation engine against that single
    snapshot: enrichment, dashboard stats, financial summary, expiry
    buckets, stage control and, for managers, the client/profitability
    rollups and health rating.

Architecture position:
    Services -- stateful orchestration over engines + kernel.  Reads
    through ``ContractSelector``; never writes.  Settings arrive from
    ``clm_config.get_active_config()`` unless injected.

Invariants enforced:
    - Every engine result in a snapshot shares the same ``as_of`` and the
      same input contracts, so the numbers are mutually consistent.
    - Role scoping happens once, before any engine runs.
    - Stage control is computed for managers and analysts only; the
      portfolio analysis (rollups, health) for managers only.  Other
      roles get ``None`` in those fields.

Failure modes:
    - AccessDeniedError from ``portfolio`` when the session is not a
      manager.

Usage:
    from clm_services import ContractAnalysisService

    with session_scope() as session:
        snap = ContractAnalysisService(session).snapshot(ctx)
        print(snap.dashboard.expiring_soon)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Sequence

from sqlalchemy.orm import Session

from clm_config import EngineSettings, get_active_config
from clm_engines.clients import (
    ClientRollup,
    ProfitabilityRollup,
    rollup_by_client,
    rollup_profitability,
)
from clm_engines.enrichment import EnrichedContract, enrich_contracts
from clm_engines.expiry import ExpiryAnalysis, analyze_expiry
from clm_engines.financial import (
    DashboardStats,
    FinancialSummary,
    summarize_dashboard,
    summarize_financials,
)
from clm_engines.health import HealthMetrics, HealthRating, compute_health, rate_health
from clm_engines.search import ContractFilter, filter_contracts
from clm_engines.stages import StageControlSummary, summarize_stage_control
from clm_kernel.domain.clock import Clock, resolve_as_of
from clm_kernel.domain.contract import ContractRecord, UserRole
from clm_kernel.domain.session import SessionContext, require_role
from clm_kernel.logging_config import LogContext, get_logger
from clm_kernel.selectors.contract_selector import ContractSelector

logger = get_logger("services.analysis")

_STAGE_CONTROL_ROLES = (UserRole.MANAGER, UserRole.ANALYST)


@dataclass(frozen=True)
class PortfolioAnalysis:
    """Manager-only portfolio view: rollups and health."""

    top_clients: tuple[ClientRollup, ...]
    top_profitability: tuple[ProfitabilityRollup, ...]
    health: HealthMetrics
    rating: HealthRating


@dataclass(frozen=True)
class AnalysisSnapshot:
    """Every derived view of one session's contracts at one reference date."""

    as_of: date
    role: UserRole
    contracts: tuple[EnrichedContract, ...]
    dashboard: DashboardStats
    financials: FinancialSummary
    expiry: ExpiryAnalysis
    stage_control: StageControlSummary | None
    portfolio: PortfolioAnalysis | None


class ContractAnalysisService:
    """
    Run the derivation engines over a session's contracts.

    Contract:
        Receives a Session and, optionally, a Clock and EngineSettings via
        constructor injection.  All methods are read-only.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        settings: EngineSettings | None = None,
    ):
        self._session = session
        self._clock = clock
        self._settings = settings or get_active_config()
        self._selector = ContractSelector(session)

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    def visible_contracts(self, ctx: SessionContext) -> list[ContractRecord]:
        """Contracts in ``ctx``'s view, newest first."""
        return self._selector.list_for_session(ctx)

    def _portfolio(
        self,
        contracts: Sequence[ContractRecord],
        as_of: date,
        top_clients: int | None,
        top_profitability: int | None,
    ) -> PortfolioAnalysis:
        rollup = self._settings.rollup
        health = compute_health(
            contracts,
            as_of,
            risk_window=self._settings.windows.risk_days,
            multiplier=rollup.profitability_multiplier,
        )
        return PortfolioAnalysis(
            top_clients=rollup_by_client(
                contracts,
                top_n=top_clients if top_clients is not None else rollup.top_clients,
                no_client_label=rollup.no_client_label,
            ),
            top_profitability=rollup_profitability(
                contracts,
                top_n=top_profitability if top_profitability is not None else rollup.top_profitability,
                no_client_label=rollup.no_client_label,
                multiplier=rollup.profitability_multiplier,
            ),
            health=health,
            rating=rate_health(health, self._settings.health),
        )

    def portfolio(
        self,
        ctx: SessionContext,
        as_of: date | datetime | None = None,
        top_clients: int | None = None,
        top_profitability: int | None = None,
    ) -> PortfolioAnalysis:
        """
        Client rollups, profitability rollups and health for managers.

        Raises:
            AccessDeniedError: ``ctx`` is not a manager.
        """
        require_role(ctx, (UserRole.MANAGER,), "portfolio analysis")
        ref = resolve_as_of(as_of, self._clock)
        return self._portfolio(self.visible_contracts(ctx), ref, top_clients, top_profitability)

    def snapshot(
        self,
        ctx: SessionContext,
        as_of: date | datetime | None = None,
        top_clients: int | None = None,
        top_profitability: int | None = None,
    ) -> AnalysisSnapshot:
        """
        Build the full analysis snapshot for ``ctx``.

        Args:
            ctx: The session whose view is analysed.
            as_of: Reference date (None reads the injected clock).
            top_clients: Client rollup size (defaults to settings, 5).
            top_profitability: Profitability rollup size (defaults to settings, 8).
        """
        ref = resolve_as_of(as_of, self._clock)
        with LogContext.bind(actor_id=ctx.email, actor_role=ctx.role.value):
            contracts = self.visible_contracts(ctx)
            windows = self._settings.windows

            stage_control = None
            if ctx.role in _STAGE_CONTROL_ROLES:
                stage_control = summarize_stage_control(contracts, ref)

            portfolio = None
            if ctx.is_manager:
                portfolio = self._portfolio(contracts, ref, top_clients, top_profitability)

            snap = AnalysisSnapshot(
                as_of=ref,
                role=ctx.role,
                contracts=enrich_contracts(contracts, ref, self._settings.expiry),
                dashboard=summarize_dashboard(
                    contracts,
                    ref,
                    expiring_window=windows.expiring_days,
                    urgent_window=windows.urgent_days,
                ),
                financials=summarize_financials(contracts),
                expiry=analyze_expiry(contracts, ref, thresholds=self._settings.expiry),
                stage_control=stage_control,
                portfolio=portfolio,
            )
            logger.info(
                "analysis_snapshot_built",
                extra={
                    "as_of": ref.isoformat(),
                    "contract_count": len(contracts),
                    "portfolio": portfolio is not None,
                },
            )
            return snap

    def search(
        self,
        ctx: SessionContext,
        criteria: ContractFilter,
        as_of: date | datetime | None = None,
    ) -> list[EnrichedContract]:
        """Enriched contracts in ``ctx``'s view matching ``criteria``."""
        ref = resolve_as_of(as_of, self._clock)
        enriched = enrich_contracts(self.visible_contracts(ctx), ref, self._settings.expiry)
        return filter_contracts(enriched, criteria)
