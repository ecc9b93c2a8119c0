"""
Module: clm_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the contract
    derivation engines.  This is the canonical import surface for higher
    layers (clm_services, scripts).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import clm_kernel/domain, clm_kernel/logging_config and
    sibling engine modules.  MUST NOT import clm_services or the record
    store.

Invariants enforced:
    - Purity: engines read the clock only through
      ``clm_kernel.domain.clock.resolve_as_of`` and only when the caller
      passes ``as_of=None``.  Tests always pass an explicit reference date.
    - Decimal-only arithmetic: amounts are ``Decimal``; floats never enter.
    - Determinism: identical inputs and reference date always produce
      identical outputs; nothing is cached between calls.

Audit relevance:
    Aggregate entry points are traced via ``@traced_engine`` (see
    ``clm_engines.tracer``), emitting CLM_ENGINE_TRACE log records with
    engine name, version, input fingerprint and duration.

Usage:
    from clm_engines import analyze_expiry, summarize_financials
    from clm_engines import rollup_by_client, compute_health, check_stage
"""

from clm_engines.clients import (
    NO_CLIENT_LABEL,
    PROFITABILITY_MULTIPLIER,
    ClientRollup,
    ProfitabilityRollup,
    client_key,
    is_profitable,
    profitability_rate,
    rollup_by_client,
    rollup_profitability,
)
from clm_engines.enrichment import EnrichedContract, enrich_contract, enrich_contracts
from clm_engines.expiry import (
    BUCKET_ORDER,
    DEFAULT_EXPIRY_THRESHOLDS,
    EXPIRING_SOON_WINDOW,
    URGENT_WINDOW,
    ExpiringContract,
    ExpiryAnalysis,
    ExpiryBucket,
    ExpiryThresholds,
    analyze_expiry,
    classify_expiry,
    days_until_expiry,
    is_expiring_within,
)
from clm_engines.financial import (
    DashboardStats,
    FinancialSummary,
    active_contracts,
    summarize_dashboard,
    summarize_financials,
)
from clm_engines.health import (
    DEFAULT_HEALTH_THRESHOLDS,
    HealthLevel,
    HealthMetrics,
    HealthRating,
    HealthThresholds,
    compute_health,
    rate_health,
)
from clm_engines.search import ContractFilter, filter_contracts
from clm_engines.stages import (
    StageCheck,
    StageControlEntry,
    StageControlSummary,
    StageStatus,
    check_stage,
    expected_stage,
    stage_options,
    summarize_stage_control,
)
from clm_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    # Expiry
    "BUCKET_ORDER",
    "DEFAULT_EXPIRY_THRESHOLDS",
    "EXPIRING_SOON_WINDOW",
    "URGENT_WINDOW",
    "ExpiringContract",
    "ExpiryAnalysis",
    "ExpiryBucket",
    "ExpiryThresholds",
    "analyze_expiry",
    "classify_expiry",
    "days_until_expiry",
    "is_expiring_within",
    # Financial
    "DashboardStats",
    "FinancialSummary",
    "active_contracts",
    "summarize_dashboard",
    "summarize_financials",
    # Clients / profitability
    "NO_CLIENT_LABEL",
    "PROFITABILITY_MULTIPLIER",
    "ClientRollup",
    "ProfitabilityRollup",
    "client_key",
    "is_profitable",
    "profitability_rate",
    "rollup_by_client",
    "rollup_profitability",
    # Health
    "DEFAULT_HEALTH_THRESHOLDS",
    "HealthLevel",
    "HealthMetrics",
    "HealthRating",
    "HealthThresholds",
    "compute_health",
    "rate_health",
    # Stages
    "StageCheck",
    "StageControlEntry",
    "StageControlSummary",
    "StageStatus",
    "check_stage",
    "expected_stage",
    "stage_options",
    "summarize_stage_control",
    # Enrichment / search
    "ContractFilter",
    "EnrichedContract",
    "enrich_contract",
    "enrich_contracts",
    "filter_contracts",
    # Tracing
    "compute_input_fingerprint",
    "traced_engine",
]
