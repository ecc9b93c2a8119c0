"""
Engine settings schema.

Frozen dataclasses parsed from YAML by ``clm_config.loader``.  Threshold
types are the engines' own parameter types, so a loaded configuration is
passed straight into engine calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from clm_engines.expiry import EXPIRING_SOON_WINDOW, URGENT_WINDOW, ExpiryThresholds
from clm_engines.health import HealthThresholds
from clm_engines.clients import NO_CLIENT_LABEL, PROFITABILITY_MULTIPLIER


@dataclass(frozen=True)
class DashboardWindows:
    """Day windows of the dashboard "expiring soon" / "urgent" cards."""

    expiring_days: int = EXPIRING_SOON_WINDOW
    urgent_days: int = URGENT_WINDOW
    risk_days: int = EXPIRING_SOON_WINDOW

    def __post_init__(self) -> None:
        if min(self.expiring_days, self.urgent_days, self.risk_days) < 0:
            raise ValueError("dashboard windows must be non-negative")


@dataclass(frozen=True)
class RollupSettings:
    no_client_label: str = NO_CLIENT_LABEL
    profitability_multiplier: Decimal = PROFITABILITY_MULTIPLIER
    top_clients: int = 5
    top_profitability: int = 8

    def __post_init__(self) -> None:
        if self.profitability_multiplier < 0:
            raise ValueError("profitability_multiplier must be non-negative")
        if self.top_clients < 1 or self.top_profitability < 1:
            raise ValueError("top-N limits must be positive")


@dataclass(frozen=True)
class DatabaseSettings:
    url: str = "sqlite:///clm.db"
    echo: bool = False


@dataclass(frozen=True)
class EngineSettings:
    """Complete runtime configuration."""

    expiry: ExpiryThresholds = field(default_factory=ExpiryThresholds)
    windows: DashboardWindows = field(default_factory=DashboardWindows)
    health: HealthThresholds = field(default_factory=HealthThresholds)
    rollup: RollupSettings = field(default_factory=RollupSettings)
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    source: str = "<defaults>"
    checksum: str = ""
