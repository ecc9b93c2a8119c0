"""
clm_services -- orchestration over the kernel store and the engines.

Services here load the contracts a session may see, pass the active
settings into engine calls and bundle the results for callers (the CLI
or any embedding application).
"""

from clm_services.analysis_service import (
    AnalysisSnapshot,
    ContractAnalysisService,
    PortfolioAnalysis,
)

__all__ = [
    "AnalysisSnapshot",
    "ContractAnalysisService",
    "PortfolioAnalysis",
]
