"""
Core package — data model, configuration, error taxonomy and input validation.
No simulation logic lives here.
"""

from .config import SimulationConfig, SensitivitySettings
from .errors import (
    Cancelled,
    EmptyEnsemble,
    EngineError,
    IncompleteEnsemble,
    InvalidConfiguration,
    SimulationDivergence,
    SimulationTimeout,
)
from .schema import (
    LEVER_LABELS,
    LEVER_NAMES,
    ConfidenceBand,
    DistributionStats,
    HistogramBucket,
    LeverState,
    MonteCarloResult,
    MonthlySnapshot,
    PercentileSet,
    SensitivityFactor,
    SingleSimulationResult,
)
from .validation import ValidationResult, check_inputs, validate_inputs

__all__ = [
    "SimulationConfig",
    "SensitivitySettings",
    "EngineError",
    "InvalidConfiguration",
    "SimulationDivergence",
    "Cancelled",
    "SimulationTimeout",
    "EmptyEnsemble",
    "IncompleteEnsemble",
    "LEVER_NAMES",
    "LEVER_LABELS",
    "LeverState",
    "MonthlySnapshot",
    "SingleSimulationResult",
    "DistributionStats",
    "HistogramBucket",
    "PercentileSet",
    "ConfidenceBand",
    "SensitivityFactor",
    "MonteCarloResult",
    "ValidationResult",
    "check_inputs",
    "validate_inputs",
]
