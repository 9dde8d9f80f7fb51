"""
Analysis layer — statistics, aggregation, sensitivity, stress and verdicts.
"""

from .aggregator import aggregate
from .decisions import Confidence, Priority, Rating, Recommendation, Verdict, generate_verdict
from .evidence import dump_evidence_pack, load_monte_carlo_result, load_verdict, to_evidence_pack
from .narratives import DEFAULT_NARRATIVES, NarrativeTables
from .pipeline import SimulationOutput, run_monte_carlo, run_monte_carlo_async, run_simulation
from .sensitivity import TornadoBar, compute_tornado, estimate_sensitivity
from .stress import ShockResult, apply_shock, compute_shock_propagation, stress_curve

__all__ = [
    "aggregate",
    "estimate_sensitivity",
    "compute_tornado",
    "TornadoBar",
    "apply_shock",
    "compute_shock_propagation",
    "stress_curve",
    "ShockResult",
    "generate_verdict",
    "Verdict",
    "Recommendation",
    "Rating",
    "Confidence",
    "Priority",
    "NarrativeTables",
    "DEFAULT_NARRATIVES",
    "to_evidence_pack",
    "dump_evidence_pack",
    "load_monte_carlo_result",
    "load_verdict",
    "run_monte_carlo",
    "run_monte_carlo_async",
    "run_simulation",
    "SimulationOutput",
]
