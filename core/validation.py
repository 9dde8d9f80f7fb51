"""
Input validation for levers and run configuration before they enter the engine.

Catches problems early:
- Non-integer or non-positive iteration counts / horizons
- NaN or infinite inputs (these would poison every downstream statistic)
- Levers outside their normalized range
- Balances that make no sense (negative ARR, negative burn, no starting cash)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from numbers import Integral
from typing import List

from .config import SimulationConfig
from .errors import InvalidConfiguration
from .schema import LEVER_MAX, LEVER_MIN, LEVER_NAMES, LeverState
from .utils import is_finite_number

logger = logging.getLogger(__name__)

MAX_SENSIBLE_HORIZON_MONTHS = 600
MAX_SENSIBLE_ITERATIONS = 1_000_000


@dataclass
class ValidationResult:
    """Collects all validation warnings/errors for one run's inputs."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        return ValidationResult(
            errors=self.errors + other.errors,
            warnings=self.warnings + other.warnings,
        )

    def summary(self) -> str:
        lines = []
        if self.errors:
            lines.append(f"ERRORS ({len(self.errors)}):")
            for e in self.errors:
                lines.append(f"  ✗ {e}")
        if self.warnings:
            lines.append(f"WARNINGS ({len(self.warnings)}):")
            for w in self.warnings:
                lines.append(f"  ⚠ {w}")
        if not lines:
            lines.append("✓ All checks passed.")
        return "\n".join(lines)


def _is_positive_int(value) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool) and value > 0


def validate_levers(levers: LeverState) -> ValidationResult:
    result = ValidationResult()
    for name in LEVER_NAMES:
        value = getattr(levers, name)
        if not is_finite_number(value):
            result.errors.append(f"Lever {name} is not a finite number ({value!r}).")
        elif not (LEVER_MIN <= value <= LEVER_MAX):
            result.errors.append(
                f"Lever {name}={value} is outside [{LEVER_MIN:g}, {LEVER_MAX:g}]."
            )
    return result


def validate_config(config: SimulationConfig) -> ValidationResult:
    result = ValidationResult()

    # --- Counts ---
    if not _is_positive_int(config.iterations):
        result.errors.append(f"iterations must be a positive integer, got {config.iterations!r}.")
    elif config.iterations > MAX_SENSIBLE_ITERATIONS:
        result.warnings.append(
            f"iterations={config.iterations} is very large — expect long run times."
        )

    if not _is_positive_int(config.time_horizon_months):
        result.errors.append(
            f"time_horizon_months must be a positive integer, got {config.time_horizon_months!r}."
        )
    elif config.time_horizon_months > MAX_SENSIBLE_HORIZON_MONTHS:
        result.warnings.append(
            f"time_horizon_months={config.time_horizon_months} exceeds "
            f"{MAX_SENSIBLE_HORIZON_MONTHS} — compounding growth may diverge."
        )

    if not isinstance(config.seed, Integral) or isinstance(config.seed, bool) or config.seed < 0:
        result.errors.append(f"seed must be a non-negative integer, got {config.seed!r}.")

    # --- Balances ---
    for name in ("starting_cash", "starting_arr", "monthly_burn"):
        value = getattr(config, name)
        if not is_finite_number(value):
            result.errors.append(f"{name} is not a finite number ({value!r}).")
            continue
        if name == "starting_cash" and value <= 0:
            result.errors.append(f"starting_cash must be positive, got {value}.")
        elif name != "starting_cash" and value < 0:
            result.errors.append(f"{name} must not be negative, got {value}.")

    return result


def check_inputs(levers: LeverState, config: SimulationConfig) -> ValidationResult:
    """Raise InvalidConfiguration listing every error. Warnings are returned, not logged."""
    result = validate_levers(levers).merge(validate_config(config))
    if not result.is_valid:
        raise InvalidConfiguration(result.errors)
    return result


def validate_inputs(levers: LeverState, config: SimulationConfig) -> ValidationResult:
    """
    Run all checks; raise InvalidConfiguration listing every error.
    Warnings are logged and returned. Call once per run, not per iteration.
    """
    result = check_inputs(levers, config)
    for w in result.warnings:
        logger.warning(w)
    return result
