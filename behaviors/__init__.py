"""
Dynamics models — convert lever positions into monthly growth and burn drivers.
"""

from .base import DynamicsModel, MonthlyDrivers
from .lever import LeverDynamicsModel
from .presets import LEVER_PRESETS, LeverPreset, get_lever_preset

__all__ = [
    "MonthlyDrivers",
    "DynamicsModel",
    "LeverDynamicsModel",
    "LEVER_PRESETS",
    "LeverPreset",
    "get_lever_preset",
]
