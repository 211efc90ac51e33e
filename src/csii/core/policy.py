"""
Basal dosing policies.

Two interchangeable strategies turn an ARX forecast into a basal rate:

* ``DosingPolicy.IOB`` -- proportional control against a target,
  compensated by insulin on board. Invalid samples never reach the
  history buffer.
* ``DosingPolicy.THRESHOLD`` -- a discrete lookup table over the forecast.
  No IOB ledger; invalid samples are pushed into the history as-is.

Both return an unquantized rate in U/h; the controller quantizes it.
"""
from __future__ import annotations

import math
from enum import Enum
from typing import Optional, Tuple

from csii.core.config import ControllerConfig


class DosingPolicy(Enum):
    IOB = "iob"
    THRESHOLD = "threshold"

    @classmethod
    def from_name(cls, name: str) -> "DosingPolicy":
        try:
            return cls(name.lower())
        except ValueError:
            valid = ", ".join(p.value for p in cls)
            raise ValueError(f"Unknown dosing policy '{name}'. Expected one of: {valid}.") from None


# (lower bound, inclusive, basal U/h), evaluated top-down, first match wins
THRESHOLD_TABLE: Tuple[Tuple[float, bool, float], ...] = (
    (300.0, False, 4.0),
    (200.0, True, 2.0),
    (150.0, True, 1.5),
    (120.0, True, 0.7),
    (80.0, True, 0.5),
)


def proportional_basal(prediction: float,
                       iob: float = 0.0,
                       target_glucose: float = 100.0,
                       isf: float = 50.0) -> float:
    """``max(0, (prediction - target) / isf - iob)``; a NaN forecast yields 0."""
    rate = (prediction - target_glucose) / isf - iob
    if math.isnan(rate):
        return 0.0
    return max(rate, 0.0)


def threshold_basal(prediction: float) -> float:
    for bound, inclusive, rate in THRESHOLD_TABLE:
        if prediction > bound or (inclusive and prediction == bound):
            return rate
    return 0.0


class ProportionalIOBStrategy:
    """IOB-compensated proportional control."""

    policy = DosingPolicy.IOB
    uses_iob = True
    skips_invalid_samples = True

    def __init__(self, target_glucose: float = 100.0, isf: float = 50.0):
        self.target_glucose = target_glucose
        self.isf = isf

    def basal_rate(self, prediction: float, iob: float = 0.0) -> float:
        return proportional_basal(prediction, iob, self.target_glucose, self.isf)

    def describe(self) -> str:
        return f"(BG_pred - {self.target_glucose:g}) / {self.isf:g} - IOB, floored at 0"


class ThresholdTableStrategy:
    """Discrete threshold table; ignores IOB."""

    policy = DosingPolicy.THRESHOLD
    uses_iob = False
    skips_invalid_samples = False

    def basal_rate(self, prediction: float, iob: float = 0.0) -> float:
        return threshold_basal(prediction)

    def describe(self) -> str:
        return "threshold table over BG_pred (>300: 4, 200-300: 2, 150: 1.5, 120: 0.7, 80: 0.5, else 0)"


def strategy_for(policy: DosingPolicy, config: Optional[ControllerConfig] = None):
    """Build the strategy object for a policy."""
    config = config or ControllerConfig()
    if policy is DosingPolicy.IOB:
        return ProportionalIOBStrategy(
            target_glucose=config.target_glucose,
            isf=config.insulin_sensitivity_factor,
        )
    if policy is DosingPolicy.THRESHOLD:
        return ThresholdTableStrategy()
    raise ValueError(f"Unsupported dosing policy: {policy!r}")
