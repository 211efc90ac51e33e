from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ControllerConfig:
    """
    Fixed engine constants shared by the history buffer, IOB ledger,
    dosing policies and cadence gate.
    """
    # Glucose history
    history_capacity: int = 12
    readiness_threshold: int = 6

    # Basal cadence (minutes of the hour)
    cadence_minutes: int = 5

    # Proportional control
    target_glucose: float = 100.0
    insulin_sensitivity_factor: float = 50.0

    # Insulin on board
    insulin_half_life_minutes: float = 60.0
    insulin_duration_minutes: float = 180.0

    def __post_init__(self) -> None:
        if self.history_capacity <= 0:
            raise ValueError("history_capacity must be positive")
        if not (0 < self.readiness_threshold <= self.history_capacity):
            raise ValueError("readiness_threshold must be within 1..history_capacity")
        if self.cadence_minutes <= 0:
            raise ValueError("cadence_minutes must be positive")
        if self.insulin_sensitivity_factor <= 0:
            raise ValueError("insulin_sensitivity_factor must be positive")
        if self.insulin_half_life_minutes <= 0 or self.insulin_duration_minutes <= 0:
            raise ValueError("insulin half-life and duration must be positive")
