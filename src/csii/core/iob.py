from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import List, Tuple

import numpy as np


@dataclass(frozen=True)
class BolusRecord:
    """A single administered bolus."""
    dose: float
    administered_at: datetime

    def __post_init__(self) -> None:
        if self.dose < 0:
            raise ValueError(f"INVALID_DOSE_ERROR: Bolus dose {self.dose} U cannot be negative.")


class InsulinOnBoard:
    """
    Decaying ledger of administered boluses.

    Each dose decays independently with first-order kinetics:
    ``dose * exp(-ln(2) / half_life * elapsed)``. Records whose elapsed time
    reaches ``duration_minutes`` are pruned and contribute nothing.
    """

    def __init__(self, half_life_minutes: float = 60.0, duration_minutes: float = 180.0):
        if half_life_minutes <= 0 or duration_minutes <= 0:
            raise ValueError("half_life_minutes and duration_minutes must be positive")
        self.half_life_minutes = half_life_minutes
        self.duration_minutes = duration_minutes
        self.decay_rate = math.log(2) / half_life_minutes
        self._records: List[BolusRecord] = []

    @property
    def records(self) -> Tuple[BolusRecord, ...]:
        return tuple(self._records)

    def add_bolus(self, dose: float, time: datetime) -> BolusRecord:
        record = BolusRecord(dose=dose, administered_at=time)
        self._records.append(record)
        return record

    def _elapsed_minutes(self, now: datetime) -> np.ndarray:
        return np.array(
            [(now - record.administered_at).total_seconds() / 60.0 for record in self._records],
            dtype=float,
        )

    def prune(self, now: datetime) -> int:
        """Drop records whose elapsed time is at or beyond the duration window."""
        if not self._records:
            return 0
        elapsed = self._elapsed_minutes(now)
        active = elapsed < self.duration_minutes
        removed = int(np.count_nonzero(~active))
        if removed:
            self._records = [r for r, keep in zip(self._records, active) if keep]
        return removed

    def current_iob(self, now: datetime) -> float:
        """Prune expired records and return the insulin still on board at ``now``."""
        self.prune(now)
        if not self._records:
            return 0.0
        doses = np.array([record.dose for record in self._records], dtype=float)
        elapsed = self._elapsed_minutes(now)
        return float(np.sum(doses * np.exp(-self.decay_rate * elapsed)))

    def reset(self) -> None:
        self._records = []

    def __len__(self) -> int:
        return len(self._records)
