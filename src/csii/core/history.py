import math
from typing import Iterator, List


class GlucoseHistory:
    """
    Fixed-capacity rolling window of rounded glucose samples, newest first.

    The buffer starts zero-filled so the predictor always sees a full lag
    vector; zeros (and NaN) do not count towards readiness.
    """

    def __init__(self, capacity: int = 12, skip_invalid: bool = True):
        """
        Args:
            capacity (int): Number of samples retained.
            skip_invalid (bool): If True, NaN samples are rejected and the
                                 buffer is left unchanged.
        """
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self.skip_invalid = skip_invalid
        self._samples: List[float] = [0.0] * capacity

    def push(self, sample: float) -> bool:
        """Insert a sample at the front, evicting the oldest. Returns False if rejected."""
        if self.skip_invalid and math.isnan(sample):
            return False
        self._samples.insert(0, sample)
        if len(self._samples) > self.capacity:
            self._samples.pop()
        return True

    def readiness_count(self) -> int:
        return sum(1 for value in self._samples if value > 0)

    def is_ready(self, threshold: int = 6) -> bool:
        return self.readiness_count() >= threshold

    def values(self) -> List[float]:
        return list(self._samples)

    @property
    def latest(self) -> float:
        return self._samples[0]

    def reset(self) -> None:
        self._samples = [0.0] * self.capacity

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[float]:
        return iter(list(self._samples))

    def __repr__(self) -> str:
        return f"GlucoseHistory(capacity={self.capacity}, ready={self.readiness_count()})"
