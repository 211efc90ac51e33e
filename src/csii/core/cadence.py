from datetime import datetime


class CadenceGate:
    """Opens on wall-clock minutes that are a multiple of ``period_minutes``."""

    def __init__(self, period_minutes: int = 5):
        if period_minutes <= 0:
            raise ValueError("period_minutes must be positive")
        self.period_minutes = period_minutes

    def is_open(self, time: datetime) -> bool:
        return time.minute % self.period_minutes == 0
