"""
Static ARX glucose forecast over the 12 most recent samples.
"""
from typing import Iterable, Optional, Sequence

import numpy as np

ARX_INTERCEPT = 21.663695641612946

# Newest sample first
ARX_COEFFICIENTS = (
    12.92870171, -18.80198439, 2.99096824, 6.5136452, -1.25945627,
    -2.77399766, 0.6878598, 1.31356547, -0.80004476, -0.77138137,
    1.14742972, -0.29668647,
)


class ARXPredictor:
    """Linear autoregressive forecast with fixed coefficients (no online adaptation)."""

    def __init__(self,
                 coefficients: Optional[Sequence[float]] = None,
                 intercept: float = ARX_INTERCEPT):
        self.coefficients = np.asarray(
            ARX_COEFFICIENTS if coefficients is None else coefficients, dtype=float
        )
        self.intercept = float(intercept)

    @property
    def order(self) -> int:
        return int(self.coefficients.shape[0])

    def predict(self, history: Iterable[float]) -> float:
        """
        Forecast glucose from a newest-first history.

        The terms are accumulated one by one in lag order starting from the
        intercept, so results are reproducible to the last bit.

        Raises:
            ValueError: If the history is longer than the model order.
        """
        samples = list(history)
        if len(samples) > self.order:
            raise ValueError(
                f"History has {len(samples)} samples but the model order is {self.order}."
            )
        prediction = self.intercept
        for value, coefficient in zip(samples, self.coefficients.tolist()):
            prediction += value * coefficient
        return prediction

    def steady_state_gain(self) -> float:
        """Sum of the coefficients: the response to a constant history of 1 mg/dL."""
        return float(np.sum(self.coefficients))
