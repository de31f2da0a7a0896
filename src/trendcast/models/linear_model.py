"""Linear trend regression over the day index."""

import numpy as np
from typing import Dict, Any, Tuple

from .base_model import BaseForecaster


class LinearRegressionModel(BaseForecaster):
    """Closed-form least-squares line ``price = slope * t + intercept``."""

    name = "Linear Regression"
    key = "linear"

    @property
    def min_points(self) -> int:
        return 2

    def _fit_forecast(self, prices: np.ndarray,
                      horizon: int) -> Tuple[np.ndarray, np.ndarray, Dict[str, Any]]:
        n = len(prices)
        x = np.arange(n, dtype=float)

        sum_x = x.sum()
        sum_y = prices.sum()
        sum_xy = np.dot(x, prices)
        sum_x2 = np.dot(x, x)

        slope = (n * sum_xy - sum_x * sum_y) / (n * sum_x2 - sum_x * sum_x)
        intercept = (sum_y - slope * sum_x) / n

        fitted = slope * x + intercept
        future_x = np.arange(n, n + horizon, dtype=float)
        predictions = slope * future_x + intercept

        return fitted, predictions, {'slope': float(slope), 'intercept': float(intercept)}
