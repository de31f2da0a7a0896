"""K-nearest-neighbors regression over sliding price windows."""

import numpy as np
from typing import Dict, Any, Tuple

from .base_model import BaseForecaster
from .windowing import build_windows, recursive_forecast
from ..utils.config import KNN_NEIGHBORS, KNN_LOOKBACK
from ..utils.numerics import euclidean_distance


class KNNModel(BaseForecaster):
    """
    Predicts the next price as the unweighted mean target of the `k`
    historical windows closest (Euclidean) to the query window.
    """

    name = "K-Nearest Neighbors"
    key = "knn"

    def __init__(self, k: int = KNN_NEIGHBORS, lookback: int = KNN_LOOKBACK):
        if k < 1 or lookback < 1:
            raise ValueError(f"k and lookback must be >= 1, got k={k}, lookback={lookback}")
        self.k = k
        self.lookback = lookback

    @property
    def min_points(self) -> int:
        # At least k training windows; the last price is never a target
        return self.lookback + self.k + 1

    def predict_next(self, query: np.ndarray, windows: np.ndarray, targets: np.ndarray) -> float:
        """Mean target of the k nearest training windows."""
        distances = np.array([euclidean_distance(query, w) for w in windows])
        nearest = np.argsort(distances, kind='stable')[:self.k]
        return float(targets[nearest].mean())

    def _fit_forecast(self, prices: np.ndarray,
                      horizon: int) -> Tuple[np.ndarray, np.ndarray, Dict[str, Any]]:
        n = len(prices)
        windows, targets = build_windows(prices, self.lookback, stop=n - 1)

        fitted = prices.copy()
        for i in range(self.lookback, n):
            fitted[i] = self.predict_next(prices[i - self.lookback:i], windows, targets)

        predictions = recursive_forecast(
            prices[-self.lookback:],
            horizon,
            lambda window: self.predict_next(window, windows, targets),
        )

        return fitted, predictions, {'k': self.k, 'lookback': self.lookback}

    def __repr__(self):
        return f"KNNModel(k={self.k}, lookback={self.lookback})"
