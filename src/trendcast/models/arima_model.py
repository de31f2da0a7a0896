"""Simplified ARIMA: autoregression on differenced prices, no moving-average term."""

import numpy as np
from typing import Dict, Any, List, Tuple

from .base_model import BaseForecaster
from ..utils.config import ARIMA_ORDER


def difference(values: np.ndarray, order: int = 1) -> np.ndarray:
    """Apply first-order differencing `order` times."""
    diffed = np.asarray(values, dtype=float)
    for _ in range(order):
        diffed = np.diff(diffed)
    return diffed


def estimate_ar_coefficients(series: np.ndarray, p: int) -> np.ndarray:
    """
    Per-lag least-squares ratios ``sum(x_t * x_{t-lag}) / sum(x_{t-lag}**2)``.

    Each lag is estimated on its own, so cross-lag correlation is ignored.
    A lag whose denominator is zero gets a coefficient of 0.
    """
    coefficients = np.zeros(p)
    n = len(series)
    for lag in range(1, p + 1):
        current = series[lag:n]
        lagged = series[0:n - lag]
        sum_xy = float(np.dot(current, lagged))
        sum_x2 = float(np.dot(lagged, lagged))
        coefficients[lag - 1] = sum_xy / sum_x2 if sum_x2 != 0 else 0.0
    return coefficients


class ARIMAModel(BaseForecaster):
    """
    ARIMA(p, d, q) approximation.

    `q` is accepted for the familiar signature but no MA component is fitted.
    Forecasts integrate predicted first differences from the last price.
    """

    name = "ARIMA"
    key = "arima"

    def __init__(self, p: int = ARIMA_ORDER[0], d: int = ARIMA_ORDER[1], q: int = ARIMA_ORDER[2]):
        if p < 1 or d < 0 or q < 0:
            raise ValueError(f"Invalid ARIMA order ({p}, {d}, {q})")
        self.p = p
        self.d = d
        self.q = q

    @property
    def min_points(self) -> int:
        return self.p + self.d + 1

    def _fitted(self, prices: np.ndarray, coefficients: np.ndarray) -> np.ndarray:
        p = self.p
        fitted: List[float] = list(prices[:p])
        for i in range(p, len(prices)):
            prediction = 0.0
            for lag in range(1, p + 1):
                previous = fitted[i - lag - 1] if i - lag > 0 else prices[0]
                prediction += coefficients[lag - 1] * (fitted[i - lag] - previous)
            fitted.append(fitted[i - 1] + prediction)
        return np.array(fitted)

    def _recent_differences(self, prices: np.ndarray) -> List[float]:
        n = len(prices)
        recent: List[float] = []
        for i in range(self.p):
            idx = n - 1 - i
            if idx < 0:
                break
            before = prices[idx - 1] if idx - 1 >= 0 else prices[0]
            recent.insert(0, float(prices[idx] - before))
        return recent

    def _fit_forecast(self, prices: np.ndarray,
                      horizon: int) -> Tuple[np.ndarray, np.ndarray, Dict[str, Any]]:
        diffed = difference(prices, self.d)
        coefficients = estimate_ar_coefficients(diffed, self.p)

        fitted = self._fitted(prices, coefficients)

        recent = self._recent_differences(prices)
        last_value = float(prices[-1])
        predictions = np.empty(horizon)
        for h in range(horizon):
            step = 0.0
            for lag in range(min(self.p, len(recent))):
                step += coefficients[lag] * recent[-1 - lag]
            last_value += step
            predictions[h] = last_value
            recent.append(step)
            if len(recent) > self.p:
                recent.pop(0)

        return fitted, predictions, {
            'p': self.p,
            'd': self.d,
            'q': self.q,
            'ar_coefficients': coefficients.tolist(),
        }

    def __repr__(self):
        return f"ARIMAModel(p={self.p}, d={self.d}, q={self.q})"
