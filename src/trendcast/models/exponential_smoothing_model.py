"""Holt's linear exponential smoothing."""

import numpy as np
from typing import Dict, Any, Tuple

from .base_model import BaseForecaster
from ..utils.config import SMOOTHING_ALPHA, SMOOTHING_BETA


class ExponentialSmoothingModel(BaseForecaster):
    """Level + trend smoothing with an undamped linear forecast."""

    name = "Exponential Smoothing"
    key = "exponential"

    def __init__(self, alpha: float = SMOOTHING_ALPHA, beta: float = SMOOTHING_BETA):
        for label, value in (('alpha', alpha), ('beta', beta)):
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{label} must be in [0, 1], got {value}")
        self.alpha = alpha
        self.beta = beta

    @property
    def min_points(self) -> int:
        return 2

    def _fit_forecast(self, prices: np.ndarray,
                      horizon: int) -> Tuple[np.ndarray, np.ndarray, Dict[str, Any]]:
        alpha, beta = self.alpha, self.beta

        level = prices[0]
        trend = prices[1] - prices[0]
        fitted = np.empty(len(prices))
        fitted[0] = prices[0]

        for i in range(1, len(prices)):
            prev_level, prev_trend = level, trend
            # One-step-ahead forecast made before seeing prices[i]
            fitted[i] = prev_level + prev_trend

            level = alpha * prices[i] + (1 - alpha) * (prev_level + prev_trend)
            trend = beta * (level - prev_level) + (1 - beta) * prev_trend

        steps = np.arange(1, horizon + 1, dtype=float)
        predictions = level + steps * trend

        return fitted, predictions, {
            'alpha': self.alpha,
            'beta': self.beta,
            'level': float(level),
            'trend': float(trend),
        }

    def __repr__(self):
        return f"ExponentialSmoothingModel(alpha={self.alpha}, beta={self.beta})"
