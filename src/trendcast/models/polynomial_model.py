"""Polynomial trend regression solved through the normal equations."""

import numpy as np
from typing import Dict, Any, Tuple

from .base_model import BaseForecaster
from ..utils.config import POLYNOMIAL_DEGREE
from ..utils.numerics import solve_linear_system


class PolynomialRegressionModel(BaseForecaster):
    """
    Fits ``sum(c_d * t**d)`` for d in 0..degree on the raw day index.

    Extrapolating a cubic beyond the training range diverges quickly on long
    horizons. The ensemble weights by R^2, so no damping is applied here.
    """

    name = "Polynomial Regression"
    key = "polynomial"

    def __init__(self, degree: int = POLYNOMIAL_DEGREE):
        if degree < 1:
            raise ValueError(f"Polynomial degree must be >= 1, got {degree}")
        self.degree = degree

    @property
    def min_points(self) -> int:
        return self.degree + 1

    def _design_matrix(self, x: np.ndarray) -> np.ndarray:
        return np.column_stack([x ** d for d in range(self.degree + 1)])

    def _fit_forecast(self, prices: np.ndarray,
                      horizon: int) -> Tuple[np.ndarray, np.ndarray, Dict[str, Any]]:
        n = len(prices)
        x = np.arange(n, dtype=float)

        coefficients = solve_linear_system(self._design_matrix(x), prices)

        fitted = self._design_matrix(x) @ coefficients
        future_x = np.arange(n, n + horizon, dtype=float)
        predictions = self._design_matrix(future_x) @ coefficients

        return fitted, predictions, {
            'coefficients': coefficients.tolist(),
            'degree': self.degree,
        }

    def __repr__(self):
        return f"PolynomialRegressionModel(degree={self.degree})"
