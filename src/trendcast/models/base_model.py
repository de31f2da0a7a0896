"""Base class for all forecasting models."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Any, Tuple
import logging

import numpy as np

from ..utils.numerics import calculate_r2, calculate_rmse

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ModelResult:
    """Standardized output of one training run of one model."""
    name: str  # Display name, e.g. "Linear Regression"
    key: str  # Short identifier, e.g. "linear"
    fitted: np.ndarray  # In-sample values, same length as the input series
    predictions: np.ndarray  # predictions[h] is the forecast for day + h + 1
    r2: float
    rmse: float
    params: Dict[str, Any] = field(default_factory=dict)

    @property
    def final_prediction(self) -> float:
        """Forecast at the full horizon."""
        return float(self.predictions[-1])

    @property
    def horizon(self) -> int:
        return len(self.predictions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'key': self.key,
            'final_prediction': self.final_prediction,
            'r2': self.r2,
            'rmse': self.rmse,
            'predictions': self.predictions.tolist(),
            'params': self.params,
        }


class BaseForecaster(ABC):
    """Base class that all forecasting models must implement."""

    name: str = ""
    key: str = ""

    @property
    @abstractmethod
    def min_points(self) -> int:
        """Smallest price history the model can be trained on."""

    @abstractmethod
    def _fit_forecast(self, prices: np.ndarray,
                      horizon: int) -> Tuple[np.ndarray, np.ndarray, Dict[str, Any]]:
        """
        Fit the model and forecast.

        Args:
            prices: Validated 1-D float array of closing prices
            horizon: Number of future steps to forecast (>= 1)

        Returns:
            (fitted, predictions, params)
        """

    def train(self, prices, horizon: int) -> ModelResult:
        """
        Train on a price history and forecast `horizon` steps ahead.

        Args:
            prices: Chronologically ascending closing prices
            horizon: Number of future days to forecast

        Returns:
            ModelResult with fitted values, forecasts and fit metrics
        """
        values = self._validate(prices, horizon)
        fitted, predictions, params = self._fit_forecast(values, horizon)

        fitted = np.asarray(fitted, dtype=float)
        predictions = np.asarray(predictions, dtype=float)
        if len(fitted) != len(values) or len(predictions) != horizon:
            raise RuntimeError(
                f"{self.name} produced {len(fitted)} fitted / {len(predictions)} forecast values "
                f"for {len(values)} prices and horizon {horizon}"
            )

        r2 = calculate_r2(values, fitted)
        rmse = calculate_rmse(values, fitted)
        logger.debug("%s trained: r2=%.4f rmse=%.4f", self.name, r2, rmse)

        return ModelResult(
            name=self.name,
            key=self.key,
            fitted=fitted,
            predictions=predictions,
            r2=r2,
            rmse=rmse,
            params=params,
        )

    def _validate(self, prices, horizon: int) -> np.ndarray:
        values = np.asarray(prices, dtype=float)
        if values.ndim != 1:
            raise ValueError(f"Expected a 1-D price series, got shape {values.shape}")
        if not np.all(np.isfinite(values)):
            raise ValueError("Price series contains NaN or infinite values")
        if len(values) < self.min_points:
            raise ValueError(
                f"{self.name} needs at least {self.min_points} prices, got {len(values)}"
            )
        if int(horizon) != horizon or horizon < 1:
            raise ValueError(f"Horizon must be a positive integer, got {horizon}")
        return values

    def __repr__(self):
        return f"{type(self).__name__}()"
