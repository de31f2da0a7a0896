"""Forecasting models."""

from typing import List, Optional

from .base_model import BaseForecaster, ModelResult
from .linear_model import LinearRegressionModel
from .polynomial_model import PolynomialRegressionModel
from .exponential_smoothing_model import ExponentialSmoothingModel
from .knn_model import KNNModel
from .neural_network_model import NeuralNetworkModel
from .arima_model import ARIMAModel


def default_models(random_state: Optional[int] = None) -> List[BaseForecaster]:
    """The six forecasters with default hyperparameters, in display order."""
    return [
        LinearRegressionModel(),
        PolynomialRegressionModel(),
        ExponentialSmoothingModel(),
        KNNModel(),
        NeuralNetworkModel(random_state=random_state),
        ARIMAModel(),
    ]


__all__ = [
    'BaseForecaster', 'ModelResult', 'default_models',
    'LinearRegressionModel', 'PolynomialRegressionModel',
    'ExponentialSmoothingModel', 'KNNModel',
    'NeuralNetworkModel', 'ARIMAModel'
]
