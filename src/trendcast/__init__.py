"""Multi-model trend prediction engine."""

from .models import (
    BaseForecaster, ModelResult, default_models,
    LinearRegressionModel, PolynomialRegressionModel, ExponentialSmoothingModel,
    KNNModel, NeuralNetworkModel, ARIMAModel
)
from .training import ModelTrainer, TrainingRun
from .ensemble import EnsembleResult, Signal, build_ensemble
from .data import MarketData, Quote, PriceFetcher, generate_demo_data
from .pipeline import (
    TrendPredictor, Analysis, Comparison, ComparisonRow,
    export_predictions, multi_horizon_projection, save_analysis
)

__version__ = "0.1.0"
