"""Ensemble aggregation of model forecasts."""

from .weighted_ensemble import (
    EnsembleResult, Signal, SpreadBand, build_ensemble, classify_signal,
    classify_spread, prediction_spread, weighted_prediction
)
from .consensus import (
    Consensus, correlation_matrix, consensus_score, pearson_matrix, price_correlation_matrix
)

__all__ = [
    'EnsembleResult', 'Signal', 'SpreadBand', 'build_ensemble',
    'classify_signal', 'classify_spread', 'prediction_spread', 'weighted_prediction',
    'Consensus', 'correlation_matrix', 'consensus_score',
    'pearson_matrix', 'price_correlation_matrix'
]
