"""R^2-weighted ensemble of model forecasts with a spread-based interval and trading signal."""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Sequence, Tuple

import numpy as np

from ..models.base_model import ModelResult
from ..utils.config import (
    INTERVAL_Z, STRONG_SIGNAL_PCT, SIGNAL_PCT, LOW_SPREAD_PCT, HIGH_SPREAD_PCT
)

logger = logging.getLogger(__name__)


class Signal(str, Enum):
    """Trading signal derived from the ensemble's expected move."""
    STRONG_BUY = "STRONG BUY"
    BUY = "BUY"
    HOLD = "HOLD"
    SELL = "SELL"
    STRONG_SELL = "STRONG SELL"


SIGNAL_STRENGTH = {
    Signal.STRONG_BUY: "High Confidence",
    Signal.BUY: "Good Confidence",
    Signal.HOLD: "Moderate",
    Signal.SELL: "Good Confidence",
    Signal.STRONG_SELL: "High Confidence",
}


class SpreadBand(str, Enum):
    """How much the individual forecasts disagree."""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


@dataclass(frozen=True)
class EnsembleResult:
    """Consensus forecast derived from a collection of ModelResults."""
    prediction: float
    lower: float
    upper: float
    mean: float
    std: float
    average_r2: float
    current_price: float
    change: float
    change_percent: float
    signal: Signal
    strength: str
    spread: float  # Coefficient of variation of the final predictions (%)
    spread_band: SpreadBand
    recommendation: str
    weights: Dict[str, float] = field(default_factory=dict)
    weighted: bool = True  # False when every weight was zero
    model_count: int = 0
    bullish_count: int = 0
    best_model: str = ""

    @property
    def interval(self) -> Tuple[float, float]:
        return self.lower, self.upper

    def to_dict(self) -> Dict:
        return {
            'prediction': self.prediction,
            'lower': self.lower,
            'upper': self.upper,
            'average_r2': self.average_r2,
            'change': self.change,
            'change_percent': self.change_percent,
            'signal': self.signal.value,
            'strength': self.strength,
            'spread': self.spread,
            'spread_band': self.spread_band.value,
            'recommendation': self.recommendation,
            'weights': dict(self.weights),
            'weighted': self.weighted,
            'bullish_count': self.bullish_count,
            'model_count': self.model_count,
            'best_model': self.best_model,
        }


def model_weight(r2: float) -> float:
    """``max(0, r2)``; a non-finite R^2 carries no weight."""
    if r2 is None or not math.isfinite(r2):
        return 0.0
    return max(0.0, float(r2))


def weighted_prediction(results: Sequence[ModelResult]) -> Tuple[float, Dict[str, float], bool]:
    """
    Weighted average of final predictions, weights = max(0, R^2).

    Returns:
        (prediction, weights by model key, weighted). When all weights are
        zero the unweighted mean is returned with ``weighted=False``.
    """
    if not results:
        raise ValueError("Cannot build an ensemble from zero model results")

    weights = {r.key: model_weight(r.r2) for r in results}
    finals = np.array([r.final_prediction for r in results])
    w = np.array([weights[r.key] for r in results])

    total = w.sum()
    if total == 0.0:
        logger.warning("Every model has non-positive R^2; using the unweighted mean")
        return float(finals.mean()), weights, False

    return float(np.dot(finals, w) / total), weights, True


def classify_signal(change_percent: float) -> Signal:
    """Map the expected % move to a signal; thresholds are inclusive."""
    if change_percent >= STRONG_SIGNAL_PCT:
        return Signal.STRONG_BUY
    if change_percent >= SIGNAL_PCT:
        return Signal.BUY
    if change_percent <= -STRONG_SIGNAL_PCT:
        return Signal.STRONG_SELL
    if change_percent <= -SIGNAL_PCT:
        return Signal.SELL
    return Signal.HOLD


def prediction_spread(final_predictions: Sequence[float]) -> float:
    """Coefficient of variation (population std / mean) as a percentage."""
    finals = np.asarray(final_predictions, dtype=float)
    mean = finals.mean()
    if mean == 0.0:
        return float("inf")
    return float(finals.std() / mean * 100)


def classify_spread(spread: float) -> SpreadBand:
    if spread < LOW_SPREAD_PCT:
        return SpreadBand.LOW
    if spread < HIGH_SPREAD_PCT:
        return SpreadBand.MODERATE
    return SpreadBand.HIGH


def risk_recommendation(change_percent: float, spread: float) -> str:
    band = classify_spread(spread)
    if band is SpreadBand.LOW:
        if abs(change_percent) > STRONG_SIGNAL_PCT:
            return "Strong consensus among models. Consider acting on this signal."
        return "Low volatility expected. Safe to maintain current position."
    if band is SpreadBand.MODERATE:
        return "Moderate disagreement between models. Consider waiting for clearer signals."
    return "High variance in predictions. Exercise caution and consider additional research."


def _best_model(results: Sequence[ModelResult]) -> str:
    scored = [r for r in results if math.isfinite(r.r2)]
    if not scored:
        return ""
    return max(scored, key=lambda r: r.r2).name


def build_ensemble(results: Sequence[ModelResult], current_price: float) -> EnsembleResult:
    """
    Combine model results into a consensus forecast.

    Args:
        results: Successfully trained model results
        current_price: Latest quoted price the signal is measured against

    Returns:
        EnsembleResult
    """
    results = list(results)
    if not results:
        raise ValueError("Cannot build an ensemble from zero model results")
    if current_price is None or not math.isfinite(current_price) or current_price == 0:
        raise ValueError(f"Current price must be finite and non-zero, got {current_price}")

    prediction, weights, weighted = weighted_prediction(results)

    finals = np.array([r.final_prediction for r in results])
    mean = float(finals.mean())
    std = float(finals.std())  # population std across models

    finite_r2 = [r.r2 for r in results if math.isfinite(r.r2)]
    average_r2 = float(np.mean(finite_r2)) if finite_r2 else float("nan")

    change = prediction - current_price
    change_percent = change / current_price * 100
    signal = classify_signal(change_percent)

    spread = prediction_spread(finals)

    return EnsembleResult(
        prediction=prediction,
        lower=mean - INTERVAL_Z * std,
        upper=mean + INTERVAL_Z * std,
        mean=mean,
        std=std,
        average_r2=average_r2,
        current_price=float(current_price),
        change=float(change),
        change_percent=float(change_percent),
        signal=signal,
        strength=SIGNAL_STRENGTH[signal],
        spread=spread,
        spread_band=classify_spread(spread),
        recommendation=risk_recommendation(change_percent, spread),
        weights=weights,
        weighted=weighted,
        model_count=len(results),
        bullish_count=int(np.sum(finals > current_price)),
        best_model=_best_model(results),
    )
