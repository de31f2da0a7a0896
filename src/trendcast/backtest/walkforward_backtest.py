"""Walk-forward backtesting of the forecasters on their own price history."""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np
from sklearn.metrics import mean_absolute_percentage_error
from tqdm import tqdm

from ..models import BaseForecaster
from ..training import ModelTrainer
from ..utils.config import BACKTEST_PERIODS, BACKTEST_HORIZON, BACKTEST_MIN_TRAIN_POINTS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelBacktest:
    """Out-of-sample record of one model across backtest periods."""
    key: str
    name: str
    predictions: List[float] = field(default_factory=list)
    actuals: List[float] = field(default_factory=list)
    mape: float = float("nan")  # Mean absolute percentage error (%)
    direction_accuracy: float = float("nan")  # % of period-to-period moves called correctly

    @property
    def n_periods(self) -> int:
        return len(self.predictions)


def direction_accuracy(predictions: Sequence[float], actuals: Sequence[float]) -> float:
    """
    Share (%) of consecutive periods where the predicted move direction
    matches the realised one. NaN with fewer than two periods.
    """
    predictions = np.asarray(predictions, dtype=float)
    actuals = np.asarray(actuals, dtype=float)
    if len(predictions) < 2:
        return float("nan")
    predicted_up = predictions[1:] > predictions[:-1]
    actual_up = actuals[1:] > actuals[:-1]
    return float(np.mean(predicted_up == actual_up) * 100)


class WalkForwardBacktest:
    """
    Re-trains every model on expanding history slices and scores the
    forecast at the end of each following test window.

    Usage:
        backtest = WalkForwardBacktest()
        report = backtest.run(closes)
    """

    def __init__(self, periods: int = BACKTEST_PERIODS,
                 test_horizon: int = BACKTEST_HORIZON,
                 min_train_points: int = BACKTEST_MIN_TRAIN_POINTS,
                 model_factory: Optional[Callable[[], Sequence[BaseForecaster]]] = None,
                 show_progress: bool = False):
        if periods < 1 or test_horizon < 1:
            raise ValueError("periods and test_horizon must be >= 1")
        self.periods = periods
        self.test_horizon = test_horizon
        self.min_train_points = min_train_points
        self.model_factory = model_factory
        self.show_progress = show_progress

    def split_points(self, n: int) -> List[int]:
        """End index (exclusive) of each usable training slice."""
        ends = []
        for period in range(self.periods):
            end = n - (self.periods - period) * self.test_horizon
            if end < self.min_train_points:
                continue
            if end + self.test_horizon > n:
                continue
            ends.append(end)
        return ends

    def run(self, prices) -> Dict[str, ModelBacktest]:
        """
        Run the backtest.

        Args:
            prices: Chronologically ascending closing prices

        Returns:
            Dictionary of model key -> ModelBacktest; empty when the history
            is too short for any period
        """
        prices = np.asarray(prices, dtype=float)
        ends = self.split_points(len(prices))
        if not ends:
            logger.warning("History of %d prices too short for backtesting", len(prices))
            return {}

        names: Dict[str, str] = {}
        predictions: Dict[str, List[float]] = {}
        actuals: Dict[str, List[float]] = {}

        for end in tqdm(ends, desc="Backtesting", disable=not self.show_progress):
            models = self.model_factory() if self.model_factory else None
            trainer = ModelTrainer(models)
            actual = float(prices[end + self.test_horizon - 1])

            try:
                run = trainer.train_all(prices[:end], self.test_horizon)
            except RuntimeError as e:
                logger.warning("Backtest period ending at %d failed: %s", end, e)
                continue

            for key, result in run.results.items():
                names[key] = result.name
                predictions.setdefault(key, []).append(result.final_prediction)
                actuals.setdefault(key, []).append(actual)

        report = {}
        for key, preds in predictions.items():
            acts = actuals[key]
            report[key] = ModelBacktest(
                key=key,
                name=names[key],
                predictions=preds,
                actuals=acts,
                mape=float(mean_absolute_percentage_error(acts, preds) * 100),
                direction_accuracy=direction_accuracy(preds, acts),
            )
            logger.info("%s backtest: MAPE=%.2f%% direction=%.1f%% over %d periods",
                        names[key], report[key].mape, report[key].direction_accuracy, len(preds))

        return report
