"""Sequential training of every forecaster against one price history."""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..models import BaseForecaster, ModelResult, default_models

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrainingRun:
    """Results of one training pass; a new run replaces the previous one."""
    horizon: int
    n_points: int
    results: Dict[str, ModelResult] = field(default_factory=OrderedDict)
    failures: Dict[str, str] = field(default_factory=dict)

    def successful(self) -> List[ModelResult]:
        """Results of the models that trained, in training order."""
        return list(self.results.values())

    def __getitem__(self, key: str) -> ModelResult:
        return self.results[key]

    def __contains__(self, key: str) -> bool:
        return key in self.results


class ModelTrainer:
    """
    Trains a list of forecasters one after another.

    Usage:
        trainer = ModelTrainer()
        run = trainer.train_all(closes, horizon=7)
    """

    def __init__(self, models: Optional[Sequence[BaseForecaster]] = None,
                 random_state: Optional[int] = None):
        self.models = list(models) if models is not None else default_models(random_state)
        keys = [m.key for m in self.models]
        if len(set(keys)) != len(keys):
            raise ValueError(f"Duplicate model keys: {keys}")

    def train_all(self, prices, horizon: int) -> TrainingRun:
        """
        Train every model on the same prices and horizon.

        A model that raises is recorded in ``TrainingRun.failures``; the
        remaining models still train.

        Raises:
            RuntimeError: if no model trained successfully
        """
        prices = np.asarray(prices, dtype=float)
        logger.info("Training %d models on %d prices (horizon=%d)",
                    len(self.models), len(prices), horizon)

        results: Dict[str, ModelResult] = OrderedDict()
        failures: Dict[str, str] = {}

        for model in self.models:
            logger.info("Training %s...", model.name)
            try:
                result = model.train(prices, horizon)
            except Exception as e:
                logger.warning("%s failed: %s", model.name, e)
                failures[model.key] = f"{type(e).__name__}: {e}"
                continue
            results[model.key] = result
            logger.info("✓ %s: final=%.2f r2=%.4f rmse=%.4f",
                        model.name, result.final_prediction, result.r2, result.rmse)

        if not results:
            raise RuntimeError(f"All models failed to train: {failures}")

        return TrainingRun(horizon=horizon, n_points=len(prices),
                           results=results, failures=failures)
