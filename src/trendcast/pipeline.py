"""
Trend Prediction Session

Ties the pieces together for a UI host:
- Fetch history and quote (demo fallback when the source is down)
- Train all six forecasters
- Build the weighted ensemble and trading signal
- Optional walk-forward backtest
- Multi-horizon projection
- Multi-symbol comparison with price correlation
- CSV and JSON export
"""

import logging
from dataclasses import asdict, dataclass, replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from .backtest import WalkForwardBacktest, ModelBacktest
from .data import MarketData, PriceFetcher
from .ensemble import (
    EnsembleResult, Consensus, build_ensemble, correlation_matrix, consensus_score,
    price_correlation_matrix
)
from .models import default_models
from .training import ModelTrainer, TrainingRun
from .utils.config import (
    ForecastConfig, LOG_LEVEL, COMPARISON_HORIZON, COMPARISON_PERIOD, PROJECTION_HORIZONS,
    RISK_FREE_RATE_PCT, TRADING_DAYS_PER_YEAR, TRAINING_PERIODS
)
from .utils.helpers import annualized_volatility, save_artifact, write_report_csv

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Analysis:
    """Everything derived for one symbol, horizon and training period."""
    symbol: str
    horizon: int
    training_period: str
    market: MarketData
    training: TrainingRun
    ensemble: EnsembleResult
    consensus: Consensus
    backtest: Optional[Dict[str, ModelBacktest]] = None

    @property
    def is_demo(self) -> bool:
        return self.market.is_demo

    def summary(self) -> pd.DataFrame:
        """One row per trained model."""
        price = self.market.current_price
        rows = []
        for result in self.training.successful():
            rows.append({
                'Model': result.name,
                'Final Prediction': result.final_prediction,
                'R2': result.r2,
                'RMSE': result.rmse,
                'Change %': (result.final_prediction - price) / price * 100,
            })
        return pd.DataFrame(rows)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'symbol': self.symbol,
            'horizon': self.horizon,
            'training_period': self.training_period,
            'is_demo': self.is_demo,
            'current_price': self.market.current_price,
            'models': [r.to_dict() for r in self.training.successful()],
            'failures': dict(self.training.failures),
            'ensemble': self.ensemble.to_dict(),
            'consensus': {'score': self.consensus.score, 'label': self.consensus.label},
            'backtest': {
                key: {'mape': b.mape, 'direction_accuracy': b.direction_accuracy,
                      'periods': b.n_periods}
                for key, b in (self.backtest or {}).items()
            },
        }


@dataclass(frozen=True)
class ComparisonRow:
    symbol: str
    current_price: float
    prediction: float
    expected_return: float  # %
    volatility: float  # annualized, %
    sharpe_ratio: float
    is_demo: bool


@dataclass(frozen=True)
class Comparison:
    """Result of a multi-symbol comparison."""
    rows: List[ComparisonRow]
    correlation: pd.DataFrame  # Pearson correlation of closing prices, by symbol

    @property
    def symbols(self) -> List[str]:
        return [row.symbol for row in self.rows]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([asdict(row) for row in self.rows])



class TrendPredictor:
    """
    Session object a UI host drives.

    Usage:
        predictor = TrendPredictor()
        analysis = predictor.analyze("AAPL")
        analysis = predictor.change_horizon(30)
    """

    def __init__(self, fetcher: Optional[PriceFetcher] = None,
                 config: Optional[ForecastConfig] = None):
        self.config = (config or ForecastConfig()).validate()
        self.fetcher = fetcher or PriceFetcher(cache_dir=self.config.cache_dir,
                                               use_cache=self.config.use_cache,
                                               demo_seed=self.config.seed)
        self.current_symbol: Optional[str] = None
        self.market: Optional[MarketData] = None
        self.analysis: Optional[Analysis] = None

        logger.info("TrendPredictor initialized (horizon=%d, period=%s)",
                    self.config.horizon, self.config.training_period)

    @property
    def horizon(self) -> int:
        return self.config.horizon

    @property
    def training_period(self) -> str:
        return self.config.training_period

    def _models(self):
        return default_models(random_state=self.config.seed)

    def analyze(self, symbol: str) -> Analysis:
        """Fetch data for `symbol` and run the full analysis."""
        return self._analyze(symbol, self.config)

    def _analyze(self, symbol: str, config: ForecastConfig) -> Analysis:
        symbol = symbol.strip().upper()
        if not symbol:
            raise ValueError("Symbol must not be empty")

        logger.info("Loading %s...", symbol)
        market = self.fetcher.load(symbol, config.training_period)
        if market.is_demo:
            logger.warning("%s analysis is running on demo data", symbol)
        return self._run(market, config)

    def retrain(self) -> Analysis:
        """Re-run training on the already loaded data."""
        if self.market is None:
            raise RuntimeError("No symbol loaded; call analyze() first")
        return self._run(self.market, self.config)

    def change_horizon(self, days: int) -> Optional[Analysis]:
        """Switch forecast horizon and retrain when a symbol is loaded."""
        config = replace(self.config, horizon=days).validate()
        if self.market is None:
            self.config = config
            return None
        return self._run(self.market, config)

    def change_training_period(self, period: str) -> Optional[Analysis]:
        """Switch training window; refetches the loaded symbol."""
        config = replace(self.config, training_period=period).validate()
        if self.current_symbol is None:
            self.config = config
            return None
        return self._analyze(self.current_symbol, config)

    def _run(self, market: MarketData, config: ForecastConfig) -> Analysis:
        """Train and aggregate; session state only changes once this succeeds."""
        closes = market.closes

        training = ModelTrainer(self._models()).train_all(closes, config.horizon)
        for key, error in training.failures.items():
            logger.warning("%s excluded from ensemble: %s", key, error)

        results = training.successful()
        ensemble = build_ensemble(results, market.current_price)
        consensus = consensus_score(correlation_matrix(results))

        backtest = None
        if config.run_backtest:
            backtest = WalkForwardBacktest(
                periods=config.backtest_periods,
                test_horizon=config.backtest_horizon,
                model_factory=self._models,
            ).run(closes)

        logger.info("✓ %s: ensemble %.2f (%+.2f%%) -> %s",
                    market.symbol, ensemble.prediction, ensemble.change_percent, ensemble.signal.value)

        analysis = Analysis(
            symbol=market.symbol,
            horizon=config.horizon,
            training_period=config.training_period,
            market=market,
            training=training,
            ensemble=ensemble,
            consensus=consensus,
            backtest=backtest,
        )
        self.config = config
        self.market = market
        self.current_symbol = market.symbol
        self.analysis = analysis
        return analysis

    def compare(self, symbols: Sequence[str], horizon: int = COMPARISON_HORIZON,
                risk_free: float = RISK_FREE_RATE_PCT,
                period: str = COMPARISON_PERIOD) -> Comparison:
        """
        Expected return, volatility and Sharpe-style ratio for several symbols,
        plus the correlation of their closing prices.

        Every symbol is fetched over `period` (6M by default) regardless of
        the session's training period. Symbols that cannot be analysed are
        skipped. The session's current symbol and analysis are left untouched.
        """
        if period not in TRAINING_PERIODS:
            raise ValueError(f"Unknown training period {period!r}; choose from {sorted(TRAINING_PERIODS)}")

        rows = []
        histories = {}
        for symbol in symbols:
            try:
                market = self.fetcher.load(symbol.strip().upper(), period)
                run = ModelTrainer(self._models()).train_all(market.closes, horizon)
                ensemble = build_ensemble(run.successful(), market.current_price)
            except Exception as e:
                logger.warning("Skipping %s in comparison: %s", symbol, e)
                continue

            volatility = annualized_volatility(market.closes, TRADING_DAYS_PER_YEAR)
            expected = ensemble.change_percent
            sharpe = (expected - risk_free) / volatility if volatility else float("nan")
            rows.append(ComparisonRow(
                symbol=market.symbol,
                current_price=market.current_price,
                prediction=ensemble.prediction,
                expected_return=expected,
                volatility=volatility,
                sharpe_ratio=sharpe,
                is_demo=market.is_demo,
            ))
            histories[market.symbol] = market.prices['close']

        if len(rows) < 2:
            logger.warning("Only %d of %d symbols could be compared", len(rows), len(symbols))

        return Comparison(rows=rows, correlation=price_correlation_matrix(histories))


def multi_horizon_projection(analysis: Analysis,
                             horizons: Sequence[int] = PROJECTION_HORIZONS) -> pd.Series:
    """
    Average model projection at several horizons.

    Each model's move from the last close to its final prediction is scaled
    linearly by ``h / analysis.horizon``; the projection for ``h`` is the
    unweighted mean over the trained models.
    """
    last_close = float(analysis.market.closes[-1])
    moves = np.array([r.final_prediction - last_close for r in analysis.training.successful()])
    projection = {h: last_close + float(moves.mean()) * h / analysis.horizon for h in horizons}
    return pd.Series(projection, name='projection', dtype=float)


def export_predictions(analysis: Analysis, filepath: str):
    """Write a CSV summary of an analysis."""
    header = {
        'Stock Symbol': analysis.symbol,
        'Export Date': datetime.now().isoformat(timespec='seconds'),
        'Current Price': analysis.market.current_price,
        'Prediction Horizon': f"{analysis.horizon} days",
        'Demo Data': analysis.is_demo,
    }
    write_report_csv(filepath, header, analysis.summary())
    logger.info("✓ Exported predictions for %s to %s", analysis.symbol, filepath)


def save_analysis(analysis: Analysis, filepath: str):
    """Write the full analysis, including every forecast path, as JSON."""
    save_artifact(analysis.to_dict(), filepath, format='json')
    logger.info("✓ Saved analysis for %s to %s", analysis.symbol, filepath)
