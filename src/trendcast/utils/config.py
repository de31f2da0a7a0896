"""Configuration management for the trend prediction engine."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
ENV_FILE = PROJECT_ROOT / "keys.env"

if ENV_FILE.exists():
    load_dotenv(ENV_FILE)
else:
    # Try loading from current directory or parent
    load_dotenv()

# Paths
DATA_DIR = PROJECT_ROOT / "data"
CACHE_DIR = Path(os.getenv("TRENDCAST_CACHE_DIR", str(DATA_DIR / "raw" / "prices")))

# Logging
LOG_LEVEL = os.getenv("TRENDCAST_LOG_LEVEL", "INFO").upper()


def _env_seed() -> Optional[int]:
    raw = os.getenv("TRENDCAST_SEED", "").strip()
    return int(raw) if raw else None


SEED = _env_seed()

# Forecast horizons offered to the user (days)
HORIZON_CHOICES = (7, 14, 30, 60)
DEFAULT_HORIZON = 7

# Training windows: period key -> number of daily bars
TRAINING_PERIODS = {
    "3M": 90,
    "6M": 180,
    "1Y": 252,
    "2Y": 504,
}
DEFAULT_TRAINING_PERIOD = "6M"

# Model hyperparameters
POLYNOMIAL_DEGREE = 3
SMOOTHING_ALPHA = 0.3
SMOOTHING_BETA = 0.1
KNN_NEIGHBORS = 5
KNN_LOOKBACK = 5
NN_LOOKBACK = 10
NN_HIDDEN_SIZE = 10
NN_EPOCHS = 100
NN_LEARNING_RATE = 0.01
ARIMA_ORDER = (5, 1, 2)  # (p, d, q); q is carried but unused

# Ensemble
INTERVAL_Z = 1.96
STRONG_SIGNAL_PCT = 5.0
SIGNAL_PCT = 2.0
LOW_SPREAD_PCT = 3.0
HIGH_SPREAD_PCT = 7.0

# Multi-horizon projection (days)
PROJECTION_HORIZONS = (7, 15, 30, 60)

# Backtesting
BACKTEST_PERIODS = 10
BACKTEST_HORIZON = 7
BACKTEST_MIN_TRAIN_POINTS = 50

# Demo data
DEMO_DAYS = 365
DEMO_START_PRICE = 100.0

# Multi-symbol comparison
COMPARISON_HORIZON = 30
COMPARISON_PERIOD = "6M"
RISK_FREE_RATE_PCT = 4.5
TRADING_DAYS_PER_YEAR = 252


@dataclass
class ForecastConfig:
    # Reproducibility
    seed: Optional[int] = SEED

    # Forecast
    horizon: int = DEFAULT_HORIZON
    training_period: str = DEFAULT_TRAINING_PERIOD

    # Backtest
    run_backtest: bool = True
    backtest_periods: int = BACKTEST_PERIODS
    backtest_horizon: int = BACKTEST_HORIZON

    # Data
    use_cache: bool = True
    cache_dir: Path = CACHE_DIR

    def validate(self):
        if self.horizon not in HORIZON_CHOICES:
            raise ValueError(f"Unsupported horizon {self.horizon}; choose from {HORIZON_CHOICES}")
        if self.training_period not in TRAINING_PERIODS:
            raise ValueError(
                f"Unsupported training period {self.training_period!r}; "
                f"choose from {sorted(TRAINING_PERIODS)}"
            )
        return self

