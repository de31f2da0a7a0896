"""Shared fixtures."""

import numpy as np
import pandas as pd
import pytest

from trendcast.data import MarketData, Quote
from trendcast.models import ModelResult


@pytest.fixture
def linear_prices():
    """180 strictly increasing prices: 100 + 0.5 * i."""
    return 100 + 0.5 * np.arange(180, dtype=float)


@pytest.fixture
def noisy_prices():
    """Seeded random walk with drift."""
    rng = np.random.default_rng(11)
    returns = rng.normal(0.0005, 0.015, 150)
    return 100 * np.cumprod(1 + returns)


@pytest.fixture
def make_market():
    def _make(symbol, closes, is_demo=False):
        closes = np.asarray(closes, dtype=float)
        dates = pd.date_range('2024-01-01', periods=len(closes), freq='D')
        prices = pd.DataFrame({
            'open': closes,
            'high': closes * 1.01,
            'low': closes * 0.99,
            'close': closes,
            'volume': np.full(len(closes), 1_000_000),
        }, index=dates)
        quote = Quote(symbol=symbol, price=float(closes[-1]), change=0.0, change_percent=0.0)
        return MarketData(symbol=symbol, prices=prices, quote=quote, is_demo=is_demo)
    return _make


@pytest.fixture
def make_result():
    """ModelResult whose forecast path ends at `final_prediction`."""
    def _make(key, final_prediction, r2, predictions=None):
        if predictions is None:
            predictions = [final_prediction]
        return ModelResult(
            name=key.title(),
            key=key,
            fitted=np.zeros(3),
            predictions=np.asarray(predictions, dtype=float),
            r2=r2,
            rmse=0.0,
        )
    return _make
