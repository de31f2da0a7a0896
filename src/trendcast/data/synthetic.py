"""Synthetic random-walk price history used when market data is unavailable."""

import logging
from typing import Optional

import numpy as np
import pandas as pd

from .market_data import MarketData, Quote
from ..utils.config import DEMO_DAYS, DEMO_START_PRICE

logger = logging.getLogger(__name__)


def generate_demo_data(symbol: str, days: int = DEMO_DAYS,
                       start_price: float = DEMO_START_PRICE,
                       seed: Optional[int] = None) -> MarketData:
    """
    Random walk of uniform daily moves in [-2%, +2%) starting at `start_price`.

    The result is flagged ``is_demo=True`` so callers can tell it apart from
    real market data.
    """
    logger.info("Generating %d days of demo data for %s", days, symbol)
    rng = np.random.default_rng(seed)

    moves = (rng.random(days) - 0.5) * 4 / 100
    closes = start_price * np.cumprod(1 + moves)

    end = pd.Timestamp.now().normalize()
    dates = pd.date_range(end=end - pd.Timedelta(days=1), periods=days, freq='D')

    prices = pd.DataFrame({
        'open': closes * (1 + (rng.random(days) - 0.5) * 0.01),
        'high': closes * (1 + rng.random(days) * 0.02),
        'low': closes * (1 - rng.random(days) * 0.02),
        'close': closes,
        'volume': rng.integers(0, 10_000_000, days),
    }, index=dates)
    prices.index.name = 'date'

    last = float(closes[-1])
    quote = Quote(
        symbol=symbol,
        price=last,
        change=last - start_price,
        change_percent=(last - start_price) / start_price * 100,
        name=f"{symbol} Inc.",
    )
    return MarketData(symbol=symbol, prices=prices, quote=quote, is_demo=True)
