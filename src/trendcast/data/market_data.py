"""Containers for price history and quotes."""

from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd

from ..utils.helpers import validate_dataframe

PRICE_COLUMNS = ['open', 'high', 'low', 'close', 'volume']


@dataclass(frozen=True)
class Quote:
    """Latest quote for a symbol."""
    symbol: str
    price: float
    change: float
    change_percent: float
    name: Optional[str] = None


@dataclass(frozen=True)
class MarketData:
    """Daily bars plus the current quote for one symbol."""
    symbol: str
    prices: pd.DataFrame  # DatetimeIndex ascending; open, high, low, close, volume
    quote: Quote
    is_demo: bool = False  # True when the bars are a synthetic fallback

    @property
    def closes(self) -> np.ndarray:
        return self.prices['close'].to_numpy(dtype=float)

    @property
    def current_price(self) -> float:
        return self.quote.price

    def __len__(self):
        return len(self.prices)


def normalize_history(df: pd.DataFrame) -> pd.DataFrame:
    """Sort ascending, drop duplicate dates and rows without a close."""
    validate_dataframe(df, PRICE_COLUMNS)

    df = df[PRICE_COLUMNS].copy()
    df = df.sort_index()
    df = df[~df.index.duplicated(keep='first')]
    return df.dropna(subset=['close'])


def quote_from_history(symbol: str, df: pd.DataFrame) -> Quote:
    """Quote built from the last two closes of a history."""
    closes = df['close'].to_numpy(dtype=float)
    price = float(closes[-1])
    previous = float(closes[-2]) if len(closes) > 1 else price
    change = price - previous
    change_percent = change / previous * 100 if previous else 0.0
    return Quote(symbol=symbol, price=price, change=change, change_percent=change_percent)
