"""Fetch historical daily bars and quotes from Yahoo Finance."""

import logging
import math
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

import pandas as pd
import yfinance as yf

from .market_data import MarketData, Quote, normalize_history, quote_from_history
from .synthetic import generate_demo_data
from ..utils.config import CACHE_DIR, TRAINING_PERIODS, DEFAULT_TRAINING_PERIOD

logger = logging.getLogger(__name__)

# Calendar days requested per trading day wanted (weekends, holidays)
CALENDAR_PADDING = 1.6


class PriceFetcher:
    """Fetch and cache daily OHLCV history, falling back to demo data on failure."""

    def __init__(self, cache_dir: Optional[Path] = None, use_cache: bool = True,
                 demo_seed: Optional[int] = None):
        self.cache_dir = Path(cache_dir) if cache_dir is not None else CACHE_DIR
        self.use_cache = use_cache
        self.demo_seed = demo_seed
        if self.use_cache:
            self.cache_dir.mkdir(parents=True, exist_ok=True)

    def fetch_history(self, symbol: str, period: str = DEFAULT_TRAINING_PERIOD) -> pd.DataFrame:
        """
        Fetch the most recent daily bars for a training period.

        Args:
            symbol: Stock symbol (e.g., 'AAPL')
            period: One of the TRAINING_PERIODS keys (3M, 6M, 1Y, 2Y)

        Returns:
            DataFrame indexed by date with columns: open, high, low, close, volume

        Raises:
            ValueError: on an unknown period or when no data is returned
        """
        if period not in TRAINING_PERIODS:
            raise ValueError(f"Unknown training period {period!r}; choose from {sorted(TRAINING_PERIODS)}")
        bars = TRAINING_PERIODS[period]
        symbol = symbol.upper()

        today = datetime.now().strftime('%Y-%m-%d')
        cache_file = self.cache_dir / f"{symbol}_{period}_{today}.csv"

        # Check cache
        if self.use_cache and cache_file.exists():
            logger.info("Loading cached data for %s", symbol)
            df = pd.read_csv(cache_file, index_col=0, parse_dates=True)
            return normalize_history(df)

        start = (datetime.now() - timedelta(days=int(bars * CALENDAR_PADDING))).strftime('%Y-%m-%d')
        logger.info("Fetching %s of daily bars for %s...", period, symbol)

        ticker_obj = yf.Ticker(symbol)
        df = ticker_obj.history(start=start, auto_adjust=True)

        if df is None or df.empty:
            raise ValueError(f"No data returned for {symbol}")

        # Standardize column names
        df = df.rename(columns=str.lower)
        df.index = pd.to_datetime(df.index)
        if df.index.tz is not None:
            df.index = df.index.tz_localize(None)
        df.index.name = 'date'

        df = normalize_history(df).tail(bars)

        if self.use_cache:
            df.to_csv(cache_file)
        logger.info("✓ Fetched %d days of data for %s", len(df), symbol)
        return df

    def fetch_quote(self, symbol: str) -> Quote:
        """Latest price and change versus the previous close."""
        symbol = symbol.upper()
        info = yf.Ticker(symbol).fast_info

        price = float(info.last_price)
        previous = float(info.previous_close)
        if not (math.isfinite(price) and math.isfinite(previous)) or price <= 0:
            raise ValueError(f"Invalid quote for {symbol}: last={price}, previous={previous}")

        change = price - previous
        change_percent = change / previous * 100 if previous else 0.0
        return Quote(symbol=symbol, price=price, change=change, change_percent=change_percent)

    def load(self, symbol: str, period: str = DEFAULT_TRAINING_PERIOD) -> MarketData:
        """
        History plus quote for `symbol`.

        Any failure to obtain the history substitutes a synthetic random walk
        flagged with ``is_demo=True``. A failed quote request falls back to the
        last bar of the history.
        """
        if period not in TRAINING_PERIODS:
            raise ValueError(f"Unknown training period {period!r}; choose from {sorted(TRAINING_PERIODS)}")
        symbol = symbol.upper()

        try:
            prices = self.fetch_history(symbol, period)
        except Exception as e:
            logger.warning("Error fetching %s: %s. Using demo data as fallback", symbol, e)
            return generate_demo_data(symbol, days=TRAINING_PERIODS[period],
                                      seed=self.demo_seed)

        try:
            quote = self.fetch_quote(symbol)
        except Exception as e:
            logger.warning("Quote unavailable for %s (%s); using last close", symbol, e)
            quote = quote_from_history(symbol, prices)

        return MarketData(symbol=symbol, prices=prices, quote=quote, is_demo=False)
