"""Test price fetching, caching and the demo fallback."""

from types import SimpleNamespace

import numpy as np
import pandas as pd
import pytest

from trendcast.data import PriceFetcher, generate_demo_data
from trendcast.data.market_data import normalize_history, quote_from_history


def yahoo_frame(n=120):
    """History shaped like yfinance output: capitalized columns, tz-aware index."""
    dates = pd.date_range('2024-01-01', periods=n, freq='B', tz='America/New_York')
    closes = np.linspace(50, 80, n)
    return pd.DataFrame({
        'Open': closes,
        'High': closes * 1.01,
        'Low': closes * 0.99,
        'Close': closes,
        'Volume': np.full(n, 500_000),
        'Dividends': np.zeros(n),
    }, index=dates)


class FakeTicker:
    calls = 0

    def __init__(self, symbol):
        self.symbol = symbol
        self.fast_info = SimpleNamespace(last_price=81.0, previous_close=80.0)

    def history(self, **kwargs):
        FakeTicker.calls += 1
        return yahoo_frame()


class NoQuoteTicker(FakeTicker):
    def __init__(self, symbol):
        super().__init__(symbol)
        self.fast_info = SimpleNamespace()


class NanQuoteTicker(FakeTicker):
    def __init__(self, symbol):
        super().__init__(symbol)
        self.fast_info = SimpleNamespace(last_price=float("nan"), previous_close=80.0)


class EmptyTicker(FakeTicker):
    def history(self, **kwargs):
        return pd.DataFrame()


@pytest.fixture
def ticker(monkeypatch):
    FakeTicker.calls = 0

    def _patch(cls):
        monkeypatch.setattr("trendcast.data.price_fetcher.yf.Ticker", cls)
    return _patch


class TestNormalizeHistory:
    def test_sorts_dedupes_and_drops_missing_closes(self):
        dates = pd.to_datetime(['2024-01-03', '2024-01-01', '2024-01-02', '2024-01-02'])
        df = pd.DataFrame({
            'open': [3, 1, 2, 9],
            'high': [3, 1, 2, 9],
            'low': [3, 1, 2, 9],
            'close': [3.0, np.nan, 2.0, 9.0],
            'volume': [1, 1, 1, 1],
        }, index=dates)

        result = normalize_history(df)

        assert list(result.index) == list(pd.to_datetime(['2024-01-02', '2024-01-03']))
        assert list(result['close']) == [2.0, 3.0]

    def test_missing_columns(self):
        with pytest.raises(ValueError):
            normalize_history(pd.DataFrame({'close': [1.0]}))


def test_quote_from_history():
    df = pd.DataFrame({'close': [100.0, 105.0]})
    quote = quote_from_history('ABC', df)
    assert quote.price == 105.0
    assert quote.change == 5.0
    assert quote.change_percent == pytest.approx(5.0)


class TestDemoData:
    def test_shape_and_flag(self):
        market = generate_demo_data('DEMO', days=90, seed=1)

        assert market.is_demo
        assert len(market) == 90
        assert market.prices.index.is_monotonic_increasing
        assert market.quote.name == "DEMO Inc."
        assert market.current_price == market.closes[-1]

    def test_daily_moves_bounded(self):
        closes = generate_demo_data('DEMO', days=200, seed=2).closes
        moves = closes[1:] / closes[:-1] - 1
        assert np.all(np.abs(moves) <= 0.02)
        assert abs(closes[0] / 100.0 - 1) <= 0.02

    def test_seeded(self):
        a = generate_demo_data('DEMO', days=30, seed=5).closes
        b = generate_demo_data('DEMO', days=30, seed=5).closes
        assert np.array_equal(a, b)


class TestPriceFetcher:
    def test_fetch_history(self, ticker, tmp_path):
        ticker(FakeTicker)
        fetcher = PriceFetcher(cache_dir=tmp_path, use_cache=False)

        df = fetcher.fetch_history('abc', '3M')

        assert list(df.columns) == ['open', 'high', 'low', 'close', 'volume']
        assert len(df) == 90
        assert df.index.tz is None
        assert df['close'].iloc[-1] == pytest.approx(80.0)

    def test_unknown_period(self, tmp_path):
        fetcher = PriceFetcher(cache_dir=tmp_path, use_cache=False)
        with pytest.raises(ValueError):
            fetcher.fetch_history('ABC', '5Y')
        with pytest.raises(ValueError):
            fetcher.load('ABC', '5Y')

    def test_cache_reused(self, ticker, tmp_path):
        ticker(FakeTicker)
        fetcher = PriceFetcher(cache_dir=tmp_path, use_cache=True)

        first = fetcher.fetch_history('ABC', '3M')
        second = fetcher.fetch_history('ABC', '3M')

        assert FakeTicker.calls == 1
        assert len(list(tmp_path.glob('ABC_3M_*.csv'))) == 1
        assert np.allclose(first['close'].to_numpy(), second['close'].to_numpy())

    def test_load_real_data(self, ticker, tmp_path):
        ticker(FakeTicker)
        market = PriceFetcher(cache_dir=tmp_path, use_cache=False).load('abc', '3M')

        assert market.symbol == 'ABC'
        assert not market.is_demo
        assert market.current_price == 81.0
        assert market.quote.change_percent == pytest.approx(1.25)

    def test_load_quote_fallback(self, ticker, tmp_path):
        ticker(NoQuoteTicker)
        market = PriceFetcher(cache_dir=tmp_path, use_cache=False).load('ABC', '3M')

        assert not market.is_demo
        assert market.current_price == pytest.approx(80.0)

    def test_load_demo_fallback(self, ticker, tmp_path):
        ticker(EmptyTicker)
        market = PriceFetcher(cache_dir=tmp_path, use_cache=False, demo_seed=3).load('ABC', '1Y')

        assert market.is_demo
        assert len(market) == 252
        assert market.symbol == 'ABC'

    def test_nan_quote_rejected(self, ticker, tmp_path):
        ticker(NanQuoteTicker)
        with pytest.raises(ValueError):
            PriceFetcher(cache_dir=tmp_path, use_cache=False).fetch_quote('ABC')

    def test_load_nan_quote_uses_last_close(self, ticker, tmp_path):
        ticker(NanQuoteTicker)
        market = PriceFetcher(cache_dir=tmp_path, use_cache=False).load('ABC', '3M')

        assert not market.is_demo
        assert np.isfinite(market.current_price)
        assert market.current_price == pytest.approx(80.0)
