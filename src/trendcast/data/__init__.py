"""Market data acquisition."""

from .market_data import MarketData, Quote
from .price_fetcher import PriceFetcher
from .synthetic import generate_demo_data

__all__ = ['MarketData', 'Quote', 'PriceFetcher', 'generate_demo_data']
