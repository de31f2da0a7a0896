"""Helper functions for series validation and exporting results."""

import json
from pathlib import Path
from typing import Any, Dict, Iterable

import numpy as np
import pandas as pd


def validate_dataframe(df: pd.DataFrame, required_columns: list) -> bool:
    """Validate dataframe has required columns."""
    missing = set(required_columns) - set(df.columns)
    if missing:
        raise ValueError(f"Missing columns: {missing}")
    return True


def daily_returns(prices: Iterable[float]) -> np.ndarray:
    """Simple returns ``p[i] / p[i-1] - 1``."""
    prices = np.asarray(list(prices), dtype=float)
    return prices[1:] / prices[:-1] - 1


def annualized_volatility(prices: Iterable[float], periods_per_year: int = 252) -> float:
    """Root-mean-square of daily returns scaled to a year, in percent."""
    returns = daily_returns(prices)
    if len(returns) == 0:
        return float("nan")
    return float(np.sqrt(np.mean(returns ** 2)) * np.sqrt(periods_per_year) * 100)


def save_artifact(data: Any, filepath: str, format: str = 'json'):
    """Save data artifact in specified format."""
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    if format == 'csv':
        if isinstance(data, pd.DataFrame):
            data.to_csv(path, index=True)
        else:
            raise ValueError("CSV format only supports DataFrames")
    elif format == 'json':
        with open(path, 'w') as f:
            json.dump(data, f, indent=2, default=_json_default)
    else:
        raise ValueError(f"Unknown format: {format}")


def load_artifact(filepath: str, format: str = 'json'):
    """Load data artifact from specified format."""
    path = Path(filepath)

    if not path.exists():
        raise FileNotFoundError(f"Artifact not found: {filepath}")

    if format == 'csv':
        return pd.read_csv(path, index_col=0)
    elif format == 'json':
        with open(path, 'r') as f:
            return json.load(f)
    else:
        raise ValueError(f"Unknown format: {format}")


def write_report_csv(filepath: str, header: Dict[str, Any], table: pd.DataFrame):
    """Write ``key,value`` header lines, a blank line, then `table` as CSV."""
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', newline='') as f:
        for key, value in header.items():
            f.write(f"{key},{value}\n")
        f.write("\n")
        table.to_csv(f, index=False, float_format='%.4f')


def _json_default(value):
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    return str(value)
