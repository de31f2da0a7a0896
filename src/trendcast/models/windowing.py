"""Sliding-window helpers for the window-based forecasters (KNN, neural network)."""

from typing import Callable, Optional, Tuple

import numpy as np


def build_windows(values: np.ndarray, lookback: int,
                  stop: Optional[int] = None) -> Tuple[np.ndarray, np.ndarray]:
    """
    Build supervised pairs ``values[i-lookback:i] -> values[i]``.

    Args:
        values: 1-D series
        lookback: Window length
        stop: Exclusive upper bound for the target index (defaults to len(values))

    Returns:
        (X, y) with X of shape (n_pairs, lookback)
    """
    values = np.asarray(values, dtype=float)
    stop = len(values) if stop is None else stop
    targets = range(lookback, stop)

    X = np.array([values[i - lookback:i] for i in targets]).reshape(-1, lookback)
    y = np.array([values[i] for i in targets], dtype=float)
    return X, y


def roll_window(window: np.ndarray, value: float) -> np.ndarray:
    """Drop the oldest value and append `value`."""
    return np.append(np.asarray(window, dtype=float)[1:], value)


def recursive_forecast(window: np.ndarray, horizon: int,
                       step: Callable[[np.ndarray], float]) -> np.ndarray:
    """
    Multi-step forecast by feeding each prediction back into the window.

    Args:
        window: Most recent `lookback` values
        horizon: Number of steps to produce
        step: One-step predictor taking a window and returning the next value

    Returns:
        Array of `horizon` predictions
    """
    current = np.asarray(window, dtype=float)
    predictions = np.empty(horizon)
    for h in range(horizon):
        prediction = float(step(current))
        predictions[h] = prediction
        current = roll_window(current, prediction)
    return predictions
