"""Single-hidden-layer feed-forward network trained by per-sample gradient steps."""

import numpy as np
from typing import Dict, Any, Optional, Tuple

from .base_model import BaseForecaster
from .windowing import build_windows, recursive_forecast
from ..utils.config import NN_LOOKBACK, NN_HIDDEN_SIZE, NN_EPOCHS, NN_LEARNING_RATE


def relu(x: np.ndarray) -> np.ndarray:
    return np.maximum(0.0, x)


class NeuralNetworkModel(BaseForecaster):
    """
    Window of `lookback` min-max normalized prices -> ReLU hidden layer ->
    linear output.

    By default only the hidden->output weights and the output bias are
    updated during training; the input->hidden weights and hidden biases keep
    their random initialization. Pass ``full_backprop=True`` to also train the
    hidden layer.
    """

    name = "Neural Network"
    key = "neural"

    def __init__(self, lookback: int = NN_LOOKBACK, hidden_size: int = NN_HIDDEN_SIZE,
                 epochs: int = NN_EPOCHS, learning_rate: float = NN_LEARNING_RATE,
                 full_backprop: bool = False, random_state: Optional[int] = None):
        if lookback < 1 or hidden_size < 1 or epochs < 0:
            raise ValueError("lookback and hidden_size must be >= 1 and epochs >= 0")
        self.lookback = lookback
        self.hidden_size = hidden_size
        self.epochs = epochs
        self.learning_rate = learning_rate
        self.full_backprop = full_backprop
        self.random_state = random_state

        # Set by each training run
        self.weights_input_hidden = None
        self.bias_hidden = None
        self.weights_hidden_output = None
        self.bias_output = 0.0

    @property
    def min_points(self) -> int:
        return self.lookback + 1

    def _init_weights(self):
        rng = np.random.default_rng(self.random_state)
        self.weights_input_hidden = (rng.random((self.hidden_size, self.lookback)) - 0.5) * 0.5
        self.weights_hidden_output = (rng.random(self.hidden_size) - 0.5) * 0.5
        self.bias_hidden = (rng.random(self.hidden_size) - 0.5) * 0.5
        self.bias_output = float(rng.random() - 0.5)

    def _hidden(self, window: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        pre_activation = self.weights_input_hidden @ window + self.bias_hidden
        return pre_activation, relu(pre_activation)

    def forward(self, window: np.ndarray) -> float:
        """Network output for one normalized window."""
        _, hidden = self._hidden(window)
        return float(np.dot(hidden, self.weights_hidden_output) + self.bias_output)

    def _train_step(self, window: np.ndarray, target: float):
        pre_activation, hidden = self._hidden(window)
        output = float(np.dot(hidden, self.weights_hidden_output) + self.bias_output)
        error = output - target
        lr = self.learning_rate

        if self.full_backprop:
            hidden_delta = error * self.weights_hidden_output * (pre_activation > 0)
            self.weights_input_hidden -= lr * np.outer(hidden_delta, window)
            self.bias_hidden -= lr * hidden_delta

        self.weights_hidden_output -= lr * error * hidden
        self.bias_output -= lr * error

    def _fit_forecast(self, prices: np.ndarray,
                      horizon: int) -> Tuple[np.ndarray, np.ndarray, Dict[str, Any]]:
        min_price = float(prices.min())
        span = float(prices.max()) - min_price
        if span == 0.0:
            span = 1.0
        normalized = (prices - min_price) / span

        windows, targets = build_windows(normalized, self.lookback)

        self._init_weights()
        for _ in range(self.epochs):
            for window, target in zip(windows, targets):
                self._train_step(window, target)

        fitted = prices.copy()
        for i in range(self.lookback, len(prices)):
            fitted[i] = self.forward(normalized[i - self.lookback:i]) * span + min_price

        normalized_forecast = recursive_forecast(normalized[-self.lookback:], horizon, self.forward)
        predictions = normalized_forecast * span + min_price

        return fitted, predictions, {
            'lookback': self.lookback,
            'hidden_size': self.hidden_size,
            'epochs': self.epochs,
            'learning_rate': self.learning_rate,
            'full_backprop': self.full_backprop,
        }

    def __repr__(self):
        return (f"NeuralNetworkModel(lookback={self.lookback}, hidden_size={self.hidden_size}, "
                f"epochs={self.epochs}, full_backprop={self.full_backprop})")
