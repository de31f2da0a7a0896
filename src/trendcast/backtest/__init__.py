"""Walk-forward evaluation of the forecasters."""

from .walkforward_backtest import WalkForwardBacktest, ModelBacktest, direction_accuracy

__all__ = ['WalkForwardBacktest', 'ModelBacktest', 'direction_accuracy']
