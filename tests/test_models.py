"""Test the six forecasters."""

import numpy as np
import pytest

from trendcast.models import (
    default_models, LinearRegressionModel, PolynomialRegressionModel,
    ExponentialSmoothingModel, KNNModel, NeuralNetworkModel, ARIMAModel
)
from trendcast.models.arima_model import difference, estimate_ar_coefficients
from trendcast.models.windowing import build_windows, roll_window, recursive_forecast


class TestWindowing:
    def test_build_windows(self):
        X, y = build_windows(np.arange(6, dtype=float), lookback=3)
        assert X.shape == (3, 3)
        assert np.array_equal(X[0], [0, 1, 2])
        assert np.array_equal(y, [3, 4, 5])

    def test_build_windows_stop(self):
        X, y = build_windows(np.arange(6, dtype=float), lookback=3, stop=5)
        assert len(X) == 2
        assert np.array_equal(y, [3, 4])

    def test_roll_window(self):
        assert np.array_equal(roll_window([1, 2, 3], 9), [2, 3, 9])

    def test_recursive_forecast_feeds_predictions_back(self):
        predictions = recursive_forecast([1, 2, 3], 3, lambda w: w[-1] + 1)
        assert np.array_equal(predictions, [4, 5, 6])


@pytest.mark.parametrize("model", default_models(random_state=0), ids=lambda m: m.key)
def test_output_shapes(model, noisy_prices):
    """Every model returns one fitted value per price and one forecast per day."""
    result = model.train(noisy_prices, horizon=14)

    assert result.key == model.key
    assert len(result.fitted) == len(noisy_prices)
    assert len(result.predictions) == 14
    assert result.horizon == 14
    assert result.final_prediction == result.predictions[-1]
    assert np.all(np.isfinite(result.predictions))
    assert result.rmse >= 0


@pytest.mark.parametrize("model", default_models(random_state=0), ids=lambda m: m.key)
def test_deterministic(model, noisy_prices):
    first = model.train(noisy_prices, horizon=7)
    second = model.train(noisy_prices, horizon=7)
    assert np.array_equal(first.predictions, second.predictions)
    assert np.array_equal(first.fitted, second.fitted)


class TestValidation:
    def test_too_few_prices(self):
        with pytest.raises(ValueError):
            KNNModel(k=5, lookback=5).train(np.arange(10, dtype=float), horizon=7)

    def test_nan_prices(self):
        with pytest.raises(ValueError):
            LinearRegressionModel().train([1.0, np.nan, 3.0], horizon=1)

    def test_two_dimensional_prices(self):
        with pytest.raises(ValueError):
            LinearRegressionModel().train(np.ones((5, 2)), horizon=1)

    @pytest.mark.parametrize("horizon", [0, -3, 1.5])
    def test_invalid_horizon(self, horizon, linear_prices):
        with pytest.raises(ValueError):
            LinearRegressionModel().train(linear_prices, horizon=horizon)

    def test_invalid_hyperparameters(self):
        with pytest.raises(ValueError):
            ExponentialSmoothingModel(alpha=1.5)
        with pytest.raises(ValueError):
            PolynomialRegressionModel(degree=0)
        with pytest.raises(ValueError):
            ARIMAModel(p=0)


class TestLinearRegression:
    def test_exact_line(self, linear_prices):
        result = LinearRegressionModel().train(linear_prices, horizon=7)

        assert result.params['slope'] == pytest.approx(0.5)
        assert result.params['intercept'] == pytest.approx(100.0)
        assert result.r2 == pytest.approx(1.0)
        assert result.rmse == pytest.approx(0.0, abs=1e-9)
        # Last index is 179; day 7 ahead is index 186
        assert result.final_prediction == pytest.approx(193.0)
        assert result.predictions[0] == pytest.approx(190.0)

    def test_constant_series(self):
        result = LinearRegressionModel().train(np.full(20, 42.0), horizon=3)
        assert result.params['slope'] == 0.0
        assert np.allclose(result.predictions, 42.0)


class TestPolynomialRegression:
    def test_recovers_quadratic(self):
        x = np.arange(30, dtype=float)
        prices = 50 + 0.2 * x + 0.01 * x ** 2

        result = PolynomialRegressionModel(degree=3).train(prices, horizon=5)

        future = np.arange(30, 35, dtype=float)
        assert np.allclose(result.predictions, 50 + 0.2 * future + 0.01 * future ** 2, rtol=1e-6)
        assert result.r2 == pytest.approx(1.0)
        assert len(result.params['coefficients']) == 4

    def test_needs_degree_plus_one_prices(self):
        model = PolynomialRegressionModel(degree=3)
        assert model.min_points == 4
        with pytest.raises(ValueError):
            model.train([1.0, 2.0, 3.0], horizon=1)


class TestExponentialSmoothing:
    def test_holt_recurrence(self):
        result = ExponentialSmoothingModel(alpha=0.3, beta=0.1).train([10.0, 12.0, 13.0], horizon=2)

        assert np.allclose(result.fitted, [10.0, 12.0, 14.0])
        assert result.params['level'] == pytest.approx(13.7)
        assert result.params['trend'] == pytest.approx(1.97)
        assert np.allclose(result.predictions, [15.67, 17.64])

    def test_forecast_is_linear(self, noisy_prices):
        predictions = ExponentialSmoothingModel().train(noisy_prices, horizon=10).predictions
        steps = np.diff(predictions)
        assert np.allclose(steps, steps[0])


class TestKNN:
    def test_exact_match_neighbor(self):
        prices = [1, 2, 3, 4, 5, 6, 20, 30, 40, 1, 2, 3, 4, 5]
        result = KNNModel(k=1, lookback=5).train(prices, horizon=1)
        assert result.predictions[0] == pytest.approx(6.0)

    def test_first_fitted_values_are_prices(self, noisy_prices):
        result = KNNModel(k=3, lookback=5).train(noisy_prices, horizon=3)
        assert np.array_equal(result.fitted[:5], noisy_prices[:5])

    def test_prediction_is_mean_of_neighbors(self):
        windows = np.array([[0.0, 0.0], [1.0, 1.0], [10.0, 10.0]])
        targets = np.array([2.0, 4.0, 100.0])
        assert KNNModel(k=2, lookback=2).predict_next(np.array([0.5, 0.5]), windows, targets) == 3.0

    def test_forecast_stays_within_target_range(self, noisy_prices):
        result = KNNModel().train(noisy_prices, horizon=20)
        assert result.predictions.min() >= noisy_prices.min()
        assert result.predictions.max() <= noisy_prices.max()


class TestNeuralNetwork:
    def test_seeded_runs_match(self, noisy_prices):
        a = NeuralNetworkModel(epochs=10, random_state=7).train(noisy_prices, horizon=5)
        b = NeuralNetworkModel(epochs=10, random_state=7).train(noisy_prices, horizon=5)
        assert np.array_equal(a.predictions, b.predictions)

    def test_partial_backprop_keeps_hidden_layer(self, noisy_prices):
        model = NeuralNetworkModel(epochs=5, random_state=3)
        model.train(noisy_prices, horizon=1)

        rng = np.random.default_rng(3)
        initial = (rng.random((model.hidden_size, model.lookback)) - 0.5) * 0.5
        assert np.array_equal(model.weights_input_hidden, initial)

    def test_full_backprop_updates_hidden_layer(self, noisy_prices):
        model = NeuralNetworkModel(epochs=5, full_backprop=True, random_state=3)
        model.train(noisy_prices, horizon=1)

        rng = np.random.default_rng(3)
        initial = (rng.random((model.hidden_size, model.lookback)) - 0.5) * 0.5
        assert not np.array_equal(model.weights_input_hidden, initial)

    def test_constant_series(self):
        result = NeuralNetworkModel(epochs=5, random_state=1).train(np.full(30, 50.0), horizon=3)
        assert np.all(np.isfinite(result.predictions))
        assert np.array_equal(result.fitted[:10], np.full(10, 50.0))


class TestARIMA:
    def test_difference(self):
        assert np.array_equal(difference([1, 4, 9, 16], 1), [3, 5, 7])
        assert np.array_equal(difference([1, 4, 9, 16], 2), [2, 2])

    def test_zero_denominator_coefficient(self):
        assert np.array_equal(estimate_ar_coefficients(np.zeros(10), 3), [0, 0, 0])

    def test_linear_trend(self, linear_prices):
        result = ARIMAModel(p=5, d=1, q=2).train(linear_prices, horizon=2)

        assert np.allclose(result.params['ar_coefficients'], 1.0)
        # Last price 189.5; five recent differences of 0.5 sum to 2.5
        assert result.predictions[0] == pytest.approx(192.0)
        # The 2.5 step joins the window: 2.5 + 4 * 0.5
        assert result.predictions[1] == pytest.approx(196.5)
        assert result.params['q'] == 2

    def test_fitted_starts_with_prices(self, noisy_prices):
        result = ARIMAModel().train(noisy_prices, horizon=1)
        assert np.array_equal(result.fitted[:5], noisy_prices[:5])
