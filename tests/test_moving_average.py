import os, sys
import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from models.moving_average import WeightedMovingAverageModel, moving_average, naive
from ts_core import InsufficientDataError, Observation, Series


def _forecast_at(model, times):
    targets = Series([Observation(independent={"t": t}) for t in times])
    return [obs.dependent_value for obs in model.forecast(targets)]


def test_constant_moving_average():
    model = moving_average(3)
    model.init(Series.from_values([5.0] * 6))
    assert _forecast_at(model, [7.0, 8.0, 9.0]) == pytest.approx([5.0, 5.0, 5.0])


def test_moving_average_uses_own_forecasts_past_history():
    values = [4, 5, 6, 9, 3, 7, 5, 6, 7, 9, 3, 4, 6, 7, 7, 4]
    model = moving_average(4)
    model.init(Series.from_values(values, start=101.0))
    expected = [6.00, 5.75, 6.25, 6.00, 5.25, 6.25, 6.75, 6.25,
                5.75, 5.50, 5.00, 6.00, 6.00, 6.00, 5.75, 5.4375]
    assert _forecast_at(model, range(105, 121)) == pytest.approx(expected)


def test_early_periods_return_the_observation():
    model = moving_average(3)
    model.init(Series.from_values([1.0, 2.0, 3.0, 4.0, 5.0]))
    assert _forecast_at(model, [1.0, 2.0, 3.0, 4.0]) == pytest.approx([1.0, 2.0, 3.0, 2.0])


def test_weights_are_normalized():
    model = WeightedMovingAverageModel([1.0, 3.0])
    assert list(model.weights) == pytest.approx([0.25, 0.75])
    model.init(Series.from_values([4.0, 8.0, 0.0]))
    # most recent period carries the last weight
    assert _forecast_at(model, [3.0]) == pytest.approx([0.25 * 4.0 + 0.75 * 8.0])


def test_naive_repeats_previous_value():
    model = naive()
    model.init(Series.from_values([3.0, 7.0, 2.0]))
    assert _forecast_at(model, [2.0, 3.0, 4.0, 6.0]) == pytest.approx([3.0, 7.0, 2.0, 2.0])
    assert model.forecast_type == "naive"
    assert model.mse == pytest.approx((16.0 + 25.0) / 2)


def test_moving_average_needs_more_than_period_observations():
    with pytest.raises(InsufficientDataError):
        moving_average(3).init(Series.from_values([1.0, 2.0, 3.0]))


def test_invalid_weights_and_period():
    with pytest.raises(ValueError):
        WeightedMovingAverageModel([])
    with pytest.raises(ValueError):
        WeightedMovingAverageModel([1.0, -1.0])
    with pytest.raises(ValueError):
        moving_average(0)


def test_weights_summing_to_one_are_kept():
    weights = [0.3, 0.7 + 1e-12]
    assert list(WeightedMovingAverageModel(weights).weights) == weights
    rescaled = WeightedMovingAverageModel([0.3, 0.7 + 1e-6]).weights
    assert rescaled.sum() == pytest.approx(1.0, abs=1e-12)
    assert rescaled[1] != 0.7 + 1e-6
