import os, sys
from types import SimpleNamespace
import numpy as np
import pandas as pd
import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from model_selection import (
    EvaluationCriteria, better_than, evaluate_candidates, get_best_forecast, polynomial_order, run_selection,
)
from models.regression_model import MultipleLinearRegressionModel, PolynomialRegressionModel, RegressionModel
from ts_core import DataError, Observation, Series


def _indicators(**overrides):
    values = dict(aic=1.0, bias=1.0, mad=1.0, mape=1.0, mse=1.0, sae=1.0)
    values.update(overrides)
    return SimpleNamespace(**values)


def test_any_model_beats_none():
    assert better_than(_indicators(), None)


def test_single_criterion_ties_go_to_candidate():
    assert better_than(_indicators(mse=2.0), _indicators(mse=2.0), EvaluationCriteria.MSE)
    assert not better_than(_indicators(mse=2.1), _indicators(mse=2.0), EvaluationCriteria.MSE)
    # bias is compared as a raw value, not its magnitude
    assert better_than(_indicators(bias=-5.0), _indicators(bias=0.1), EvaluationCriteria.BIAS)


def test_blend_counts_indicators():
    candidate = _indicators(aic=0.5, mse=0.5, mad=0.5, sae=2.0)
    assert better_than(candidate, _indicators())
    worse = _indicators(aic=2.0, mse=2.0, mad=2.0, sae=2.0, mape=2.0)
    assert not better_than(worse, _indicators())


def test_blend_zero_score_falls_back_to_summed_difference():
    # three better, three worse
    candidate = _indicators(aic=0.0, bias=0.0, mad=0.0, mape=1.5, mse=1.5, sae=1.5)
    assert better_than(candidate, _indicators())
    candidate = _indicators(aic=0.9, bias=0.9, mad=0.9, mape=5.0, mse=5.0, sae=5.0)
    assert not better_than(candidate, _indicators())


def test_blend_nan_scores_neither_way():
    candidate = _indicators(mape=float("nan"), aic=2.0, bias=2.0, mad=2.0, mse=0.5, sae=0.5)
    incumbent = _indicators(mape=float("nan"))
    # -3 +2 with mape ignored
    assert not better_than(candidate, incumbent)


def test_polynomial_order():
    assert polynomial_order(10) == 2
    assert polynomial_order(99) == 8
    assert polynomial_order(100) == 10
    assert polynomial_order(500) == 10


def test_best_forecast_linear_data():
    series = Series(Observation(float(x), x=float(x)) for x in range(10))
    model = get_best_forecast(series)
    targets = Series(Observation(independent={"x": float(x)}) for x in range(11, 15))
    forecasts = [obs.dependent_value for obs in model.forecast(targets)]
    assert forecasts == pytest.approx([11.0, 12.0, 13.0, 14.0], abs=1e-6)


def test_no_time_variable_means_no_time_series_models():
    series = Series(Observation(2.0 * x + 1.0, x=float(x)) for x in range(10))
    selection = run_selection(series)
    types = {model.forecast_type for model in selection.evaluated}
    assert types <= {"linear regression", "polynomial regression", "multiple linear regression"}


def test_time_series_candidates_are_tried():
    rng = np.random.default_rng(0)
    t = np.arange(1, 25)
    values = 50 + 10 * np.sin(2 * np.pi * t / 4) + rng.normal(0, 0.5, size=t.size)
    series = Series.from_values(values, time_variable="t", periods_per_cycle=4)
    selection = run_selection(series, smoothing_tolerance=0.05)
    types = [model.forecast_type for model in selection.evaluated]
    for expected in ("moving average", "simple exponential smoothing",
                     "double exponential smoothing", "triple exponential smoothing"):
        assert expected in types
    assert types.count("moving average") == 2
    assert selection.best in selection.evaluated


def test_failing_candidates_are_skipped():
    # 3 observations: moving average and triple smoothing cannot be fitted
    series = Series.from_values([1.0, 2.0, 4.0], time_variable="t", periods_per_cycle=4)
    selection = run_selection(series, smoothing_tolerance=0.1)
    types = [model.forecast_type for model in selection.evaluated]
    assert "triple exponential smoothing" not in types
    assert "moving average" not in types
    assert "double exponential smoothing" in types


def test_empty_series_raises():
    with pytest.raises(DataError):
        get_best_forecast(Series())


def test_evaluate_candidates_frame():
    series = Series(Observation(x * x + 0.5 * z, x=float(x), z=float(z))
                    for x, z in zip(range(12), [3, 1, 4, 1, 5, 9, 2, 6, 5, 3, 5, 8]))
    frame = evaluate_candidates(series, EvaluationCriteria.MSE)
    assert isinstance(frame, pd.DataFrame)
    assert list(frame["mse"]) == sorted(frame["mse"])
    assert frame["selected"].sum() == 1
    assert {"aic", "bias", "mad", "mape", "mse", "sae"} <= set(frame.columns)
    assert "multiple linear regression" in set(frame["type"])


def test_regression_models():
    series = Series(Observation(3.0 * x - 2.0, x=float(x)) for x in range(6))
    linear = RegressionModel("x")
    linear.init(series)
    assert linear.slope == pytest.approx(3.0)
    assert linear.intercept == pytest.approx(-2.0)
    assert linear.mse == pytest.approx(0.0, abs=1e-12)
    assert linear.forecast(Observation(independent={"x": 10.0})) == pytest.approx(28.0)

    quadratic = Series(Observation(x * x, x=float(x)) for x in range(-4, 5))
    poly = PolynomialRegressionModel("x", 2)
    poly.init(quadratic)
    assert poly.number_of_predictors == 2
    assert poly.forecast(Observation(independent={"x": 6.0})) == pytest.approx(36.0)

    plane = Series(Observation(x + 2.0 * z, x=float(x), z=float(z))
                   for x, z in [(0, 1), (1, 0), (2, 3), (3, 1), (4, 4)])
    multiple = MultipleLinearRegressionModel(["x", "z"])
    multiple.init(plane)
    assert multiple.number_of_predictors == 2
    assert multiple.forecast(Observation(independent={"x": 1.0, "z": 1.0})) == pytest.approx(3.0)

    with pytest.raises(ValueError):
        PolynomialRegressionModel("x", 0)
    with pytest.raises(DataError):
        RegressionModel("missing").init(series)
