"""
models/double_smoothing.py

Double exponential smoothing (Holt's linear trend method).

The smoothed level f(t) and the slope b(t) are mutually recursive:

    f(t) = alpha*observed(t) + (1-alpha)*(f(t-1) + b(t-1))
    b(t) = gamma*(f(t) - f(t-1)) + (1-gamma)*b(t-1)

seeded with f(t0) = observed(t0) and b(t0) = observed(t0+1) - observed(t0).
Because f(t) already includes observed(t), accuracy is measured with the
one-period-ahead forecast f(t-1) + b(t-1).
"""

from __future__ import annotations

from typing import Optional

from config import DEFAULT_SMOOTHING_CONSTANT_TOLERANCE
from models.base import ForecastingModel, check_smoothing_constant
from parameter_search import bracket_search
from smoothing_state import SmoothingState
from ts_core import InvalidTimeError, Observation, Series, TimeAxis


class DoubleExponentialSmoothingModel(ForecastingModel):

    forecast_type = "double exponential smoothing"

    def __init__(self, alpha: float, gamma: float, time_variable: Optional[str] = None):
        super().__init__()
        self.alpha = check_smoothing_constant("DoubleExponentialSmoothingModel", "alpha", alpha)
        self.gamma = check_smoothing_constant("DoubleExponentialSmoothingModel", "gamma", gamma)
        self.time_variable = time_variable
        self._axis: Optional[TimeAxis] = None
        self._state: Optional[SmoothingState] = None

    @classmethod
    def best_fit(cls, series: Series,
                 alpha_tolerance: float = DEFAULT_SMOOTHING_CONSTANT_TOLERANCE,
                 gamma_tolerance: float = DEFAULT_SMOOTHING_CONSTANT_TOLERANCE,
                 time_variable: Optional[str] = None) -> "DoubleExponentialSmoothingModel":
        """Model whose (alpha, gamma) minimize the MSE, searching gamma for every candidate alpha."""

        def build(alpha: float, gamma: float) -> DoubleExponentialSmoothingModel:
            model = cls(alpha, gamma, time_variable)
            model.init(series)
            return model

        def best_for_alpha(alpha: float) -> DoubleExponentialSmoothingModel:
            return bracket_search(lambda gamma: build(alpha, gamma),
                                  tolerance=gamma_tolerance, name="gamma").model

        return bracket_search(best_for_alpha, tolerance=alpha_tolerance, name="alpha").model

    @property
    def number_of_predictors(self) -> int:
        return 1

    def init(self, series: Series) -> None:
        axis = TimeAxis.from_series(series, self.time_variable, min_observations=2)
        state = SmoothingState(axis)
        state.define("forecast", self._level, floor=1)
        state.define("slope", self._slope, floor=1)
        state.seed("forecast", 0, axis.observed(0))
        state.seed("slope", 0, axis.observed(1) - axis.observed(0))
        self._axis, self._state = axis, state
        self.time_variable = axis.variable

        n = len(axis)
        state.fill("forecast", n)
        state.fill("slope", n)

        start = 2 if n > 2 else 1
        self._set_accuracy(axis.values[start:], [self.one_step_ahead(i) for i in range(start, n)])

    def one_step_ahead(self, index: int) -> float:
        """Forecast for grid ``index`` made one period earlier."""
        return self._state.at("forecast", index - 1) + self._state.at("slope", index - 1)

    def _level(self, index: int) -> float:
        last = len(self._axis) - 1
        if index > last:
            return self._state.at("forecast", last) + (index - last) * self._state.at("slope", last - 1)
        return (self.alpha * self._axis.observed(index)
                + (1.0 - self.alpha) * self.one_step_ahead(index))

    def _slope(self, index: int) -> float:
        return (self.gamma * (self._state.at("forecast", index) - self._state.at("forecast", index - 1))
                + (1.0 - self.gamma) * self._state.at("slope", index - 1))

    def _forecast_value(self, observation: Observation) -> float:
        index = self._axis.index_of(observation.get(self._axis.variable))
        if index < 0:
            raise InvalidTimeError(
                f"Time value ({self._axis.time_at(index)}) is before the first observation ({self._axis.start})."
            )
        return self._state.at("forecast", index)

    def __str__(self) -> str:
        return (f"Double exponential smoothing model, with smoothing constants of alpha={self.alpha}, "
                f"gamma={self.gamma}, and using an independent variable of {self.time_variable}")
