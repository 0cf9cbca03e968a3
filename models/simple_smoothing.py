"""
models/simple_smoothing.py

Simple (single) exponential smoothing.

Two formulations of the smoothing equation are supported:

    recent  (Hunter):   f(t) = alpha*observed(t-1) + (1-alpha)*f(t-1)
    current (Roberts):  f(t) = alpha*observed(t)   + (1-alpha)*f(t-1)

with f(t0) = observed(t0). Forecasts past the last observation are flat at
f(tmax).
"""

from __future__ import annotations

from typing import Optional

from config import DEFAULT_SMOOTHING_CONSTANT_TOLERANCE
from models.base import ForecastingModel, check_smoothing_constant
from parameter_search import bracket_search
from smoothing_state import SmoothingState
from ts_core import InvalidTimeError, Observation, Series, TimeAxis

RECENT = "recent"
CURRENT = "current"


class SimpleExponentialSmoothingModel(ForecastingModel):

    forecast_type = "simple exponential smoothing"

    def __init__(self, alpha: float, approach: str = RECENT, time_variable: Optional[str] = None):
        super().__init__()
        self.alpha = check_smoothing_constant("SimpleExponentialSmoothingModel", "alpha", alpha)
        if approach not in (RECENT, CURRENT):
            raise ValueError(f"Unknown smoothing approach {approach!r}; use {RECENT!r} or {CURRENT!r}")
        self.approach = approach
        self.time_variable = time_variable
        self._axis: Optional[TimeAxis] = None
        self._state: Optional[SmoothingState] = None

    @classmethod
    def best_fit(cls, series: Series, tolerance: float = DEFAULT_SMOOTHING_CONSTANT_TOLERANCE,
                 approach: str = RECENT, time_variable: Optional[str] = None) -> "SimpleExponentialSmoothingModel":
        """Model whose alpha minimizes the MSE over ``series``."""

        def build(alpha: float) -> SimpleExponentialSmoothingModel:
            model = cls(alpha, approach, time_variable)
            model.init(series)
            return model

        return bracket_search(build, tolerance=tolerance, name="alpha").model

    @property
    def number_of_predictors(self) -> int:
        return 1

    def init(self, series: Series) -> None:
        axis = TimeAxis.from_series(series, self.time_variable, min_observations=2)
        state = SmoothingState(axis)
        state.define("forecast", self._smooth, floor=1)
        state.seed("forecast", 0, axis.observed(0))
        self._axis, self._state = axis, state
        self.time_variable = axis.variable

        n = len(axis)
        state.fill("forecast", n)
        self._set_accuracy(axis.values[1:], [state.at("forecast", i) for i in range(1, n)])

    def _smooth(self, index: int) -> float:
        last = len(self._axis) - 1
        if index > last:
            return self._state.at("forecast", last)
        source = index - 1 if self.approach == RECENT else index
        return (self.alpha * self._axis.observed(source)
                + (1.0 - self.alpha) * self._state.at("forecast", index - 1))

    def _forecast_value(self, observation: Observation) -> float:
        index = self._axis.index_of(observation.get(self._axis.variable))
        if index < 0:
            raise InvalidTimeError(
                f"Time value ({self._axis.time_at(index)}) is before the first observation ({self._axis.start})."
            )
        return self._state.at("forecast", index)

    def __str__(self) -> str:
        formula = "Hunter's" if self.approach == RECENT else "Roberts'"
        return (f"Simple exponential smoothing model (using {formula} formula), with a smoothing constant "
                f"of {self.alpha} and using an independent variable of {self.time_variable}")
