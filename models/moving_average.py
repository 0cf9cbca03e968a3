"""
models/moving_average.py

Weighted moving average forecasts, with the plain moving average and the
naive (last value) forecast as special cases.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from config import WEIGHT_SUM_TOLERANCE
from models.base import ForecastingModel
from smoothing_state import SmoothingState
from ts_core import InvalidTimeError, Observation, Series, TimeAxis


class WeightedMovingAverageModel(ForecastingModel):
    """
    Forecast as a weighted sum of the previous ``len(weights)`` periods.

    The last weight applies to the most recent period. Weights that do not
    sum to one are normalized. Periods past the end of the history use the
    model's own earlier forecasts.
    """

    forecast_type = "weighted moving average"

    def __init__(self, weights: Sequence[float], time_variable: Optional[str] = None):
        super().__init__()
        weights = np.asarray(weights, dtype=float)
        if weights.ndim != 1 or weights.size == 0:
            raise ValueError("At least one weight is required for a moving average model")
        total = weights.sum()
        if total == 0.0:
            raise ValueError("Moving average weights must not sum to zero")
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            weights = weights / total
        self.weights = weights
        self.time_variable = time_variable
        self._axis: Optional[TimeAxis] = None
        self._state: Optional[SmoothingState] = None

    @property
    def period(self) -> int:
        return int(self.weights.size)

    @property
    def number_of_predictors(self) -> int:
        return 1

    def init(self, series: Series) -> None:
        axis = TimeAxis.from_series(series, self.time_variable, min_observations=self.period + 1)
        state = SmoothingState(axis)
        state.define("forecast", self._weighted_average, floor=self.period)
        for index in range(self.period):
            state.seed("forecast", index, axis.observed(index))
        self._axis, self._state = axis, state
        self.time_variable = axis.variable

        n = len(axis)
        state.fill("forecast", n)
        self._set_accuracy(axis.values[self.period:], [state.at("forecast", i) for i in range(self.period, n)])

    def _value(self, index: int) -> float:
        if self._axis.has_observation(index):
            return self._axis.observed(index)
        return self._state.at("forecast", index)

    def _weighted_average(self, index: int) -> float:
        window = [self._value(index - self.period + offset) for offset in range(self.period)]
        return float(np.dot(self.weights, window))

    def _forecast_value(self, observation: Observation) -> float:
        index = self._axis.index_of(observation.get(self._axis.variable))
        if index < 0:
            raise InvalidTimeError(
                f"Time value ({self._axis.time_at(index)}) is before the first observation ({self._axis.start})."
            )
        self._state.fill("forecast", index + 1, start=len(self._axis))
        return self._state.at("forecast", index)

    def __str__(self) -> str:
        return (f"{self.forecast_type} model, spanning {self.period} periods "
                f"and using an independent variable of {self.time_variable}.")


def moving_average(period: int, time_variable: Optional[str] = None) -> WeightedMovingAverageModel:
    """Equally weighted moving average over ``period`` periods."""
    if period < 1:
        raise ValueError(f"Moving average period must be at least 1, got {period}")
    model = WeightedMovingAverageModel([1.0 / period] * period, time_variable)
    model.forecast_type = "moving average"
    return model


def naive(time_variable: Optional[str] = None) -> WeightedMovingAverageModel:
    """Forecast every period as the value of the period before it."""
    model = moving_average(1, time_variable)
    model.forecast_type = "naive"
    return model
