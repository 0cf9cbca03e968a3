"""
models/triple_smoothing.py

Triple exponential smoothing (Holt-Winters, multiplicative seasonality).

Base level L, trend T and seasonal index s over a cycle of ``p`` periods:

    L(t) = alpha*(observed(t)/s(t-p)) + (1-alpha)*(L(t-1) + T(t-1))
    T(t) = beta*(L(t) - L(t-1)) + (1-beta)*T(t-1)
    s(t) = gamma*(observed(t)/L(t)) + (1-gamma)*s(t-p)

and the forecast made at t for k periods ahead is (L(t) + k*T(t)) * s(t+k-p).

The first two full cycles seed the recursion: the trend from the difference
of the two cycle averages, the base values of the second cycle from its
average, and one seasonal index per period from the ratio of each value to
its cycle average.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from config import DEFAULT_SMOOTHING_CONSTANT_TOLERANCE, TRIPLE_SMOOTHING_CYCLES
from models.base import ForecastingModel, check_smoothing_constant
from parameter_search import bracket_search
from smoothing_state import SmoothingState
from ts_core import DataError, InsufficientDataError, InvalidTimeError, Observation, Series, TimeAxis

logger = logging.getLogger(__name__)


def _require_seasonal_history(series: Series) -> int:
    periods = series.periods_per_cycle
    if periods is None or periods <= 1:
        raise DataError(
            "Series passed to the triple exponential smoothing model does not contain seasonal data. "
            "Set Series.periods_per_cycle before calling init."
        )
    if len(series) < TRIPLE_SMOOTHING_CYCLES * periods:
        raise InsufficientDataError(
            f"Triple exponential smoothing requires a minimum of {TRIPLE_SMOOTHING_CYCLES} full cycles "
            f"({TRIPLE_SMOOTHING_CYCLES * periods} observations), got {len(series)}."
        )
    return periods


class TripleExponentialSmoothingModel(ForecastingModel):

    forecast_type = "triple exponential smoothing"

    def __init__(self, alpha: float, beta: float, gamma: float, time_variable: Optional[str] = None):
        super().__init__()
        self.alpha = check_smoothing_constant("TripleExponentialSmoothingModel", "alpha", alpha)
        self.beta = check_smoothing_constant("TripleExponentialSmoothingModel", "beta", beta)
        self.gamma = check_smoothing_constant("TripleExponentialSmoothingModel", "gamma", gamma)
        self.time_variable = time_variable
        self.periods_per_cycle = 0
        self._axis: Optional[TimeAxis] = None
        self._state: Optional[SmoothingState] = None

    @classmethod
    def best_fit(cls, series: Series,
                 alpha_tolerance: float = DEFAULT_SMOOTHING_CONSTANT_TOLERANCE,
                 beta_tolerance: float = DEFAULT_SMOOTHING_CONSTANT_TOLERANCE,
                 gamma_tolerance: float = DEFAULT_SMOOTHING_CONSTANT_TOLERANCE,
                 time_variable: Optional[str] = None) -> "TripleExponentialSmoothingModel":
        """
        Model whose (alpha, beta, gamma) minimize the MSE.

        Three nested bracketing searches: gamma for every candidate beta, beta
        for every candidate alpha.
        """
        _require_seasonal_history(series)

        def build(alpha: float, beta: float, gamma: float) -> TripleExponentialSmoothingModel:
            model = cls(alpha, beta, gamma, time_variable)
            model.init(series)
            return model

        def best_for_beta(alpha: float, beta: float) -> TripleExponentialSmoothingModel:
            return bracket_search(lambda gamma: build(alpha, beta, gamma),
                                  tolerance=gamma_tolerance, name="gamma").model

        def best_for_alpha(alpha: float) -> TripleExponentialSmoothingModel:
            return bracket_search(lambda beta: best_for_beta(alpha, beta),
                                  tolerance=beta_tolerance, name="beta").model

        return bracket_search(best_for_alpha, tolerance=alpha_tolerance, name="alpha").model

    @property
    def number_of_predictors(self) -> int:
        return 1

    def init(self, series: Series) -> None:
        periods = _require_seasonal_history(series)
        cycles = TRIPLE_SMOOTHING_CYCLES
        axis = TimeAxis.from_series(series, self.time_variable, min_observations=cycles * periods)

        history = np.asarray(axis.values[:cycles * periods], dtype=float).reshape(cycles, periods)
        cycle_averages = history.mean(axis=1)
        if np.any(cycle_averages == 0.0):
            raise DataError("Multiplicative seasonality requires non-zero cycle averages")
        trend = (history[1].sum() - history[0].sum()) / periods / periods
        indices = (history / cycle_averages[:, None]).mean(axis=0)
        if np.any(indices == 0.0):
            raise DataError("Multiplicative seasonality requires non-zero seasonal indices")

        floor = cycles * periods
        state = SmoothingState(axis)
        state.define("base", self._base, floor=floor)
        state.define("trend", self._trend, floor=floor)
        state.define("seasonal_index", self._seasonal_index, floor=floor)
        state.define("forecast", self._forecast, floor=1)

        seeded_cycle = (cycles - 1) * periods
        for index in range(floor):
            state.seed("trend", index, float(trend))
        for period in range(periods):
            index = seeded_cycle + period
            base = cycle_averages[-1] + (period + 1 - (periods + 1) / 2.0) * trend
            state.seed("base", index, float(base))
            state.seed("seasonal_index", index, float(indices[period]))
        state.seed("forecast", 0, axis.observed(0))

        self._axis, self._state = axis, state
        self.time_variable = axis.variable
        self.periods_per_cycle = periods

        n = len(axis)
        for name in ("base", "trend", "seasonal_index", "forecast"):
            state.fill(name, n)

        start = floor if n > floor else seeded_cycle + 1
        self._set_accuracy(axis.values[start:], [state.at("forecast", i) for i in range(start, n)])
        logger.debug("Seeded %d-period cycle: trend=%.6g, indices=%s", periods, trend, np.round(indices, 6))

    def _season(self, index: int) -> float:
        # Indices before the seeded cycle wrap forward, those past the history wrap back
        periods = self.periods_per_cycle
        seeded_cycle = (TRIPLE_SMOOTHING_CYCLES - 1) * periods
        while index < seeded_cycle:
            index += periods
        while index >= len(self._axis):
            index -= periods
        return self._state.at("seasonal_index", index)

    def _divide(self, observed: float, divisor: float, what: str, index: int) -> float:
        if divisor == 0.0:
            raise DataError(
                f"Multiplicative seasonality is undefined: zero {what} at time {self._axis.time_at(index)}"
            )
        return observed / divisor

    def _base(self, index: int) -> float:
        previous = index - 1
        season = self._season(index - self.periods_per_cycle)
        ratio = self._divide(self._axis.observed(index), season, "seasonal index", index - self.periods_per_cycle)
        return (self.alpha * ratio
                + (1.0 - self.alpha) * (self._state.at("base", previous) + self._state.at("trend", previous)))

    def _trend(self, index: int) -> float:
        previous = index - 1
        return (self.beta * (self._state.at("base", index) - self._state.at("base", previous))
                + (1.0 - self.beta) * self._state.at("trend", previous))

    def _seasonal_index(self, index: int) -> float:
        ratio = self._divide(self._axis.observed(index), self._state.at("base", index), "base level", index)
        return self.gamma * ratio + (1.0 - self.gamma) * self._season(index - self.periods_per_cycle)

    def _forecast(self, index: int) -> float:
        periods = self.periods_per_cycle
        origin = index - 1
        if (TRIPLE_SMOOTHING_CYCLES - 1) * periods <= origin < len(self._axis):
            level = self._state.at("base", origin) + self._state.at("trend", origin)
        else:
            # No level at the previous period: project from the last one
            origin = len(self._axis) - 1
            level = self._state.at("base", origin) + (index - origin) * self._state.at("trend", origin)
        return level * self._season(index - periods)

    def _forecast_value(self, observation: Observation) -> float:
        index = self._axis.index_of(observation.get(self._axis.variable))
        if index < 0:
            raise InvalidTimeError(
                f"Time value ({self._axis.time_at(index)}) is before the first observation ({self._axis.start})."
            )
        return self._state.at("forecast", index)

    def __str__(self) -> str:
        return (f"Triple exponential smoothing model, with smoothing constants of alpha={self.alpha}, "
                f"beta={self.beta}, gamma={self.gamma}, and using an independent variable of {self.time_variable}")
