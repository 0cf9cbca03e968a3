"""
Automatic model selection.

Every candidate model is fitted to the same series and compared on its
accuracy indicators; the best one is returned ready to forecast.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Callable, Iterator, List, Optional, Tuple

import pandas as pd

from accuracy import INDICATOR_NAMES
from config import (
    DEFAULT_MOVING_AVERAGE_PERIOD,
    DEFAULT_SMOOTHING_CONSTANT_TOLERANCE,
    MAX_POLYNOMIAL_ORDER,
    SELECTION_TOLERANCE,
)
from models.base import ForecastingModel
from models.double_smoothing import DoubleExponentialSmoothingModel
from models.moving_average import moving_average
from models.regression_model import (
    MultipleLinearRegressionModel,
    PolynomialRegressionModel,
    RegressionModel,
)
from models.simple_smoothing import SimpleExponentialSmoothingModel
from models.triple_smoothing import TripleExponentialSmoothingModel
from ts_core import DataError, Series

logger = logging.getLogger(__name__)


class EvaluationCriteria(Enum):
    AIC = "aic"
    BIAS = "bias"
    MAD = "mad"
    MAPE = "mape"
    MSE = "mse"
    SAE = "sae"
    BLEND = "blend"


def better_than(candidate: ForecastingModel, incumbent: Optional[ForecastingModel],
                criteria: EvaluationCriteria = EvaluationCriteria.BLEND,
                tolerance: float = SELECTION_TOLERANCE) -> bool:
    """
    True if ``candidate`` should replace ``incumbent``.

    Any model beats no model. A single criterion compares that indicator
    with ``<=``, so later candidates win ties. BLEND scores each of the six
    indicators +1 when the candidate is no worse (within ``tolerance``) and
    -1 when it is worse; a zero score falls back to the sign of the summed
    differences.
    """
    if incumbent is None:
        return True
    if criteria is not EvaluationCriteria.BLEND:
        return getattr(candidate, criteria.value) <= getattr(incumbent, criteria.value)

    score = 0
    total = 0.0
    for name in INDICATOR_NAMES:
        diff = getattr(candidate, name) - getattr(incumbent, name)
        total += diff
        # NaN (0/0 MAPE) scores neither way
        if diff <= tolerance:
            score += 1
        elif diff >= tolerance:
            score -= 1
    if score == 0:
        return total < 0
    return score > 0


def polynomial_order(n: int, max_order: int = MAX_POLYNOMIAL_ORDER) -> int:
    """Polynomial order to try for ``n`` observations; high orders overfit short series."""
    if n < max_order * max_order:
        return int(math.sqrt(n)) - 1
    return max_order


class Selection:
    """Running best model while the candidates are offered one at a time."""

    def __init__(self, criteria: EvaluationCriteria, tolerance: float):
        self.criteria = criteria
        self.tolerance = tolerance
        self.best: Optional[ForecastingModel] = None
        self.evaluated: List[ForecastingModel] = []

    def offer(self, model: ForecastingModel) -> bool:
        self.evaluated.append(model)
        if better_than(model, self.best, self.criteria, self.tolerance):
            self.best = model
            return True
        return False

    def to_frame(self) -> pd.DataFrame:
        """Accuracy of every model offered so far, lowest MSE first."""
        rows = []
        for model in self.evaluated:
            row = {"model": str(model), "type": model.forecast_type}
            row.update(model.accuracy_indicators.as_dict())
            row["selected"] = model is self.best
            rows.append(row)
        return pd.DataFrame(rows).sort_values("mse", kind="mergesort").reset_index(drop=True)


def _fit(name: str, factory: Callable[[], ForecastingModel], series: Series,
         fitted: bool = False) -> Optional[ForecastingModel]:
    try:
        model = factory()
        if not fitted:
            model.init(series)
        return model
    except (DataError, ValueError) as exc:
        logger.info("Skipping %s: %s", name, exc)
        return None


def _time_series_candidates(series: Series, tolerance: float) -> Iterator[Tuple[str, Callable, bool]]:
    yield ("moving average", lambda: moving_average(DEFAULT_MOVING_AVERAGE_PERIOD, series.time_variable), False)
    if series.periods_per_cycle:
        yield ("cycle moving average", lambda: moving_average(series.periods_per_cycle, series.time_variable), False)
    yield ("simple exponential smoothing",
           lambda: SimpleExponentialSmoothingModel.best_fit(series, tolerance, time_variable=series.time_variable),
           True)
    yield ("double exponential smoothing",
           lambda: DoubleExponentialSmoothingModel.best_fit(series, tolerance, tolerance,
                                                            time_variable=series.time_variable),
           True)
    yield ("triple exponential smoothing",
           lambda: TripleExponentialSmoothingModel.best_fit(series, tolerance, tolerance, tolerance,
                                                            time_variable=series.time_variable),
           True)


def run_selection(series: Series, criteria: EvaluationCriteria = EvaluationCriteria.BLEND,
                  selection_tolerance: float = SELECTION_TOLERANCE,
                  smoothing_tolerance: float = DEFAULT_SMOOTHING_CONSTANT_TOLERANCE) -> Selection:
    """Offer every candidate model in turn; the returned selection holds the best and all the others."""
    if len(series) == 0:
        raise DataError("Series cannot be empty in call to get_best_forecast.")
    selection = Selection(criteria, selection_tolerance)
    variables = series.independent_variables

    for variable in variables:
        for name, factory in (
            (f"linear regression on {variable}", lambda: RegressionModel(variable)),
            (f"polynomial regression on {variable}",
             lambda: PolynomialRegressionModel(variable, polynomial_order(len(series)))),
        ):
            model = _fit(name, factory, series)
            if model is not None:
                selection.offer(model)

    # Forward selection: keep adding the variable that most improves the best model
    chosen: List[str] = []
    available = list(variables)
    while available:
        best_addition = None
        for variable in available:
            working = chosen + [variable]
            model = _fit(f"multiple regression on {working}",
                         lambda: MultipleLinearRegressionModel(working), series)
            if model is not None and selection.offer(model):
                best_addition = variable
        if best_addition is None:
            break
        available.remove(best_addition)
        chosen.append(best_addition)

    if series.time_variable is not None:
        for name, factory, fitted in _time_series_candidates(series, smoothing_tolerance):
            model = _fit(name, factory, series, fitted=fitted)
            if model is not None:
                selection.offer(model)

    if selection.best is None:
        raise DataError("None of the candidate models could be fitted to the series")
    return selection


def get_best_forecast(series: Series, criteria: EvaluationCriteria = EvaluationCriteria.BLEND,
                      selection_tolerance: float = SELECTION_TOLERANCE,
                      smoothing_tolerance: float = DEFAULT_SMOOTHING_CONSTANT_TOLERANCE) -> ForecastingModel:
    """Fit every candidate model to ``series`` and return the best one, already initialized."""
    selection = run_selection(series, criteria, selection_tolerance, smoothing_tolerance)
    logger.info("Best of %d candidates by %s: %s (%s)", len(selection.evaluated), criteria.name,
                selection.best, selection.best.accuracy_indicators)
    return selection.best


def evaluate_candidates(series: Series, criteria: EvaluationCriteria = EvaluationCriteria.BLEND,
                        smoothing_tolerance: float = DEFAULT_SMOOTHING_CONSTANT_TOLERANCE) -> pd.DataFrame:
    """Accuracy of every candidate model as a DataFrame, lowest MSE first."""
    return run_selection(series, criteria, SELECTION_TOLERANCE, smoothing_tolerance).to_frame()
