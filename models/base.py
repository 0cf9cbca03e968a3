"""
models/base.py

Interface shared by every forecasting model.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Sequence, Union

from accuracy import AccuracyIndicators, evaluate
from ts_core import ModelNotInitializedError, Observation, Series

logger = logging.getLogger(__name__)


def check_smoothing_constant(model_name: str, name: str, value: float) -> float:
    if not 0.0 <= value <= 1.0:
        raise ValueError(
            f"{model_name}: Invalid smoothing constant, {name}={value} - must be in the range 0.0-1.0."
        )
    return float(value)


class ForecastingModel(ABC):
    """
    Contract for forecast model implementations.

    A model is constructed with its parameters, fitted once with
    :meth:`init`, and can then forecast any number of observations. Accuracy
    indicators are available after ``init`` and report the worst possible
    value until then.
    """

    forecast_type = "forecasting model"

    def __init__(self):
        self._accuracy = AccuracyIndicators()
        self._initialized = False

    @abstractmethod
    def init(self, series: Series) -> None:
        """Fit the model to ``series`` and evaluate its accuracy against it."""

    @abstractmethod
    def _forecast_value(self, observation: Observation) -> float:
        """Forecast for the independent values of ``observation``."""

    @property
    @abstractmethod
    def number_of_predictors(self) -> int:
        """Number of predictors used by the AIC penalty term."""

    def forecast(self, target: Union[Observation, Series]):
        """
        Forecast one observation or every observation in a series.

        The forecast is written into each observation's dependent value. A
        single observation returns the forecast value; a series is returned
        after being filled in.
        """
        self._check_initialized()
        if isinstance(target, Series):
            for observation in target:
                observation.dependent_value = self._forecast_value(observation)
            return target
        value = self._forecast_value(target)
        target.dependent_value = value
        return value

    def _set_accuracy(self, observed: Sequence[float], forecast: Sequence[float]) -> None:
        self._accuracy = evaluate(observed, forecast, self.number_of_predictors)
        self._initialized = True
        logger.debug("%s initialized: %s", self, self._accuracy)

    def _check_initialized(self) -> None:
        if not self._initialized:
            raise ModelNotInitializedError(f"{self.forecast_type} model must be initialized with init() before use.")

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def accuracy_indicators(self) -> AccuracyIndicators:
        self._check_initialized()
        return self._accuracy

    @property
    def aic(self) -> float:
        return self.accuracy_indicators.aic

    @property
    def bias(self) -> float:
        return self.accuracy_indicators.bias

    @property
    def mad(self) -> float:
        return self.accuracy_indicators.mad

    @property
    def mape(self) -> float:
        return self.accuracy_indicators.mape

    @property
    def mse(self) -> float:
        return self.accuracy_indicators.mse

    @property
    def sae(self) -> float:
        return self.accuracy_indicators.sae
