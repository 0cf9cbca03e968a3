"""
models/regression_model.py

Closed-form regression models fitted with scikit-learn. Accuracy is measured
with same-period forecasts over the whole series.
"""

from typing import List, Sequence

import numpy as np
from sklearn.base import BaseEstimator
from sklearn.linear_model import LinearRegression
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import PolynomialFeatures, StandardScaler

from models.base import ForecastingModel
from ts_core import DataError, Observation, Series


class _FittedRegression(ForecastingModel):
    """Regression of the dependent value on a fixed list of independent variables."""

    def __init__(self, variables: Sequence[str]):
        super().__init__()
        if not variables:
            raise ValueError("At least one independent variable is required")
        self.variables: List[str] = list(variables)
        self._estimator: BaseEstimator = None

    def _make_estimator(self) -> BaseEstimator:
        return LinearRegression()

    def _design(self, observations) -> np.ndarray:
        return np.array([[obs.get(name) for name in self.variables] for obs in observations], dtype=float)

    def init(self, series: Series) -> None:
        if len(series) == 0:
            raise DataError("Series cannot be empty in call to init.")
        observations = list(series)
        if any(obs.dependent_value is None for obs in observations):
            raise DataError("Every observation needs a dependent value to fit a regression")
        X = self._design(observations)
        y = np.array([obs.dependent_value for obs in observations], dtype=float)

        estimator = self._make_estimator()
        estimator.fit(X, y)
        self._estimator = estimator
        self._set_accuracy(y, estimator.predict(X))

    def _forecast_value(self, observation: Observation) -> float:
        return float(self._estimator.predict(self._design([observation]))[0])


class RegressionModel(_FittedRegression):
    """Simple linear regression on one independent variable."""

    forecast_type = "linear regression"

    def __init__(self, independent_variable: str):
        super().__init__([independent_variable])

    @property
    def number_of_predictors(self) -> int:
        return 1

    @property
    def intercept(self) -> float:
        self._check_initialized()
        return float(self._estimator.intercept_)

    @property
    def slope(self) -> float:
        self._check_initialized()
        return float(self._estimator.coef_[0])

    def __str__(self) -> str:
        return f"Linear regression model using an independent variable of {self.variables[0]}"


class PolynomialRegressionModel(_FittedRegression):
    """Polynomial regression of a given order on one independent variable."""

    forecast_type = "polynomial regression"

    def __init__(self, independent_variable: str, order: int):
        super().__init__([independent_variable])
        if order < 1:
            raise ValueError(f"Polynomial order must be at least 1, got {order}")
        self.order = int(order)

    def _make_estimator(self) -> BaseEstimator:
        # Scaling first keeps the high powers well conditioned
        return Pipeline([
            ("scaler", StandardScaler()),
            ("poly", PolynomialFeatures(degree=self.order, include_bias=False)),
            ("model", LinearRegression()),
        ])

    @property
    def number_of_predictors(self) -> int:
        return self.order

    def __str__(self) -> str:
        return (f"Polynomial regression model of order {self.order} "
                f"using an independent variable of {self.variables[0]}")


class MultipleLinearRegressionModel(_FittedRegression):
    """Linear regression on several independent variables."""

    forecast_type = "multiple linear regression"

    @property
    def number_of_predictors(self) -> int:
        return len(self.variables)

    def __str__(self) -> str:
        return f"Multiple linear regression model using independent variables {', '.join(self.variables)}"
