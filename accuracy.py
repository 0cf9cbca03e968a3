from __future__ import annotations

import sys
from dataclasses import asdict, dataclass
from typing import Dict, Sequence

import numpy as np

from ts_core import InsufficientDataError

# Reported by a model until init() has evaluated it
WORST = sys.float_info.max

INDICATOR_NAMES = ("aic", "bias", "mad", "mape", "mse", "sae")


@dataclass
class AccuracyIndicators:
    """Forecast accuracy of one model over its evaluation set."""

    aic: float = WORST
    bias: float = WORST
    mad: float = WORST
    mape: float = WORST
    mse: float = WORST
    sae: float = WORST

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)

    def __str__(self) -> str:
        return ", ".join(f"{name.upper()}={value:.6g}" for name, value in self.as_dict().items())


def evaluate(observed: Sequence[float], forecast: Sequence[float],
             number_of_predictors: int) -> AccuracyIndicators:
    """
    Compute accuracy indicators from aligned observed and forecast values.

    ``error = forecast - observed``. The AIC uses the Gaussian log-likelihood
    shortcut ``n*ln(2*pi) + ln(MSE) + 2*(p+2)``; a perfect fit has its MSE
    floored at the smallest positive double so the AIC stays finite.
    """
    y_true = np.asarray(observed, dtype=float)
    y_pred = np.asarray(forecast, dtype=float)
    if y_true.shape != y_pred.shape:
        raise ValueError(f"Observed and forecast lengths differ: {y_true.size} != {y_pred.size}")
    n = y_true.size
    if n == 0:
        raise InsufficientDataError("No observations available to evaluate the model against")

    error = y_pred - y_true
    abs_error = np.abs(error)
    mse = float(np.mean(error ** 2))
    with np.errstate(divide="ignore", invalid="ignore"):
        mape = float(np.mean(np.abs(error / y_true)))

    aic = n * np.log(2 * np.pi) + np.log(max(mse, np.finfo(float).tiny)) + 2 * (number_of_predictors + 2)
    return AccuracyIndicators(
        aic=float(aic),
        bias=float(np.mean(error)),
        mad=float(np.mean(abs_error)),
        mape=mape,
        mse=mse,
        sae=float(np.sum(abs_error)),
    )
