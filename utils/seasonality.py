from collections import defaultdict
from typing import List, Optional

import numpy as np

from config import AUTO_MAX_PERIOD, AUTO_MIN_CYCLES


def _acf(x: np.ndarray, max_lag: int) -> np.ndarray:
    x = np.asarray(x, dtype=float)
    x = x[np.isfinite(x)]
    if x.size == 0:
        return np.zeros(max_lag + 1)
    x = x - x.mean()
    n = x.size
    # Autocovariances via FFT, zero padded to avoid wrap-around
    fft_len = 1
    while fft_len < 2 * n:
        fft_len <<= 1
    fx = np.fft.rfft(x, n=fft_len)
    acov = np.fft.irfft(fx * np.conj(fx))[:n]
    acov = acov / max(acov[0], 1e-12)
    return np.real(acov[: max_lag + 1])


def _periodogram_periods(x: np.ndarray, max_period: int) -> List[int]:
    """Integer periods ranked by periodogram power, strongest first."""
    x = np.asarray(x, dtype=float)
    x = x[np.isfinite(x)]
    n = x.size
    if n < 8:
        return []
    power = np.abs(np.fft.rfft(x - x.mean())) ** 2
    freqs = np.fft.rfftfreq(n, d=1.0)

    power_by_period = defaultdict(float)
    for i in range(1, len(freqs)):
        period = 1.0 / freqs[i]
        if period <= 1 or period > max_period:
            continue
        key = int(round(period))
        power_by_period[key] = max(power_by_period[key], power[i])
    ranked = sorted(power_by_period.items(), key=lambda kv: kv[1], reverse=True)
    return [period for period, _ in ranked]


def detect_periods_per_cycle(values, max_period: int = AUTO_MAX_PERIOD,
                             min_cycles: int = AUTO_MIN_CYCLES) -> Optional[int]:
    """
    Guess the number of periods in one seasonal cycle of ``values``.

    Candidates come from the FFT periodogram and must show a local
    autocorrelation peak at their lag; the series must span at least
    ``min_cycles`` cycles. Returns None when no seasonality is found.
    """
    y = np.asarray(values, dtype=float)
    y = y[np.isfinite(y)]
    n = y.size
    if n < 8 or np.allclose(y, y[0]):
        return None

    # Seasonality shows up better once a linear trend is removed
    t = np.arange(n, dtype=float)
    y = y - np.polyval(np.polyfit(t, y, 1), t)

    acf_vals = _acf(y, max_lag=min(max_period, n // 2))
    for period in _periodogram_periods(y, max_period):
        if n < period * max(1, int(min_cycles)):
            continue
        if period + 1 >= len(acf_vals):
            continue
        left, mid, right = acf_vals[period - 1], acf_vals[period], acf_vals[period + 1]
        if mid > left and mid > right and mid > 0.1:
            return int(period)
    return None
