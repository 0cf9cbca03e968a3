# === Conversions between pandas tables and forecasting series ===

import csv
import logging
from typing import Iterable, Optional, Union

import numpy as np
import pandas as pd

from ts_core import DataError, Observation, Series
from utils.seasonality import detect_periods_per_cycle

logger = logging.getLogger(__name__)

AUTO = "auto"


def _time_column_to_periods(column: pd.Series) -> pd.Series:
    """Map a regular datetime column onto periods 1..n in date order."""
    dates = pd.to_datetime(column, errors="coerce")
    if dates.isna().any():
        raise DataError(f"Column '{column.name}' contains values that are not dates")
    ordered = dates.sort_values()
    if ordered.duplicated().any():
        raise DataError(f"Duplicate dates found in column '{column.name}'")
    freq = pd.infer_freq(pd.DatetimeIndex(ordered)) if len(ordered) >= 3 else None
    if freq is None:
        raise DataError(f"Dates in column '{column.name}' do not have a regular frequency")
    logger.debug("Column %s has frequency %s", column.name, freq)
    periods = pd.Series(np.arange(1, len(ordered) + 1, dtype=float), index=ordered.index)
    return periods.reindex(column.index)


def _is_date_column(column: pd.Series) -> bool:
    if pd.api.types.is_datetime64_any_dtype(column):
        return True
    if pd.api.types.is_numeric_dtype(column):
        return False
    return bool(pd.to_numeric(column, errors="coerce").isna().all())


def series_from_frame(df: pd.DataFrame, dependent: str, independent: Optional[Iterable[str]] = None,
                      time_variable: Optional[str] = None,
                      periods_per_cycle: Union[int, str, None] = None) -> Series:
    """
    Build a Series from the rows of ``df``.

    ``independent`` defaults to every other column. A datetime time column
    is replaced by its period number. Rows with missing or non-numeric
    values are dropped. ``periods_per_cycle="auto"`` detects the cycle
    length from the dependent values.
    """
    if df is None or df.empty:
        raise DataError("No data to build a series from")
    if dependent not in df.columns:
        raise DataError(f"Dependent column '{dependent}' not found in data")
    columns = [c for c in df.columns if c != dependent] if independent is None else list(independent)
    if time_variable is not None and time_variable not in columns:
        columns.append(time_variable)
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise DataError(f"Columns not found in data: {missing}")

    work = df[columns + [dependent]].copy()
    if time_variable is not None and _is_date_column(work[time_variable]):
        work[time_variable] = _time_column_to_periods(work[time_variable])
    for col in work.columns:
        work[col] = pd.to_numeric(work[col], errors="coerce")
    if independent is None:
        # Text columns picked up by default are labels, not predictors
        for col in [c for c in columns if c != time_variable and work[c].isna().all()]:
            logger.warning("Ignoring non-numeric column '%s'", col)
            columns.remove(col)
            work = work.drop(columns=col)
    before = len(work)
    work = work.dropna()
    if len(work) < before:
        logger.warning("Dropped %d rows with missing or non-numeric values", before - len(work))
    if work.empty:
        raise DataError("No numeric rows left after cleaning")

    if time_variable is not None:
        work = work.sort_values(time_variable)
    if periods_per_cycle == AUTO:
        periods_per_cycle = detect_periods_per_cycle(work[dependent].to_numpy())
        logger.info("Detected %s periods per cycle", periods_per_cycle)

    observations = [
        Observation(row[dependent], {name: row[name] for name in columns})
        for _, row in work.iterrows()
    ]
    return Series(observations, time_variable=time_variable, periods_per_cycle=periods_per_cycle)


def read_series(source, dependent: Optional[str] = None, independent: Optional[Iterable[str]] = None,
                time_variable: Optional[str] = None,
                periods_per_cycle: Union[int, str, None] = None) -> Series:
    """Read a delimited text file (or buffer) into a Series; the last column is the dependent by default."""
    try:
        df = pd.read_csv(source, sep=None, engine="python", skipinitialspace=True)
    except (csv.Error, pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise DataError(f"Could not parse data: {exc}") from exc
    df.columns = [str(c).strip() for c in df.columns]
    if dependent is None:
        dependent = df.columns[-1]
    return series_from_frame(df, dependent, independent, time_variable, periods_per_cycle)


def series_to_frame(series: Series, dependent: str = "value") -> pd.DataFrame:
    """One row per observation: the independent variables, then the dependent value."""
    variables = series.independent_variables
    rows = []
    for observation in series:
        row = {name: value for name, value in observation.items()}
        row[dependent] = observation.dependent_value
        rows.append(row)
    frame = pd.DataFrame(rows, columns=variables + [dependent])
    if series.time_variable in variables:
        frame = frame.sort_values(series.time_variable).reset_index(drop=True)
    return frame
