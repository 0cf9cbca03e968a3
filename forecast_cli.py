#!/usr/bin/env python3
"""
Command line forecasting: read a delimited file, pick the best model and
print forecasts past the last observation.
"""

import argparse
import logging
import sys

import pandas as pd

from config import LOG_FORMAT
from data_io import AUTO, read_series, series_to_frame
from model_selection import EvaluationCriteria, run_selection
from ts_core import DataError, InvalidTimeError, Observation, Series, TimeAxis

logger = logging.getLogger(__name__)


def _cycle(value: str):
    if value == AUTO:
        return value
    try:
        periods = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"--cycle must be an integer or '{AUTO}', got {value!r}") from None
    if periods < 1:
        raise argparse.ArgumentTypeError("--cycle must be at least 1")
    return periods


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Forecast a time series with the best fitting model")
    parser.add_argument("data", help="CSV or other delimited text file with a header row")
    parser.add_argument("--dependent", help="Column to forecast (default: last column)")
    parser.add_argument("--time", dest="time_variable", help="Column holding the time of each observation")
    parser.add_argument("--cycle", type=_cycle, help=f"Periods per seasonal cycle, or '{AUTO}' to detect it")
    parser.add_argument("--criteria", default="blend", choices=[c.value for c in EvaluationCriteria],
                        help="Accuracy indicator used to choose the model")
    parser.add_argument("--horizon", type=int, default=6, help="Number of periods to forecast")
    parser.add_argument("--verbose", action="store_true", help="Log model fitting details")
    return parser


def future_series(series: Series, horizon: int) -> Series:
    """Observations for the ``horizon`` periods after the last one, with no dependent values."""
    axis = TimeAxis.from_series(series)
    return Series(
        [Observation(independent={axis.variable: axis.time_at(len(axis) + k)}) for k in range(horizon)],
        time_variable=axis.variable,
    )


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format=LOG_FORMAT)

    try:
        series = read_series(args.data, dependent=args.dependent, time_variable=args.time_variable,
                             periods_per_cycle=args.cycle)
        criteria = EvaluationCriteria(args.criteria)
        selection = run_selection(series, criteria)
        with pd.option_context("display.width", 160):
            print(selection.to_frame().drop(columns="model").to_string(index=False))
        model = selection.best
        print(f"\nSelected: {model}")

        if args.horizon > 0:
            if series.time_variable is None:
                logger.warning("No --time column given; skipping forecasts past the last observation")
            else:
                future = model.forecast(future_series(series, args.horizon))
                print()
                print(series_to_frame(future).to_string(index=False))
    except (DataError, InvalidTimeError) as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
