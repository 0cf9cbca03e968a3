import os, sys
import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from ts_core import (
    DataError, InsufficientDataError, InvalidTimeError, Observation, Series, TimeAxis,
    UnreachableHistoryError, resolve_time_variable,
)


def _make_series(values=(4.0, 5.0, 6.0, 9.0), start=101.0, interval=1.0):
    return Series.from_values(values, time_variable="t", start=start, interval=interval)


def test_observation_equality_ignores_insertion_order():
    a = Observation(1.0, x=2.0, t=3.0)
    b = Observation(1.0)
    b.set("t", 3.0)
    b.set("x", 2.0)
    assert a == b
    assert a.independent_variables == ["t", "x"]


def test_unknown_variable_raises():
    obs = Observation(5.0)
    with pytest.raises(DataError):
        obs.get("y")


def test_series_copies_observations_on_add():
    obs = Observation(1.0, t=1.0)
    series = Series([obs])
    obs.dependent_value = 99.0
    assert next(iter(series)).dependent_value == 1.0


def test_series_rejects_none_and_bad_cycle():
    with pytest.raises(DataError):
        Series().add(None)
    with pytest.raises(DataError):
        Series(periods_per_cycle=0)


def test_series_equality_is_unordered():
    a = Series([Observation(1.0, t=1.0), Observation(2.0, t=2.0)])
    b = Series([Observation(2.0, t=2.0), Observation(1.0, t=1.0)])
    assert a == b
    b.remove(Observation(2.0, t=2.0))
    assert a != b


def test_series_sort_and_variables():
    series = Series([Observation(2.0, t=2.0, x=1.0), Observation(1.0, t=1.0)])
    series.sort("t")
    assert [obs.dependent_value for obs in series] == [1.0, 2.0]
    assert series.independent_variables == ["t", "x"]


def test_resolve_time_variable_order():
    series = Series([Observation(1.0, x=1.0)])
    assert resolve_time_variable(series) == "x"
    assert resolve_time_variable(series, "t") == "t"
    series.time_variable = "z"
    assert resolve_time_variable(series) == "z"
    assert resolve_time_variable(Series([Observation(1.0, a=1.0, b=2.0)])) is None


def test_time_axis_from_unsorted_series():
    series = Series([Observation(3.0, t=30.0), Observation(1.0, t=10.0), Observation(2.0, t=20.0)])
    axis = TimeAxis.from_series(series)
    assert axis.start == 10.0
    assert axis.interval == 10.0
    assert axis.values == (1.0, 2.0, 3.0)
    assert axis.end == 30.0


def test_time_axis_index_of_tolerates_rounding():
    axis = TimeAxis.from_series(_make_series(start=0.0, interval=0.1))
    assert axis.index_of(0.30000000000000004) == 3
    assert axis.index_of(1.0) == 10
    assert axis.index_of(-0.2) == -2


def test_time_axis_rejects_off_grid_time():
    axis = TimeAxis.from_series(_make_series())
    with pytest.raises(InvalidTimeError):
        axis.index_of(101.5)


def test_time_axis_observed_outside_history():
    axis = TimeAxis.from_series(_make_series())
    assert axis.observed(3) == 9.0
    with pytest.raises(InvalidTimeError, match="No observation found"):
        axis.observed(4)


def test_time_axis_validation_errors():
    with pytest.raises(DataError):
        TimeAxis.from_series(Series(time_variable="t"))
    with pytest.raises(InsufficientDataError, match="Need 2 data points, but only 1"):
        TimeAxis.from_series(_make_series(values=(1.0,)))
    duplicate = Series([Observation(1.0, t=1.0), Observation(2.0, t=1.0)])
    with pytest.raises(DataError, match="Duplicate"):
        TimeAxis.from_series(duplicate)
    irregular = Series([Observation(1.0, t=1.0), Observation(2.0, t=2.0), Observation(3.0, t=4.0)])
    with pytest.raises(DataError, match="Inconsistent"):
        TimeAxis.from_series(irregular)
    ambiguous = Series([Observation(1.0, a=1.0, b=1.0), Observation(2.0, a=2.0, b=2.0)])
    with pytest.raises(DataError):
        TimeAxis.from_series(ambiguous)


def test_unreachable_history_message():
    err = UnreachableHistoryError("forecast", 1.0, 2.0)
    assert isinstance(err, InvalidTimeError)
    assert "before sufficient observations were made (2.0)" in str(err)
