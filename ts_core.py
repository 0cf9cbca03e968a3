from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from config import TIME_TOLERANCE


class DataError(ValueError):
    """Raised for malformed input data (empty series, irregular time axis, unknown variables)."""


class InsufficientDataError(DataError):
    """Raised when a series is too short for the requested model."""


class InvalidTimeError(ValueError):
    """Raised when a forecast is requested for a time the model cannot serve."""


class UnreachableHistoryError(InvalidTimeError):
    """Raised when a smoothing sequence is looked up before its seeded history."""

    def __init__(self, sequence: str, time: float, earliest: float):
        self.sequence = sequence
        self.time = time
        self.earliest = earliest
        super().__init__(
            f"Attempt to look up {sequence} for an invalid time {time} - "
            f"before sufficient observations were made ({earliest})."
        )


class ModelNotInitializedError(RuntimeError):
    """Raised when a model is used before init() has been called."""

    def __init__(self, message: str = "Model must be initialized with init() before use."):
        super().__init__(message)


class Observation:
    """A dependent value together with the named independent values it was observed at.

    The dependent value is ``None`` for observations that are still waiting
    for a forecast.
    """

    def __init__(self, dependent_value: Optional[float] = None,
                 independent: Optional[Mapping[str, float]] = None, **independent_values: float):
        self.dependent_value = None if dependent_value is None else float(dependent_value)
        self._independent: Dict[str, float] = {}
        for name, value in dict(independent or {}, **independent_values).items():
            self.set(name, value)

    def get(self, name: str) -> float:
        try:
            return self._independent[name]
        except KeyError:
            raise DataError(f"The independent variable {name} is not defined for {self!r}") from None

    def set(self, name: str, value: float) -> None:
        self._independent[name] = float(value)

    @property
    def independent_variables(self) -> List[str]:
        return sorted(self._independent)

    def items(self) -> List[Tuple[str, float]]:
        return sorted(self._independent.items())

    def copy(self) -> "Observation":
        return Observation(self.dependent_value, self._independent)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Observation):
            return NotImplemented
        return (self.dependent_value == other.dependent_value
                and self._independent == other._independent)

    def __repr__(self) -> str:
        values = ", ".join(f"{name}={value}" for name, value in self.items())
        return f"Observation({values}, dependent_value={self.dependent_value})"


class Series:
    """An unordered collection of observations plus time-axis metadata.

    Observations are copied on insertion so later changes to the caller's
    objects never leak into a series a model has been initialized with.
    """

    def __init__(self, observations: Iterable[Observation] = (),
                 time_variable: Optional[str] = None,
                 periods_per_cycle: Optional[int] = None):
        self._observations: List[Observation] = []
        self.time_variable = time_variable
        self._periods_per_cycle: Optional[int] = None
        if periods_per_cycle is not None:
            self.periods_per_cycle = periods_per_cycle
        self.extend(observations)

    @classmethod
    def from_values(cls, values: Sequence[float], time_variable: str = "t", start: float = 1.0,
                    interval: float = 1.0, periods_per_cycle: Optional[int] = None) -> "Series":
        """Build an evenly spaced series from a plain sequence of observed values."""
        observations = [
            Observation(value, {time_variable: start + i * interval})
            for i, value in enumerate(values)
        ]
        return cls(observations, time_variable=time_variable, periods_per_cycle=periods_per_cycle)

    @property
    def periods_per_cycle(self) -> Optional[int]:
        return self._periods_per_cycle

    @periods_per_cycle.setter
    def periods_per_cycle(self, value: Optional[int]) -> None:
        if value is not None and int(value) < 1:
            raise DataError("periods_per_cycle must be at least 1")
        self._periods_per_cycle = None if value is None else int(value)

    def add(self, observation: Observation) -> None:
        if observation is None:
            raise DataError("Series does not support None observations")
        self._observations.append(observation.copy())

    def extend(self, observations: Iterable[Observation]) -> None:
        for observation in observations:
            self.add(observation)

    def remove(self, observation: Observation) -> None:
        self._observations.remove(observation)

    def clear(self) -> None:
        self._observations.clear()

    def sort(self, variable: str) -> None:
        self._observations.sort(key=lambda obs: obs.get(variable))

    @property
    def independent_variables(self) -> List[str]:
        names = set()
        for observation in self._observations:
            names.update(observation.independent_variables)
        return sorted(names)

    def copy(self) -> "Series":
        return Series(self._observations, self.time_variable, self._periods_per_cycle)

    def __iter__(self) -> Iterator[Observation]:
        return iter(self._observations)

    def __len__(self) -> int:
        return len(self._observations)

    def __contains__(self, observation) -> bool:
        return any(observation == obs for obs in self._observations)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Series):
            return NotImplemented
        return len(self) == len(other) and all(obs in self for obs in other)

    def __repr__(self) -> str:
        return (f"Series({len(self)} observations, time_variable={self.time_variable!r}, "
                f"periods_per_cycle={self._periods_per_cycle})")


def resolve_time_variable(series: Series, time_variable: Optional[str] = None) -> Optional[str]:
    """Pick the time variable: explicit argument, then the series' own, then its only variable."""
    if time_variable is not None:
        return time_variable
    if series.time_variable is not None:
        return series.time_variable
    variables = series.independent_variables
    if len(variables) == 1:
        return variables[0]
    return None


@dataclass(frozen=True)
class TimeAxis:
    """Evenly spaced time grid of a validated series, with its observed values in time order."""

    variable: str
    start: float
    interval: float
    values: Tuple[float, ...]
    tolerance: float = TIME_TOLERANCE

    @classmethod
    def from_series(cls, series: Series, time_variable: Optional[str] = None,
                    min_observations: int = 2, tolerance: float = TIME_TOLERANCE) -> "TimeAxis":
        variable = resolve_time_variable(series, time_variable)
        if variable is None:
            raise DataError(
                "Unable to determine the time variable for the series. "
                "Set Series.time_variable before calling init."
            )
        if len(series) == 0:
            raise DataError("Series cannot be empty in call to init.")
        needed = max(2, min_observations)
        if len(series) < needed:
            raise InsufficientDataError(
                f"Series too small. Need {needed} data points, but only {len(series)} passed to init."
            )

        ordered = sorted(series, key=lambda obs: obs.get(variable))
        times = [obs.get(variable) for obs in ordered]
        interval = times[1] - times[0]
        if interval <= tolerance:
            raise DataError(f"Duplicate time values found in series, using variable '{variable}'")
        for previous, current in zip(times[1:], times[2:]):
            if abs((current - previous) - interval) > tolerance:
                raise DataError(f"Inconsistent intervals found in time series, using variable '{variable}'")

        values = []
        for obs in ordered:
            if obs.dependent_value is None:
                raise DataError(f"Observation without a dependent value in series: {obs!r}")
            values.append(obs.dependent_value)
        return cls(variable, times[0], interval, tuple(values), tolerance)

    def __len__(self) -> int:
        return len(self.values)

    @property
    def end(self) -> float:
        return self.time_at(len(self.values) - 1)

    def time_at(self, index: int) -> float:
        return self.start + index * self.interval

    def index_of(self, time: float) -> int:
        """Grid index of ``time``; may be negative or past the last observation."""
        index = int(round((time - self.start) / self.interval))
        if abs(time - self.time_at(index)) > self.tolerance:
            raise InvalidTimeError(
                f"Time value ({time}) invalid for time based forecasting model. "
                f"Valid values are in the range {self.start}-{self.end} in increments of {self.interval}."
            )
        return index

    def has_observation(self, index: int) -> bool:
        return 0 <= index < len(self.values)

    def observed(self, index: int) -> float:
        if not self.has_observation(index):
            raise InvalidTimeError(
                f"No observation found for time value, {self.variable}={self.time_at(index)}"
            )
        return self.values[index]
