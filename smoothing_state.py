"""
Memo tables for the recursive sequences of a time based model.

Each sequence (forecast, slope, base, trend, seasonal index...) is defined by
a rule that computes the value at a grid index from values at earlier
indices. Values are computed at most once and kept for the lifetime of the
model; ``init`` walks the grid oldest to newest so a rule only ever finds its
predecessors already in the table.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

from ts_core import TimeAxis, UnreachableHistoryError

Rule = Callable[[int], float]


class SmoothingState:
    """Per-model cache mapping grid indices to derived quantities, one table per sequence."""

    def __init__(self, axis: TimeAxis):
        self.axis = axis
        self._tables: Dict[str, Dict[int, float]] = {}
        self._rules: Dict[str, Rule] = {}
        self._floors: Dict[str, int] = {}

    def define(self, name: str, rule: Rule, floor: int = 0) -> None:
        """Register a sequence; indices below ``floor`` can only come from seeding."""
        self._tables[name] = {}
        self._rules[name] = rule
        self._floors[name] = floor

    def seed(self, name: str, index: int, value: float) -> None:
        self._tables[name][index] = value

    def lookup(self, name: str, time: float) -> float:
        return self.at(name, self.axis.index_of(time))

    def at(self, name: str, index: int) -> float:
        table = self._tables[name]
        if index in table:
            return table[index]
        if index < self._floors[name]:
            raise UnreachableHistoryError(name, self.axis.time_at(index), self.earliest(name))
        value = self._rules[name](index)
        table[index] = value
        return value

    def known(self, name: str, index: int) -> Optional[float]:
        """Return the memoised value at ``index`` without computing it."""
        return self._tables[name].get(index)

    def fill(self, name: str, stop: int, start: Optional[int] = None) -> None:
        """Compute ``name`` for every index in ``[start, stop)`` in time order."""
        if start is None:
            start = self._floors[name]
        for index in range(start, stop):
            self.at(name, index)

    def earliest(self, name: str) -> float:
        table = self._tables[name]
        first = min(table) if table else self._floors[name]
        return self.axis.time_at(min(first, self._floors[name]))

    def size(self, name: str) -> int:
        return len(self._tables[name])
