"""
Derivative-free search for smoothing constants.

A five point bracketing search: evaluate models at the ends, the middle and
the two quarter points of the current bracket, keep the winner and its two
neighbours, and repeat until the bracket is narrower than the tolerance.
Nesting the search (one level per smoothing constant) calibrates models with
several constants. This is a fast, locally convergent heuristic; it is not
guaranteed to find the global minimum of the MSE surface.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Tuple

from config import (
    DEFAULT_SMOOTHING_CONSTANT_TOLERANCE,
    MAX_SMOOTHING_CONSTANT_TOLERANCE,
    SMOOTHING_CONSTANT_RANGE,
)

logger = logging.getLogger(__name__)


@dataclass
class SearchStep:
    """One narrowing iteration: the bracket searched and the best candidate found in it."""

    low: float
    high: float
    best_value: float
    best_mse: float


@dataclass
class SearchResult:
    model: object
    value: float
    steps: List[SearchStep] = field(default_factory=list)

    @property
    def mse(self) -> float:
        return self.model.mse


def validate_tolerance(tolerance: float, name: str = "tolerance") -> None:
    if tolerance <= 0.0 or tolerance > MAX_SMOOTHING_CONSTANT_TOLERANCE:
        raise ValueError(
            f"The value of {name} must be greater than 0.0 and no more than "
            f"{MAX_SMOOTHING_CONSTANT_TOLERANCE}. Suggested value: {DEFAULT_SMOOTHING_CONSTANT_TOLERANCE}"
        )


def bracket_search(build: Callable[[float], object],
                   low: float = SMOOTHING_CONSTANT_RANGE[0],
                   high: float = SMOOTHING_CONSTANT_RANGE[1],
                   tolerance: float = DEFAULT_SMOOTHING_CONSTANT_TOLERANCE,
                   name: str = "alpha") -> SearchResult:
    """
    Find the constant in ``[low, high]`` whose model has the lowest MSE.

    ``build`` must return an initialized model for a given constant. A winner
    on either edge of the bracket (which includes a tie across all five
    candidates) ends the search immediately.
    """
    validate_tolerance(tolerance, f"{name} tolerance")
    low = max(low, SMOOTHING_CONSTANT_RANGE[0])
    high = min(high, SMOOTHING_CONSTANT_RANGE[1])
    if low > high:
        raise ValueError(f"Empty search range for {name}: [{low}, {high}]")

    mid = (low + high) / 2.0
    triplet: List[Tuple[float, object]] = [(low, build(low)), (mid, build(mid)), (high, build(high))]
    steps: List[SearchStep] = []

    while True:
        (lo, _), (md, md_model), (hi, _) = triplet
        if abs(md - lo) < tolerance and abs(hi - md) < tolerance:
            return SearchResult(md_model, md, steps)

        q1 = (lo + md) / 2.0
        q3 = (md + hi) / 2.0
        candidates = [triplet[0], (q1, build(q1)), triplet[1], (q3, build(q3)), triplet[2]]

        best = 0
        for index in range(1, 5):
            if candidates[index][1].mse < candidates[best][1].mse:
                best = index

        best_value, best_model = candidates[best]
        steps.append(SearchStep(lo, hi, best_value, best_model.mse))
        logger.debug("%s in [%.6f, %.6f]: best %.6f (MSE=%.6g)", name, lo, hi, best_value, best_model.mse)

        if best in (0, 4):
            return SearchResult(best_model, best_value, steps)
        triplet = candidates[best - 1:best + 2]
