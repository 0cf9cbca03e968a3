import os, sys
import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from parameter_search import bracket_search, validate_tolerance


class _Quadratic:
    """Stand-in model whose MSE is a parabola in the searched constant."""

    def __init__(self, value, optimum=0.3):
        self.value = value
        self.mse = (value - optimum) ** 2


class _Flat:
    def __init__(self, value):
        self.value = value
        self.mse = 1.0


def test_finds_interior_minimum():
    result = bracket_search(_Quadratic, tolerance=0.001)
    assert result.value == pytest.approx(0.3, abs=0.002)
    assert result.model.value == result.value


def test_best_mse_never_increases():
    result = bracket_search(_Quadratic, tolerance=0.0001)
    mses = [step.best_mse for step in result.steps]
    assert len(mses) > 3
    assert all(later <= earlier for earlier, later in zip(mses, mses[1:]))
    widths = [step.high - step.low for step in result.steps]
    assert all(later < earlier for earlier, later in zip(widths, widths[1:]))


def test_edge_winner_stops_search():
    result = bracket_search(lambda v: _Quadratic(v, optimum=0.0), tolerance=0.001)
    assert result.value == 0.0
    assert len(result.steps) == 1


def test_ties_pick_lowest_candidate():
    result = bracket_search(_Flat, tolerance=0.01)
    assert result.value == 0.0
    assert len(result.steps) == 1


@pytest.mark.parametrize("tolerance", [0.0, -0.1, 0.6])
def test_invalid_tolerance(tolerance):
    with pytest.raises(ValueError):
        validate_tolerance(tolerance)
    with pytest.raises(ValueError):
        bracket_search(_Quadratic, tolerance=tolerance)
