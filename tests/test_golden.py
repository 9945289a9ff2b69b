import math

import numpy as np
import pytest

from lcvx import golden_section_search
from lcvx.golden import GOLDEN_RATIO, golden_section_iterations


class CountingFunction:
    def __init__(self, f):
        self.f = f
        self.calls = []

    def __call__(self, x):
        self.calls.append(x)
        return self.f(x)


def test_golden_ratio():
    assert GOLDEN_RATIO == pytest.approx(1.618033988749895)
    assert GOLDEN_RATIO**2 == pytest.approx(GOLDEN_RATIO + 1.0)


def test_iteration_count():
    assert golden_section_iterations(0.0, 10.0, 1e-4) == 25
    assert golden_section_iterations(10.0, 0.0, 1e-4) == 25
    assert golden_section_iterations(0.0, 1e-5, 1e-4) == 1


def test_finds_quadratic_minimum():
    f = CountingFunction(lambda x: (x - 5.0) ** 2)
    x, fx = golden_section_search(f, 0.0, 10.0, 1e-4)
    assert abs(x - 5.0) <= 1e-4
    assert fx <= 1e-8
    assert fx == f(x)


def test_one_new_evaluation_per_iteration():
    f = CountingFunction(lambda x: (x - 5.0) ** 2)
    golden_section_search(f, 0.0, 10.0, 1e-4)
    n = golden_section_iterations(0.0, 10.0, 1e-4)
    assert len(f.calls) == n + 1
    # the last evaluation is the returned point
    assert f.calls[-1] == pytest.approx(5.0, abs=1e-4)


def test_reversed_bracket():
    x, _ = golden_section_search(lambda x: (x - 2.5) ** 2, 10.0, 0.0, 1e-5)
    assert x == pytest.approx(2.5, abs=1e-5)


def test_infinite_values_on_part_of_bracket():
    def f(x):
        return math.inf if x < 3.0 else (x - 5.0) ** 2

    x, fx = golden_section_search(f, 0.0, 10.0, 1e-4)
    assert x == pytest.approx(5.0, abs=1e-4)
    assert np.isfinite(fx)


def test_monotone_function_converges_to_endpoint():
    x, _ = golden_section_search(lambda x: x, 0.0, 10.0, 1e-4)
    assert 0.0 <= x <= 1e-4


def test_degenerate_bracket():
    f = CountingFunction(lambda x: (x - 5.0) ** 2)
    x, fx = golden_section_search(f, 2.0, 2.0, 1e-3)
    assert x == 2.0
    assert fx == 9.0
    assert len(f.calls) == 2
