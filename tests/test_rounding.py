"""
Tests for Directed Rounding Primitives
"""

import math
import threading
from fractions import Fraction

import numpy as np
import pytest
from ivmin.bounds.rounding import (
    MAX_FLOAT,
    TINY,
    add_down,
    add_up,
    mul_down,
    mul_up,
    nan_max,
    nan_min,
    power,
    round_down,
    round_up,
    sub_down,
    sub_up,
    two_sum,
)


class TestAddition:
    """Test directed addition and subtraction."""

    def test_exact_sum_not_widened(self):
        assert add_down(1.0, 2.0) == 3.0
        assert add_up(1.0, 2.0) == 3.0
        assert sub_down(5.0, 2.0) == 3.0
        assert sub_up(5.0, 2.0) == 3.0

    def test_inexact_sum(self):
        exact = Fraction(0.1) + Fraction(0.2)
        lo = add_down(0.1, 0.2)
        hi = add_up(0.1, 0.2)
        assert Fraction(lo) < exact < Fraction(hi)
        assert hi == 0.1 + 0.2  # nearest already rounds up here
        assert lo == np.nextafter(0.1 + 0.2, -np.inf)

    def test_two_sum_is_exact(self):
        s, e = two_sum(1.0, 1e-20)
        assert s == 1.0
        assert Fraction(s) + Fraction(e) == Fraction(1.0) + Fraction(1e-20)

    def test_random_sums(self):
        rng = np.random.default_rng(0)
        for _ in range(500):
            a, b = (float(v) for v in rng.normal(0, 1e3, 2) * 10.0 ** rng.integers(-20, 20, 2))
            exact = Fraction(a) + Fraction(b)
            assert Fraction(add_down(a, b)) <= exact <= Fraction(add_up(a, b))
            exact = Fraction(a) - Fraction(b)
            assert Fraction(sub_down(a, b)) <= exact <= Fraction(sub_up(a, b))

    def test_overflow(self):
        assert add_down(MAX_FLOAT, MAX_FLOAT) == MAX_FLOAT
        assert add_up(MAX_FLOAT, MAX_FLOAT) == math.inf
        assert add_down(-MAX_FLOAT, -MAX_FLOAT) == -math.inf
        assert add_up(-MAX_FLOAT, -MAX_FLOAT) == -MAX_FLOAT

    def test_infinite_operands_kept(self):
        assert add_down(math.inf, 1.0) == math.inf
        assert add_up(-math.inf, 1.0) == -math.inf

    def test_nan_propagates(self):
        assert math.isnan(add_down(math.nan, 1.0))
        assert math.isnan(add_up(math.inf, -math.inf))


class TestMultiplication:
    """Test directed multiplication."""

    def test_exact_product_not_widened(self):
        assert mul_down(3.0, 4.0) == 12.0
        assert mul_up(3.0, 4.0) == 12.0
        assert mul_down(-0.5, 8.0) == -4.0

    def test_inexact_product(self):
        exact = Fraction(3.0) * Fraction(0.1)
        lo = mul_down(3.0, 0.1)
        hi = mul_up(3.0, 0.1)
        assert Fraction(lo) < exact < Fraction(hi)

    def test_random_products(self):
        rng = np.random.default_rng(1)
        for _ in range(500):
            a, b = (float(v) for v in rng.normal(0, 1, 2) * 10.0 ** rng.integers(-150, 150, 2))
            exact = Fraction(a) * Fraction(b)
            assert Fraction(mul_down(a, b)) <= exact <= Fraction(mul_up(a, b))

    def test_outside_exact_range(self):
        for a, b in [(1e-300, 1e-10), (1e200, 1e100), (-3e-170, 7e-160)]:
            exact = Fraction(a) * Fraction(b)
            assert Fraction(mul_down(a, b)) <= exact <= Fraction(mul_up(a, b))

    def test_zero_factor(self):
        assert mul_down(0.0, 5.0) == 0.0
        assert mul_up(-7.0, 0.0) == 0.0

    def test_overflow(self):
        assert mul_down(1e300, 1e10) == MAX_FLOAT
        assert mul_up(1e300, 1e10) == math.inf
        assert mul_up(-1e300, 1e10) == -MAX_FLOAT
        assert mul_down(-1e300, 1e10) == -math.inf

    def test_inf_times_zero_is_nan(self):
        assert math.isnan(mul_down(math.inf, 0.0))


class TestNanMinMax:
    """NaN-propagating min/max."""

    def test_regular(self):
        assert nan_min(3.0, 1.0, 2.0) == 1.0
        assert nan_max(3.0, 1.0, 2.0) == 3.0

    def test_nan_wins(self):
        # builtin min(1.0, nan) returns 1.0
        assert min(1.0, math.nan) == 1.0
        assert math.isnan(nan_min(1.0, math.nan))
        assert math.isnan(nan_max(math.nan, 1.0))


class TestBiasCorrection:
    """Test the outward nudges applied to pow() results."""

    def test_round_down(self):
        assert round_down(4.0) < 4.0
        assert round_down(-4.0) < -4.0
        assert round_down(0.0) == -TINY

    def test_round_up(self):
        assert round_up(4.0) > 4.0
        assert round_up(-4.0) > -4.0
        assert round_up(0.0) == TINY

    def test_infinite_targets(self):
        assert round_down(math.inf) == MAX_FLOAT
        assert round_up(-math.inf) == -MAX_FLOAT
        assert round_down(-math.inf) == -math.inf
        assert round_up(math.inf) == math.inf

    def test_power_overflow_does_not_raise(self):
        assert power(1e200, 2) == math.inf
        assert power(-1e200, 3) == -math.inf
        assert power(-2.0, 3) == -8.0


class TestThreadSafety:
    """No ambient state: concurrent use gives the same answers."""

    def test_concurrent_calls(self):
        rng = np.random.default_rng(5)
        pairs = [tuple(float(v) for v in rng.normal(0, 10, 2)) for _ in range(200)]
        expected = [(add_down(a, b), add_up(a, b), mul_down(a, b), mul_up(a, b))
                    for a, b in pairs]
        mismatches = []

        def work():
            for (a, b), exp in zip(pairs, expected):
                got = (add_down(a, b), add_up(a, b), mul_down(a, b), mul_up(a, b))
                if got != exp:
                    mismatches.append((a, b))

        threads = [threading.Thread(target=work) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert mismatches == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
