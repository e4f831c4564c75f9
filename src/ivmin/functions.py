"""
Benchmark Objectives

Functions of two variables with a known global minimum, written once
with ordinary operators so that they evaluate over Intervals.

How to add a new function:
1/ Write it as a module-level function f(x, y) (it must stay picklable
   for the process backend)
2/ Register it in FUNCTIONS with its initial domain and known minimum
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple

from .bounds.interval import Interval


@dataclass(frozen=True)
class ObjectiveFunction:
    """An objective together with the box in which a minimizer is sought."""
    name: str
    f: Callable[[Interval, Interval], Interval]
    x: Interval
    y: Interval
    minimum: float
    argmin: Tuple[float, float]

    def __call__(self, x: Interval, y: Interval) -> Interval:
        return self.f(x, y)


def sphere(x, y):
    """Minimum in box [-1,1]x[-1,1]: f(0,0) = 0"""
    return x ** 2 + y ** 2


def three_hump_camel(x, y):
    """
    Minimum in box [-5,5]x[-5,5]: f(0,0) = 0

    Scaled by a factor 600 to avoid fractional coefficients.
    """
    return 1200 * x ** 2 - 630 * x ** 4 + 100 * x ** 6 + x * y + y ** 2


def goldstein_price(x, y):
    """Minimum in box [-2,2]x[-2,2]: f(0,-1) = 3"""
    return ((1 + (x + y + 1) ** 2 *
             (19 - 14 * x + 3 * x ** 2 - 14 * y + 6 * x * y + 3 * y ** 2)) *
            (30 + (2 * x - 3 * y) ** 2 *
             (18 - 32 * x + 12 * x ** 2 + 48 * y - 36 * x * y + 27 * y ** 2)))


def beale(x, y):
    """Minimum in box [-4.5,4.5]x[-4.5,4.5]: f(3,0.5) = 0"""
    return ((1.5 - x + x * y) ** 2 +
            (2.25 - x + x * y ** 2) ** 2 +
            (2.625 - x + x * y ** 3) ** 2)


def booth(x, y):
    """Minimum in box [-10,10]x[-10,10]: f(1,3) = 0"""
    return (x + 2 * y - 7) ** 2 + (2 * x + y - 5) ** 2


FUNCTIONS: Dict[str, ObjectiveFunction] = {
    fun.name: fun for fun in [
        ObjectiveFunction("sphere", sphere,
                          Interval(-1, 1), Interval(-1, 1), 0.0, (0.0, 0.0)),
        ObjectiveFunction("three_hump_camel", three_hump_camel,
                          Interval(-5, 5), Interval(-5, 5), 0.0, (0.0, 0.0)),
        ObjectiveFunction("goldstein_price", goldstein_price,
                          Interval(-2, 2), Interval(-2, 2), 3.0, (0.0, -1.0)),
        ObjectiveFunction("beale", beale,
                          Interval(-4.5, 4.5), Interval(-4.5, 4.5), 0.0, (3.0, 0.5)),
        ObjectiveFunction("booth", booth,
                          Interval(-10, 10), Interval(-10, 10), 0.0, (1.0, 3.0)),
    ]
}


def available_functions() -> List[str]:
    return sorted(FUNCTIONS)


def get_function(name: str) -> ObjectiveFunction:
    """Look up an objective by name."""
    try:
        return FUNCTIONS[name]
    except KeyError:
        raise KeyError(
            f"Unknown function '{name}'. Available: {available_functions()}"
        ) from None
