"""
Interval Arithmetic

Closed real intervals [lo, hi] with sound (outward-rounded) operators
for the evaluation of polynomials: +, -, * and non-negative integer
powers.

Every result is a guaranteed enclosure of the exact real result set:
addition, subtraction and multiplication use the directed-rounding
primitives in ``rounding``; powers go through the host pow() in
round-to-nearest and are then biased outward by two ulps.

Conventions:
- lo > hi denotes the empty interval. It is a valid value, not an
  error; arithmetic on an empty operand yields the empty interval.
- NaN bounds propagate through every operator.
- Plain Python numbers mix freely with intervals (``1200 * x ** 2``),
  each being treated as the point interval [v, v].

See: Ramon Moore, Interval Analysis. Prentice-Hall, 1966.
"""

import math
import numbers
from dataclasses import dataclass
from typing import Optional, Tuple

from .rounding import (
    MAX_FLOAT,
    NAN,
    NEG_INF,
    POS_INF,
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
)


@dataclass(frozen=True)
class Interval:
    """
    A closed interval [lo, hi] of doubles.

    Interval()      -> [-inf, +inf]
    Interval(v)     -> [v, v]
    Interval(l, r)  -> [l, r]
    """
    lo: Optional[float] = None
    hi: Optional[float] = None

    def __post_init__(self):
        lo, hi = self.lo, self.hi
        if lo is None and hi is None:
            lo, hi = NEG_INF, POS_INF
        elif hi is None:
            hi = lo
        elif lo is None:
            lo = NEG_INF
        object.__setattr__(self, 'lo', float(lo))
        object.__setattr__(self, 'hi', float(hi))

    @classmethod
    def point(cls, v: float) -> 'Interval':
        """Create a point interval [v, v]."""
        return cls(v, v)

    @classmethod
    def empty(cls) -> 'Interval':
        """Canonical empty interval."""
        return cls(POS_INF, NEG_INF)

    @classmethod
    def entire(cls) -> 'Interval':
        """Create the entire real line."""
        return cls(NEG_INF, POS_INF)

    @property
    def is_empty(self) -> bool:
        return self.lo > self.hi

    @property
    def has_nan(self) -> bool:
        return math.isnan(self.lo) or math.isnan(self.hi)

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.lo) and math.isfinite(self.hi)

    @property
    def width(self) -> float:
        """hi - lo; NaN when empty, +inf when unbounded."""
        if self.is_empty:
            return NAN
        if math.isinf(self.lo) or math.isinf(self.hi):
            return POS_INF
        return self.hi - self.lo

    @property
    def midpoint(self) -> float:
        """
        Midpoint of the interval.

        An infinite bound is replaced by the largest finite double of the
        same sign so that bisecting an unbounded interval still makes
        progress.
        """
        if self.is_empty:
            return NAN
        if self.lo == NEG_INF:
            return -MAX_FLOAT
        if self.hi == POS_INF:
            return MAX_FLOAT
        middle = 0.5 * (self.lo + self.hi)
        if math.isinf(middle):
            # lo + hi overflowed
            return 0.5 * self.lo + 0.5 * self.hi
        return middle

    def contains(self, v: float) -> bool:
        return self.lo <= v <= self.hi

    def contains_zero(self) -> bool:
        return self.lo <= 0.0 <= self.hi

    def issubset(self, other: 'Interval') -> bool:
        """True when self is included in other (the empty set always is)."""
        if self.is_empty:
            return True
        return other.lo <= self.lo and self.hi <= other.hi

    def bisect(self) -> Tuple['Interval', 'Interval']:
        """Split at the midpoint into two intervals sharing that point."""
        m = self.midpoint
        return Interval(self.lo, m), Interval(m, self.hi)

    # Arithmetic operations with outward rounding

    def __neg__(self) -> 'Interval':
        if self.is_empty:
            return Interval.empty()
        return Interval(-self.hi, -self.lo)

    def __pos__(self) -> 'Interval':
        return self

    def __add__(self, other) -> 'Interval':
        other = _as_interval(other)
        if other is None:
            return NotImplemented
        if self.is_empty or other.is_empty:
            return Interval.empty()
        return Interval(
            add_down(self.lo, other.lo),
            add_up(self.hi, other.hi)
        )

    def __radd__(self, other) -> 'Interval':
        return self.__add__(other)

    def __sub__(self, other) -> 'Interval':
        other = _as_interval(other)
        if other is None:
            return NotImplemented
        if self.is_empty or other.is_empty:
            return Interval.empty()
        return Interval(
            sub_down(self.lo, other.hi),
            sub_up(self.hi, other.lo)
        )

    def __rsub__(self, other) -> 'Interval':
        other = _as_interval(other)
        if other is None:
            return NotImplemented
        return other.__sub__(self)

    def __mul__(self, other) -> 'Interval':
        other = _as_interval(other)
        if other is None:
            return NotImplemented
        if self.is_empty or other.is_empty:
            return Interval.empty()

        a, b = self.lo, self.hi
        c, d = other.lo, other.hi
        return Interval(
            nan_min(mul_down(a, c), mul_down(a, d),
                    mul_down(b, c), mul_down(b, d)),
            nan_max(mul_up(a, c), mul_up(a, d),
                    mul_up(b, c), mul_up(b, d))
        )

    def __rmul__(self, other) -> 'Interval':
        return self.__mul__(other)

    def __pow__(self, n) -> 'Interval':
        """Integer power x^n, n >= 0."""
        if isinstance(n, bool) or not isinstance(n, numbers.Integral):
            return NotImplemented
        return self._pow_int(int(n))

    def _pow_int(self, n: int) -> 'Interval':
        if n < 0:
            raise ValueError(f"Negative exponent not supported: {n}")
        if n == 0:
            return Interval.point(1.0)
        if n == 1:
            return self
        if self.is_empty:
            return Interval.empty()

        if n % 2 == 0:
            # Even powers are never negative: clamp the biased lower bound at 0
            if self.lo >= 0:
                return Interval(
                    nan_max(0.0, round_down(power(self.lo, n))),
                    round_up(power(self.hi, n))
                )
            if self.hi <= 0:
                return Interval(
                    nan_max(0.0, round_down(power(self.hi, n))),
                    round_up(power(self.lo, n))
                )
            # Straddles zero: the minimum 0 is attained
            return Interval(
                0.0,
                nan_max(round_up(power(self.hi, n)),
                        round_up(power(self.lo, n)))
            )

        # Odd powers are monotonic
        return Interval(
            round_down(power(self.lo, n)),
            round_up(power(self.hi, n))
        )

    def __repr__(self) -> str:
        if self.is_empty:
            return "[Empty]"
        return f"[{self.lo!r}, {self.hi!r}]"


def _as_interval(value) -> Optional[Interval]:
    """Coerce a real scalar to a point interval; None if not possible."""
    if isinstance(value, Interval):
        return value
    if isinstance(value, numbers.Real):
        return Interval.point(float(value))
    return None
