"""
Directed Rounding Primitives

Pure functions returning floating-point bounds rounded toward -inf
("down") or +inf ("up") for the elementary operations used by
interval arithmetic.

The host FPU only offers round-to-nearest from Python, and its rounding
mode is process-wide state that threads would otherwise fight over.
Each primitive therefore computes the nearest result, recovers the
exact rounding error with an error-free transformation (TwoSum for
addition, Dekker's TwoProduct for multiplication) and steps one ulp
outward only when the nearest result lies on the wrong side of the
true value. Nothing here reads or writes ambient state, so the
functions are safe to call from any number of threads.

Overflow conventions:
- a finite operation that overflows to +inf rounds *down* to the
  largest finite double (the true value is finite)
- a finite operation that overflows to -inf rounds *up* to the most
  negative finite double
- results involving a genuine infinity are kept as is
- NaN always propagates
"""

import math
from typing import Tuple

import numpy as np


POS_INF = float('inf')
NEG_INF = float('-inf')
NAN = float('nan')

_FINFO = np.finfo(np.float64)

# Largest finite double
MAX_FLOAT = float(_FINFO.max)
# Smallest positive normal double
TINY = float(_FINFO.tiny)
# Binary epsilon (2^-52)
EPS = float(_FINFO.eps)

# Scale factors nudging a nearest-rounded value by two ulps
NSMALL = 1.0 - 2.0 * EPS
PSMALL = 1.0 + 2.0 * EPS

# Veltkamp splitter for doubles (2^27 + 1)
_SPLITTER = 134217729.0

# TwoProduct is exact when both factors stay within this magnitude range:
# no overflow in the split and no underflow in the error term.
_PRODUCT_SAFE_MIN = 2.0 ** -480
_PRODUCT_SAFE_MAX = 2.0 ** 480


def next_down(x: float) -> float:
    """Largest double strictly below x."""
    return float(np.nextafter(x, NEG_INF))


def next_up(x: float) -> float:
    """Smallest double strictly above x."""
    return float(np.nextafter(x, POS_INF))


def nan_min(*values: float) -> float:
    """
    Minimum that returns NaN as soon as any argument is NaN.

    The builtin min() silently returns whichever operand happens to
    compare favourably, which would drop a NaN corner product.
    """
    result = POS_INF
    for v in values:
        if math.isnan(v):
            return NAN
        if v < result:
            result = v
    return result


def nan_max(*values: float) -> float:
    """Maximum that returns NaN as soon as any argument is NaN."""
    result = NEG_INF
    for v in values:
        if math.isnan(v):
            return NAN
        if v > result:
            result = v
    return result


def two_sum(a: float, b: float) -> Tuple[float, float]:
    """
    Knuth's TwoSum: s = fl(a + b) and e with a + b == s + e exactly.

    Valid whenever fl(a + b) does not overflow.
    """
    s = a + b
    bp = s - a
    e = (a - (s - bp)) + (b - bp)
    return s, e


def _split(a: float) -> Tuple[float, float]:
    c = _SPLITTER * a
    hi = c - (c - a)
    return hi, a - hi


def two_product_error(a: float, b: float, p: float) -> float:
    """
    Dekker's TwoProduct error term: a * b == p + e exactly, p = fl(a * b).

    Only exact for factors inside the safe magnitude range.
    """
    ah, al = _split(a)
    bh, bl = _split(b)
    return al * bl - (((p - ah * bh) - al * bh) - ah * bl)


def _product_is_checkable(a: float, b: float) -> bool:
    aa = abs(a)
    ab = abs(b)
    return (_PRODUCT_SAFE_MIN <= aa <= _PRODUCT_SAFE_MAX and
            _PRODUCT_SAFE_MIN <= ab <= _PRODUCT_SAFE_MAX)


def add_down(a: float, b: float) -> float:
    """a + b rounded toward -inf."""
    s = a + b
    if math.isnan(s):
        return s
    if math.isinf(s):
        if math.isinf(a) or math.isinf(b) or s < 0:
            return s
        return MAX_FLOAT
    _, e = two_sum(a, b)
    if e < 0:
        return next_down(s)
    return s


def add_up(a: float, b: float) -> float:
    """a + b rounded toward +inf."""
    s = a + b
    if math.isnan(s):
        return s
    if math.isinf(s):
        if math.isinf(a) or math.isinf(b) or s > 0:
            return s
        return -MAX_FLOAT
    _, e = two_sum(a, b)
    if e > 0:
        return next_up(s)
    return s


def sub_down(a: float, b: float) -> float:
    """a - b rounded toward -inf."""
    return add_down(a, -b)


def sub_up(a: float, b: float) -> float:
    """a - b rounded toward +inf."""
    return add_up(a, -b)


def mul_down(a: float, b: float) -> float:
    """a * b rounded toward -inf."""
    p = a * b
    if math.isnan(p):
        return p
    if math.isinf(p):
        if math.isinf(a) or math.isinf(b) or p < 0:
            return p
        return MAX_FLOAT
    if a == 0.0 or b == 0.0:
        return p
    if _product_is_checkable(a, b):
        if two_product_error(a, b, p) < 0:
            return next_down(p)
        return p
    # Outside the exact range: assume the worst
    return next_down(p)


def mul_up(a: float, b: float) -> float:
    """a * b rounded toward +inf."""
    p = a * b
    if math.isnan(p):
        return p
    if math.isinf(p):
        if math.isinf(a) or math.isinf(b) or p > 0:
            return p
        return -MAX_FLOAT
    if a == 0.0 or b == 0.0:
        return p
    if _product_is_checkable(a, b):
        if two_product_error(a, b, p) > 0:
            return next_up(p)
        return p
    return next_up(p)


def round_down(d: float) -> float:
    """
    Push a nearest-rounded result down by two ulps (plus the smallest
    normal, for results near zero).

    Used for primitives such as pow() that do not honour a rounding
    direction. An overflowed +inf maps to the largest finite double.
    """
    if d == POS_INF:
        return MAX_FLOAT
    if d < 0.0:
        return PSMALL * d - TINY
    return NSMALL * d - TINY


def round_up(d: float) -> float:
    """Push a nearest-rounded result up by two ulps. See round_down()."""
    if d == NEG_INF:
        return -MAX_FLOAT
    if d < 0.0:
        return NSMALL * d + TINY
    return PSMALL * d + TINY


def power(base: float, n: int) -> float:
    """
    base ** n in round-to-nearest.

    Goes through numpy so that overflow yields inf instead of the
    OverflowError raised by float.__pow__.
    """
    with np.errstate(over='ignore', under='ignore', invalid='ignore'):
        return float(np.float64(base) ** n)
