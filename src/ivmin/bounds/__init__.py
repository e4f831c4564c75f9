"""
Bounds Module - Sound Interval Enclosures

Provides:
- Directed-rounding primitives (pure functions, no FPU mode switching)
- Interval: closed intervals with outward-rounded +, -, * and powers
"""

from .interval import Interval
from .rounding import (
    add_down,
    add_up,
    sub_down,
    sub_up,
    mul_down,
    mul_up,
    round_down,
    round_up,
    nan_min,
    nan_max,
    MAX_FLOAT,
    TINY,
    EPS,
)

__all__ = [
    'Interval',
    'add_down',
    'add_up',
    'sub_down',
    'sub_up',
    'mul_down',
    'mul_up',
    'round_down',
    'round_up',
    'nan_min',
    'nan_max',
    'MAX_FLOAT',
    'TINY',
    'EPS',
]
