"""
Minimizers

A minimizer is a small box for which the objective potentially takes
a smaller value than the current upper bound on the global minimum.

The record holds the two intervals x and y defining the box, a lower
bound on the minimum over the box (f(x, y) >= lower_bound everywhere in
it) and an upper bound (f(x, y) <= upper_bound everywhere in it).

MinimizerList keeps records sorted by increasing lower bound so that,
whenever the best known upper bound drops, every record that can no
longer hold the global minimum is removed with one slice deletion.
"""

from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from typing import Iterator, List, Optional

from .bounds.interval import Interval


class ObjectiveContractError(ValueError):
    """The objective produced bounds no sound interval extension can produce."""


@dataclass(frozen=True)
class Minimizer:
    """Surviving candidate box with proven bounds of the objective over it."""
    x: Interval
    y: Interval
    lower_bound: float
    upper_bound: float

    def __post_init__(self):
        if not self.lower_bound <= self.upper_bound:
            raise ObjectiveContractError(
                f"Inconsistent bounds {self.lower_bound!r} > {self.upper_bound!r} "
                f"over box {self.x} x {self.y}"
            )

    def contains(self, px: float, py: float) -> bool:
        """Check whether the point (px, py) lies in the box."""
        return self.x.contains(px) and self.y.contains(py)

    def __repr__(self) -> str:
        return (f"{{({self.x}, {self.y}), "
                f"[{self.lower_bound!r}, {self.upper_bound!r}]}}")


class MinimizerList:
    """
    Multiset of minimizers ordered by increasing lower bound.

    Records with equal lower bounds keep their insertion order and are
    never merged. Not thread-safe on its own: SearchState serializes
    every mutation.
    """

    def __init__(self):
        # Parallel lists; _keys[i] == _records[i].lower_bound
        self._keys: List[float] = []
        self._records: List[Minimizer] = []

    def insert(self, minimizer: Minimizer) -> None:
        """Insert after every record with the same lower bound."""
        i = bisect_right(self._keys, minimizer.lower_bound)
        self._keys.insert(i, minimizer.lower_bound)
        self._records.insert(i, minimizer)

    def evict_from(self, cutoff: float) -> int:
        """
        Remove every record whose lower bound is >= cutoff.

        Returns:
            Number of records removed
        """
        i = bisect_left(self._keys, cutoff)
        removed = len(self._keys) - i
        if removed:
            del self._keys[i:]
            del self._records[i:]
        return removed

    def best(self) -> Optional[Minimizer]:
        """Record with the smallest lower bound, or None."""
        return self._records[0] if self._records else None

    @property
    def lower_bound(self) -> float:
        """Smallest lower bound over all records (+inf when empty)."""
        return self._keys[0] if self._keys else float('inf')

    def clear(self) -> None:
        self._keys.clear()
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Minimizer]:
        return iter(list(self._records))

    def __getitem__(self, index: int) -> Minimizer:
        return self._records[index]

    def __repr__(self) -> str:
        return f"MinimizerList({len(self)} records)"
