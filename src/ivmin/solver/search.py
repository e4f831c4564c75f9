"""
Interval Branch-and-Bound Search

Finds a certified enclosure of the global minimum of f(x, y) over a
box:

1. Evaluate f over the box with interval arithmetic
2. Prune the box if its lower bound exceeds the best upper bound
3. Tighten the best upper bound (and discard stale minimizers) when
   the box proves a smaller one
4. Keep the box as a minimizer once its width is below the threshold
5. Otherwise bisect both axes and recurse into the four quadrants

The four recursive calls of a split run as tasks on a fixed-size thread
pool. The best upper bound and the minimizer list are shared by every
branch and only mutated inside SearchState's lock.
"""

import math
import threading
import time
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, List, Optional, Sequence, Tuple

from ..bounds.interval import Interval
from ..minimizer import Minimizer, MinimizerList, ObjectiveContractError


Objective = Callable[[Interval, Interval], Interval]
Box = Tuple[Interval, Interval]


@dataclass
class SearchConfig:
    """Configuration for the branch-and-bound engine."""
    threshold: float = 1e-3
    workers: int = 4
    spawn_depth: int = 4
    strict: bool = False
    log_frequency: int = 0

    def __post_init__(self):
        if not (self.threshold > 0) or math.isinf(self.threshold):
            raise ValueError(f"threshold must be positive and finite, got {self.threshold!r}")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        if self.spawn_depth < 0:
            raise ValueError(f"spawn_depth must be >= 0, got {self.spawn_depth}")
        if self.log_frequency < 0:
            raise ValueError(f"log_frequency must be >= 0, got {self.log_frequency}")


@dataclass
class SearchState:
    """
    Best upper bound and minimizer list shared by all branches of a run.

    improve() and record() are mutually exclusive: a record can never be
    inserted between an update of min_ub and the matching eviction.
    Reading min_ub for the prune test needs no lock, a stale (larger)
    value only costs extra exploration.
    """
    min_ub: float = float('inf')
    minimizers: MinimizerList = field(default_factory=MinimizerList)

    boxes_evaluated: int = 0
    boxes_pruned: int = 0
    improvements: int = 0
    ill_formed: int = 0

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)
    _stats_lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def improve(self, upper_bound: float) -> bool:
        """
        Lower min_ub to upper_bound and evict minimizers with a lower
        bound >= the new value. No-op unless upper_bound < min_ub.
        """
        with self._lock:
            if not upper_bound < self.min_ub:
                return False
            self.min_ub = upper_bound
            self.minimizers.evict_from(upper_bound)
            self.improvements += 1
            return True

    def record(self, minimizer: Minimizer) -> bool:
        """Insert a converged box unless min_ub has already dropped below it."""
        with self._lock:
            if minimizer.lower_bound > self.min_ub:
                self.boxes_pruned += 1
                return False
            self.minimizers.insert(minimizer)
            return True

    def count_evaluated(self) -> int:
        with self._stats_lock:
            self.boxes_evaluated += 1
            return self.boxes_evaluated

    def count_pruned(self) -> None:
        with self._lock:
            self.boxes_pruned += 1

    def count_ill_formed(self) -> None:
        with self._lock:
            self.ill_formed += 1
            self.boxes_pruned += 1


@dataclass
class SearchResult:
    """Outcome of a branch-and-bound run."""
    min_ub: float
    minimizers: List[Minimizer]
    boxes_evaluated: int = 0
    boxes_pruned: int = 0
    improvements: int = 0
    ill_formed: int = 0
    elapsed: float = 0.0

    @property
    def lower_bound(self) -> float:
        """Certified lower end of the global minimum enclosure."""
        if not self.minimizers:
            return float('inf')
        return self.minimizers[0].lower_bound

    @property
    def gap(self) -> float:
        return self.min_ub - self.lower_bound

    @classmethod
    def from_state(cls, state: SearchState, elapsed: float) -> 'SearchResult':
        with state._lock:
            return cls(
                min_ub=state.min_ub,
                minimizers=list(state.minimizers),
                boxes_evaluated=state.boxes_evaluated,
                boxes_pruned=state.boxes_pruned,
                improvements=state.improvements,
                ill_formed=state.ill_formed,
                elapsed=elapsed,
            )


def split_box(x: Interval, y: Interval) -> List[Box]:
    """Split a box into four sub-boxes by bisecting both dimensions."""
    xl, xr = x.bisect()
    yl, yr = y.bisect()
    return [(xl, yl), (xl, yr), (xr, yl), (xr, yr)]


def check_domain(iv: Interval, name: str) -> None:
    """Reject initial domains the search cannot shrink below a threshold."""
    if iv.is_empty or iv.has_nan:
        raise ValueError(f"Initial domain {name} = {iv} is empty or NaN")
    if not iv.is_finite:
        raise ValueError(f"Initial domain {name} = {iv} must be bounded")


def _fork_join(executor: Executor, tasks: Sequence[Callable[[], None]]) -> None:
    """
    Run tasks on the executor and wait for all of them.

    A task still queued when we come to wait on it is cancelled and run
    in the calling thread, so a thread only ever blocks on tasks that
    another thread is actively running. This keeps nested joins on a
    bounded pool free of deadlock.

    If a task raises, siblings that have not started yet are cancelled
    before the exception propagates.
    """
    futures = [executor.submit(task) for task in tasks]
    try:
        for future, task in zip(futures, tasks):
            if future.cancel():
                task()
            else:
                future.result()
    except BaseException:
        for future in futures:
            future.cancel()
        raise


class BranchAndBound:
    """
    Interval branch-and-bound minimizer for functions of two variables.

    The objective must be an inclusion-monotonic interval extension:
    f(A) must enclose f(B) whenever box B is inside box A.
    """

    def __init__(self, objective: Objective, config: SearchConfig = None):
        self.objective = objective
        self.config = config or SearchConfig()
        self._start_time = 0.0

    def solve(
        self,
        x: Interval,
        y: Interval,
        state: Optional[SearchState] = None
    ) -> SearchResult:
        """
        Search box x * y.

        Args:
            x: Initial domain of the first variable
            y: Initial domain of the second variable
            state: Shared state to continue from (default: fresh state)

        Returns:
            SearchResult summarizing the state after the search
        """
        check_domain(x, "x")
        check_domain(y, "y")
        if state is None:
            state = SearchState()

        self._start_time = time.time()

        if self.config.workers == 1:
            self._search(x, y, state, 0, None)
        else:
            with ThreadPoolExecutor(
                max_workers=self.config.workers,
                thread_name_prefix="ivmin-search"
            ) as executor:
                self._search(x, y, state, 0, executor)

        return SearchResult.from_state(state, time.time() - self._start_time)

    def _evaluate(self, x: Interval, y: Interval, state: SearchState) -> Optional[Interval]:
        """Evaluate the objective; None if the result is ill-formed and dropped."""
        fxy = self.objective(x, y)
        if not isinstance(fxy, Interval):
            raise TypeError(
                f"Objective must return an Interval, got {type(fxy).__name__}"
            )

        n = state.count_evaluated()
        if self.config.log_frequency and n % self.config.log_frequency == 0:
            self._log_progress(state)

        if fxy.is_empty or fxy.has_nan:
            if self.config.strict:
                raise ObjectiveContractError(
                    f"Objective returned {fxy} over box {x} x {y}"
                )
            state.count_ill_formed()
            return None
        return fxy

    def _search(
        self,
        x: Interval,
        y: Interval,
        state: SearchState,
        depth: int,
        executor: Optional[Executor]
    ) -> None:
        fxy = self._evaluate(x, y, state)
        if fxy is None:
            return

        # Box cannot contain the minimum?
        if fxy.lo > state.min_ub:
            state.count_pruned()
            return

        # Box proves a smaller upper bound?
        if fxy.hi < state.min_ub:
            state.improve(fxy.hi)

        # Boxes are always split along both dimensions, checking x is enough
        if x.width <= self.config.threshold:
            state.record(Minimizer(x, y, fxy.lo, fxy.hi))
            return

        children = split_box(x, y)
        if executor is not None and depth < self.config.spawn_depth:
            _fork_join(executor, [
                partial(self._search, cx, cy, state, depth + 1, executor)
                for cx, cy in children
            ])
        else:
            for cx, cy in children:
                self._search(cx, cy, state, depth + 1, executor)

    def _log_progress(self, state: SearchState):
        """Log progress."""
        elapsed = time.time() - self._start_time
        print(
            f"Boxes: {state.boxes_evaluated:,} | "
            f"Pruned: {state.boxes_pruned:,} | "
            f"Minimizers: {len(state.minimizers):,} | "
            f"UB: {state.min_ub:.6g} | "
            f"Time: {elapsed:.2f}s"
        )


def minimize(
    objective: Objective,
    x: Interval,
    y: Interval,
    threshold: float,
    workers: int = 4,
    **kwargs
) -> SearchResult:
    """
    Minimize objective over x * y until boxes are narrower than threshold.

    Extra keyword arguments are passed to SearchConfig.
    """
    config = SearchConfig(threshold=threshold, workers=workers, **kwargs)
    return BranchAndBound(objective, config).solve(x, y)
