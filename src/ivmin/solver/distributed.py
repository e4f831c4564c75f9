"""
Distributed Partition / Reduce

Splits the search domain across independent worker processes:

1. Partition: the x-domain is cut into N contiguous equal-width slices,
   the y-domain into N sub-ranges
2. Broadcast: every worker receives the objective, the search
   configuration and the full list of y sub-ranges
3. Scatter: worker i receives x-slice i
4. Each worker runs the branch-and-bound engine over its x-slice and
   every y sub-range, with its own private SearchState
5. Reduce: the global upper bound is the minimum of the per-worker
   upper bounds

Workers share no memory. Only scalars travel back; the per-worker
minimizer lists are never merged.
"""

import math
import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ..bounds.interval import Interval
from .search import (
    BranchAndBound,
    Objective,
    SearchConfig,
    SearchState,
    check_domain,
)


BACKENDS = ("process", "serial", "mpi")


@dataclass
class DistributedConfig:
    """Configuration for a distributed run."""
    n_workers: int = 2
    backend: str = "process"
    search: SearchConfig = field(default_factory=SearchConfig)

    def __post_init__(self):
        if self.n_workers < 1:
            raise ValueError(f"n_workers must be >= 1, got {self.n_workers}")
        if self.backend not in BACKENDS:
            raise ValueError(f"Unknown backend '{self.backend}', expected one of {BACKENDS}")


@dataclass(frozen=True)
class Broadcast:
    """Message sent identically to every worker before work starts."""
    objective: Objective
    config: SearchConfig
    y_slices: Tuple[Interval, ...]


@dataclass(frozen=True)
class Assignment:
    """Message scattered to a single worker."""
    rank: int
    x_slice: Interval


@dataclass
class WorkerReport:
    """Scalars a worker sends back once its local search is over."""
    rank: int
    min_ub: float
    lower_bound: float
    minimizer_count: int
    boxes_evaluated: int
    boxes_pruned: int
    ill_formed: int
    elapsed: float


@dataclass
class DistributedResult:
    """Reduced outcome of a distributed run."""
    min_ub: float
    lower_bound: float
    minimizer_count: int
    reports: List[WorkerReport]
    elapsed: float = 0.0

    @property
    def boxes_evaluated(self) -> int:
        return sum(r.boxes_evaluated for r in self.reports)


def partition(iv: Interval, n: int) -> List[Interval]:
    """
    Cut iv into n contiguous equal-width slices.

    Boundaries are computed from lo directly (not accumulated), the last
    one is exactly hi, and neighbours share the same endpoint, so the
    slices cover iv without gaps.
    """
    if n < 1:
        raise ValueError(f"Cannot partition into {n} slices")
    if iv.is_empty or iv.has_nan or not iv.is_finite:
        raise ValueError(f"Cannot partition {iv}")
    width = iv.hi - iv.lo
    if math.isinf(width):
        # hi - lo overflowed, interpolate between the endpoints instead
        bounds = [iv.lo * ((n - i) / n) + iv.hi * (i / n) for i in range(n)]
    else:
        bounds = [iv.lo + (i * width) / n for i in range(n)]
    bounds.append(iv.hi)
    return [Interval(bounds[i], bounds[i + 1]) for i in range(n)]


def run_worker(broadcast: Broadcast, assignment: Assignment) -> WorkerReport:
    """Local search of one worker over its x-slice and all y sub-ranges."""
    start = time.time()
    engine = BranchAndBound(broadcast.objective, broadcast.config)
    state = SearchState()
    for y_slice in broadcast.y_slices:
        engine.solve(assignment.x_slice, y_slice, state)

    return WorkerReport(
        rank=assignment.rank,
        min_ub=state.min_ub,
        lower_bound=state.minimizers.lower_bound,
        minimizer_count=len(state.minimizers),
        boxes_evaluated=state.boxes_evaluated,
        boxes_pruned=state.boxes_pruned,
        ill_formed=state.ill_formed,
        elapsed=time.time() - start,
    )


def reduce_min(values: Sequence[float]) -> float:
    """MIN reduction; +inf for no values."""
    return min(values, default=math.inf)


class DistributedMinimizer:
    """
    Coordinator of a partitioned branch-and-bound run.

    Backends:
    - "process": one ProcessPoolExecutor worker per x-slice
    - "serial": the workers run one after another in this process
    - "mpi": one worker per MPI rank. Every rank calls solve() with the
      same arguments, e.g. under ``mpiexec -n <n> ivmin solve ...``
      Requires the mpi4py module.

    With the process and mpi backends the objective travels by pickle,
    so it must be a module-level function.
    """

    def __init__(self, objective: Objective, config: DistributedConfig = None):
        self.objective = objective
        self.config = config or DistributedConfig()

    def plan(
        self,
        x: Interval,
        y: Interval,
        n_workers: Optional[int] = None
    ) -> Tuple[Broadcast, List[Assignment]]:
        """Build the broadcast message and the per-worker assignments."""
        check_domain(x, "x")
        check_domain(y, "y")
        n = n_workers or self.config.n_workers
        broadcast = Broadcast(
            objective=self.objective,
            config=self.config.search,
            y_slices=tuple(partition(y, n)),
        )
        assignments = [
            Assignment(rank=rank, x_slice=x_slice)
            for rank, x_slice in enumerate(partition(x, n))
        ]
        return broadcast, assignments

    def solve(self, x: Interval, y: Interval, comm=None) -> DistributedResult:
        """
        Run every worker and reduce their reports.

        Args:
            x: Initial domain of the first variable
            y: Initial domain of the second variable
            comm: MPI communicator for the mpi backend (default: COMM_WORLD)

        Returns:
            DistributedResult (on every rank for the mpi backend)
        """
        if self.config.backend == "mpi":
            return self._solve_mpi(x, y, comm)

        start = time.time()
        broadcast, assignments = self.plan(x, y)

        if self.config.backend == "serial":
            reports = [run_worker(broadcast, a) for a in assignments]
        else:
            with ProcessPoolExecutor(max_workers=self.config.n_workers) as executor:
                futures = [executor.submit(run_worker, broadcast, a) for a in assignments]
                reports = [f.result() for f in futures]

        reports.sort(key=lambda r: r.rank)
        return DistributedResult(
            min_ub=reduce_min([r.min_ub for r in reports]),
            lower_bound=reduce_min([r.lower_bound for r in reports]),
            minimizer_count=sum(r.minimizer_count for r in reports),
            reports=reports,
            elapsed=time.time() - start,
        )

    def _solve_mpi(self, x: Interval, y: Interval, comm) -> DistributedResult:
        from mpi4py import MPI

        if comm is None:
            comm = MPI.COMM_WORLD
        start = MPI.Wtime()

        # Same arguments on every rank, so a bad domain fails everywhere
        check_domain(x, "x")
        check_domain(y, "y")

        broadcast = assignments = None
        if comm.rank == 0:
            broadcast, assignments = self.plan(x, y, n_workers=comm.size)
        broadcast = comm.bcast(broadcast, root=0)
        assignment = comm.scatter(assignments, root=0)

        report = run_worker(broadcast, assignment)

        min_ub = comm.reduce(report.min_ub, op=MPI.MIN, root=0)
        lower_bound = comm.reduce(report.lower_bound, op=MPI.MIN, root=0)
        minimizer_count = comm.reduce(report.minimizer_count, op=MPI.SUM, root=0)
        reports = comm.gather(report, root=0)

        result = None
        if comm.rank == 0:
            result = DistributedResult(
                min_ub=min_ub,
                lower_bound=lower_bound,
                minimizer_count=minimizer_count,
                reports=reports,
                elapsed=MPI.Wtime() - start,
            )
        return comm.bcast(result, root=0)


def distributed_minimize(
    objective: Objective,
    x: Interval,
    y: Interval,
    threshold: float,
    n_workers: int = 2,
    backend: str = "process",
    **kwargs
) -> DistributedResult:
    """Convenience wrapper; extra keyword arguments go to SearchConfig."""
    config = DistributedConfig(
        n_workers=n_workers,
        backend=backend,
        search=SearchConfig(threshold=threshold, **kwargs),
    )
    return DistributedMinimizer(objective, config).solve(x, y)
