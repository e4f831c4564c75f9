"""
Solver Module - Interval Branch-and-Bound

Provides:
- BranchAndBound: threaded search over a single box
- DistributedMinimizer: partition/reduce across worker processes
"""

from .search import (
    BranchAndBound,
    SearchConfig,
    SearchResult,
    SearchState,
    minimize,
    split_box,
)
from .distributed import (
    Assignment,
    Broadcast,
    DistributedConfig,
    DistributedMinimizer,
    DistributedResult,
    WorkerReport,
    distributed_minimize,
    partition,
    run_worker,
)

__all__ = [
    'BranchAndBound',
    'SearchConfig',
    'SearchResult',
    'SearchState',
    'minimize',
    'split_box',
    'Assignment',
    'Broadcast',
    'DistributedConfig',
    'DistributedMinimizer',
    'DistributedResult',
    'WorkerReport',
    'distributed_minimize',
    'partition',
    'run_worker',
]
