"""
ivmin - Certified Global Minimization of Functions of Two Variables

Finds the global minimum of f(x, y) over a box with mathematically
guaranteed bounds:
- Interval arithmetic with outward rounding encloses f over any sub-box
- Branch-and-bound discards sub-boxes proven not to hold the minimum
- Surviving boxes ("minimizers") narrower than a threshold are kept
  with their proven lower/upper bounds

Key Features:
- Directed rounding as pure functions (thread-safe, no FPU mode)
- Fork-join search over a fixed thread pool with a shared best bound
- Partition/reduce across independent worker processes
"""

__version__ = "0.1.0"

from .bounds.interval import Interval
from .minimizer import (
    Minimizer,
    MinimizerList,
    ObjectiveContractError,
)
from .solver.search import (
    BranchAndBound,
    SearchConfig,
    SearchResult,
    SearchState,
    minimize,
    split_box,
)
from .solver.distributed import (
    DistributedConfig,
    DistributedMinimizer,
    DistributedResult,
    distributed_minimize,
    partition,
)
from .functions import (
    FUNCTIONS,
    ObjectiveFunction,
    available_functions,
    get_function,
)

__all__ = [
    # Intervals
    "Interval",
    # Minimizers
    "Minimizer",
    "MinimizerList",
    "ObjectiveContractError",
    # Search
    "BranchAndBound",
    "SearchConfig",
    "SearchResult",
    "SearchState",
    "minimize",
    "split_box",
    # Distribution
    "DistributedConfig",
    "DistributedMinimizer",
    "DistributedResult",
    "distributed_minimize",
    "partition",
    # Functions
    "FUNCTIONS",
    "ObjectiveFunction",
    "available_functions",
    "get_function",
]
