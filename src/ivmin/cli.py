"""
ivmin Command-Line Interface

Runs the interval branch-and-bound minimizer on one of the catalogued
benchmark functions.
"""

import sys
import argparse
import time
from typing import List, Optional

from . import __version__
from .functions import FUNCTIONS, ObjectiveFunction, available_functions, get_function
from .solver import (
    BranchAndBound,
    DistributedConfig,
    DistributedMinimizer,
    SearchConfig,
)


def ask_function() -> ObjectiveFunction:
    """Ask the user for a function name until a valid one is given."""
    while True:
        print("Which function to optimize?")
        print(f"Possible choices: {' '.join(available_functions())}")
        choice = input().strip()
        try:
            return get_function(choice)
        except KeyError:
            print("Bad choice", file=sys.stderr)


def ask_precision() -> float:
    while True:
        answer = input("Precision? ").strip()
        try:
            return float(answer)
        except ValueError:
            print(f"Not a number: {answer!r}", file=sys.stderr)


def _mpi_comm(args):
    """COMM_WORLD for the mpi backend, None otherwise."""
    if args.backend != 'mpi':
        return None
    from mpi4py import MPI
    return MPI.COMM_WORLD


def _resolve_problem(args):
    """Function and configuration for a solve run; None after reporting an error."""
    if args.function is None:
        fun = ask_function()
    else:
        try:
            fun = get_function(args.function)
        except KeyError:
            print("Bad choice", file=sys.stderr)
            print(f"Available: {available_functions()}", file=sys.stderr)
            return None

    precision = args.precision if args.precision is not None else ask_precision()

    try:
        search = SearchConfig(
            threshold=precision,
            workers=args.threads,
            spawn_depth=args.spawn_depth,
            strict=args.strict,
            log_frequency=args.log_frequency,
        )
        distributed = DistributedConfig(
            n_workers=args.processes,
            backend=args.backend,
            search=search,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return None
    return fun, distributed


def cmd_solve(args):
    """Minimize a benchmark function."""
    comm = _mpi_comm(args)
    is_root = comm is None or comm.rank == 0

    # Under MPI only rank 0 talks to the user
    problem = _resolve_problem(args) if is_root else None
    if comm is not None:
        problem = comm.bcast(problem, root=0)
    if problem is None:
        return 1
    fun, config = problem

    if is_root:
        print("=" * 60)
        print("ivmin - Interval Branch-and-Bound")
        print("=" * 60)
        print(f"\nFunction: {fun.name}")
        print(f"Domain: {fun.x} x {fun.y}")
        print(f"Precision: {config.search.threshold}")
        print(f"Threads: {config.search.workers}")
        print(f"Processes: {comm.size if comm is not None else config.n_workers}")
        print("\nSolving...")

    start = time.time()
    if comm is not None or config.n_workers > 1:
        result = DistributedMinimizer(fun.f, config).solve(fun.x, fun.y, comm=comm)
        minimizer_count = result.minimizer_count
        minimizers = []
    else:
        result = BranchAndBound(fun.f, config.search).solve(fun.x, fun.y)
        minimizer_count = len(result.minimizers)
        minimizers = result.minimizers
    elapsed = time.time() - start

    if not is_root:
        return 0

    print("\n" + "-" * 60)
    print("RESULTS")
    print("-" * 60)
    if args.show_minimizers:
        for m in minimizers:
            print(m)
    print(f"Number of minimizers: {minimizer_count}")
    print(f"Upper bound for minimum: {result.min_ub!r}")
    print(f"Lower bound for minimum: {result.lower_bound!r}")
    print(f"Known minimum: {fun.minimum} at {fun.argmin}")
    print(f"Time: {elapsed:.3f}s")

    return 0


def cmd_list(args):
    """List the available functions."""
    for name in available_functions():
        fun = FUNCTIONS[name]
        print(f"{name:18} {str(fun.x):>12} x {str(fun.y):<12} "
              f"min f{fun.argmin} = {fun.minimum}")
    return 0


def cmd_benchmark(args):
    """Run every catalogued function at a coarse precision."""
    print("=" * 60)
    print("ivmin Quick Benchmark")
    print("=" * 60)

    failures = 0
    for name in available_functions():
        fun = FUNCTIONS[name]
        config = SearchConfig(threshold=args.precision, workers=args.threads)

        result = BranchAndBound(fun.f, config).solve(fun.x, fun.y)

        enclosed = result.lower_bound <= fun.minimum <= result.min_ub
        if not enclosed:
            failures += 1
        status = "CERT" if enclosed else "FAIL"
        print(f"{name:18} [{status}] {result.elapsed:6.3f}s, "
              f"ub={result.min_ub:.6g}, minimizers={len(result.minimizers)}")

    print(f"\nTotal: {len(FUNCTIONS) - failures}/{len(FUNCTIONS)} certified")
    return 0 if failures == 0 else 1


def cmd_version(args):
    """Print version information."""
    print(f"ivmin {__version__}")
    print("Certified global minimization with interval arithmetic")
    return 0


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog='ivmin',
        description='ivmin - Certified 2D Global Minimization'
    )
    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Solve command
    solve_parser = subparsers.add_parser('solve', help='Minimize a benchmark function')
    solve_parser.add_argument('function', nargs='?', default=None,
                              help='Function to optimize (asked for when omitted)')
    solve_parser.add_argument('--precision', '-p', type=float,
                              help='Width below which boxes are not split (asked for when omitted)')
    solve_parser.add_argument('--threads', '-t', type=int, default=4,
                              help='Search threads per worker (default: 4)')
    solve_parser.add_argument('--processes', '-n', type=int, default=1,
                              help='Worker processes the x-domain is split across (default: 1)')
    solve_parser.add_argument('--backend', choices=['process', 'serial', 'mpi'], default='process',
                              help='How workers run; mpi uses one worker per rank of mpiexec (default: process)')
    solve_parser.add_argument('--spawn-depth', type=int, default=4,
                              help='Depth below which sub-boxes are searched inline (default: 4)')
    solve_parser.add_argument('--strict', action='store_true',
                              help='Fail on empty/NaN objective enclosures instead of pruning')
    solve_parser.add_argument('--log-frequency', type=int, default=0,
                              help='Print progress every N boxes (default: off)')
    solve_parser.add_argument('--show-minimizers', action='store_true',
                              help='Print every surviving minimizer')
    solve_parser.set_defaults(func=cmd_solve)

    # List command
    list_parser = subparsers.add_parser('list', help='List available functions')
    list_parser.set_defaults(func=cmd_list)

    # Benchmark command
    bench_parser = subparsers.add_parser('benchmark', help='Run quick benchmark')
    bench_parser.add_argument('--precision', '-p', type=float, default=1e-2,
                              help='Precision (default: 0.01)')
    bench_parser.add_argument('--threads', '-t', type=int, default=1,
                              help='Search threads (default: 1)')
    bench_parser.set_defaults(func=cmd_benchmark)

    # Version command
    ver_parser = subparsers.add_parser('version', help='Print version')
    ver_parser.set_defaults(func=cmd_version)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
