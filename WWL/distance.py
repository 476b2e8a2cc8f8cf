"""
Pairwise Wasserstein distance engine

Solves the N(N-1)/2 independent transport problems of the upper triangle,
serially or across a process pool, and mirrors them into a symmetric
distance matrix with an exact zero diagonal.

Parallel processing notes:
  - Pairs are grouped into batches; each batch is one pool task and writes
    a disjoint set of matrix cells, so no locking is needed
  - Results are put back in submission order regardless of completion order
  - With an exact-solver timeout every pair gets its own worker process so
    its clock starts when it starts, and an overrunning solve can be killed
    without holding up the pairs behind it
"""

import multiprocessing
import time
from concurrent.futures import ProcessPoolExecutor, as_completed

import numpy as np
from loguru import logger

from .errors import SolverTimeout
from .transport import wasserstein_distance
from .utils import chunked, symmetric_from_upper, upper_triangle_pairs


def _solver_options(config):
    return {
        "sinkhorn": config.sinkhorn,
        "reg": config.sinkhorn_reg,
        "max_iter": config.sinkhorn_max_iter,
        "tol": config.sinkhorn_tol,
        "exact_max_iter": config.exact_max_iter,
    }


# ── worker (top-level required for ProcessPoolExecutor pickling) ──────────────

def _solve_batch(batch):
    """
    Worker: receives list of (pair, x, y, categorical, options) jobs and
    returns their distances in the same order.
    """
    return [
        wasserstein_distance(x, y, categorical, pair=pair, **options)
        for pair, x, y, categorical, options in batch
    ]


# ── scheduling ────────────────────────────────────────────────────────────────

def _solve_parallel(jobs, config):
    batches = list(chunked(jobs, config.pair_batch_size))
    ordered = [None] * len(batches)

    executor = ProcessPoolExecutor(max_workers=config.n_jobs)
    try:
        future_to_idx = {
            executor.submit(_solve_batch, batch): idx
            for idx, batch in enumerate(batches)
        }
        completed = 0
        for future in as_completed(future_to_idx):
            ordered[future_to_idx[future]] = future.result()
            completed += 1
            logger.debug(f"Batches done: {completed}/{len(batches)}")
    finally:
        executor.shutdown(wait=True, cancel_futures=True)

    return [value for batch_values in ordered for value in batch_values]


def _worker_ready():
    return True


def _solve_with_timeout(jobs, config):
    """
    Each pair runs in its own single-worker pool, at most ``n_jobs`` at a
    time, and is given ``exact_timeout`` seconds from the moment its worker
    is up and the pair submitted.

    On expiry the worker is terminated and the policy decides: 'raise' aborts
    the call with SolverTimeout, 'sinkhorn' solves that pair with the
    Sinkhorn approximation instead. Pairs that finish in time always keep
    their exact value.
    """
    values = [None] * len(jobs)
    for window in chunked(list(enumerate(jobs)), config.n_jobs):
        running = []
        timed_out = []
        try:
            for idx, job in window:
                pool = multiprocessing.Pool(processes=1)
                running.append((idx, job, pool))
                # worker start-up does not count against the pair's budget
                pool.apply(_worker_ready)
            started = []
            for idx, job, pool in running:
                result = pool.apply_async(_solve_batch, ([job],))
                started.append((idx, job, pool, result, time.monotonic() + config.exact_timeout))

            for idx, job, pool, result, deadline in started:
                try:
                    values[idx] = result.get(timeout=max(deadline - time.monotonic(), 0.0))[0]
                except multiprocessing.TimeoutError:
                    pool.terminate()
                    if config.timeout_policy == "raise":
                        raise SolverTimeout(job[0], config.exact_timeout) from None
                    timed_out.append((idx, job))
        finally:
            for _, _, pool in running:
                pool.terminate()
                pool.join()

        # Sinkhorn fallbacks only once every pair of the window has settled
        for idx, (pair, x, y, categorical, options) in timed_out:
            logger.warning(
                f"Exact transport for graphs {pair} exceeded {config.exact_timeout:g}s, "
                f"falling back to Sinkhorn"
            )
            values[idx] = wasserstein_distance(x, y, categorical, pair=pair, **{**options, "sinkhorn": True})
    return values


def pairwise_distances(distributions, config):
    """
    Wasserstein distance matrix over a list of GraphDistribution.

    Args:
        distributions: one GraphDistribution per graph, all of the same mode
        config: DistanceConfig (or KernelConfig) solver settings

    Returns:
        (N, N) symmetric float64 array with zero diagonal
    """
    n = len(distributions)
    pairs = upper_triangle_pairs(n)
    if not pairs:
        return np.zeros((n, n), dtype=np.float64)

    categorical = distributions[0].categorical
    options = _solver_options(config)
    jobs = [
        ((i, j), distributions[i].embeddings, distributions[j].embeddings, categorical, options)
        for i, j in pairs
    ]

    use_timeout = config.exact_timeout is not None and not config.sinkhorn
    logger.info(
        f"Solving {len(pairs)} graph pairs with the {'Sinkhorn' if config.sinkhorn else 'exact'} "
        f"solver ({config.n_jobs} worker{'s' if config.n_jobs > 1 else ''})"
    )

    if use_timeout:
        values = _solve_with_timeout(jobs, config)
    elif config.n_jobs > 1:
        values = _solve_parallel(jobs, config)
    else:
        values = _solve_batch(jobs)

    return symmetric_from_upper(n, pairs, values)
