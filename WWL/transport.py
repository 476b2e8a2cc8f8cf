"""
Optimal transport between two graph distributions

Exact Earth Mover's Distance via POT's network simplex, and an entropic
approximation via log-domain Sinkhorn iterations.
"""

from typing import NamedTuple

import numpy as np
import ot
from loguru import logger
from scipy.spatial.distance import cdist
from scipy.special import logsumexp

from .config import (
    EXACT_MAX_ITER,
    SINKHORN_MAX_ITER,
    SINKHORN_REG,
    SINKHORN_RETRY_ITER_FACTOR,
    SINKHORN_RETRY_REG_FACTOR,
    SINKHORN_TOL,
)
from .errors import SolverDivergence
from .utils import uniform_weights


def cost_matrix(x, y, categorical):
    """
    Ground cost between every node of one graph and every node of another.

    Categorical rows are label sequences compared with the normalised Hamming
    distance (fraction of rounds whose labels differ); continuous rows use
    the Euclidean distance.
    """
    metric = "hamming" if categorical else "euclidean"
    return cdist(np.asarray(x, dtype=np.float64), np.asarray(y, dtype=np.float64), metric=metric)


def exact_wasserstein(a, b, M, pair=None, max_iter=EXACT_MAX_ITER):
    """Earth Mover's Distance <P*, M> from the network simplex solver."""
    cost, log = ot.emd2(a, b, M, numItermax=max_iter, log=True)
    if log.get("warning"):
        raise SolverDivergence(pair, "network simplex", log["warning"])
    return float(cost)


class SinkhornResult(NamedTuple):
    plan: np.ndarray
    cost: float
    error: float
    iterations: int
    converged: bool


def sinkhorn_log(a, b, M, reg=SINKHORN_REG, max_iter=SINKHORN_MAX_ITER, tol=SINKHORN_TOL):
    """
    Entropic optimal transport in the log domain.

    Alternates the dual updates
        f = log a - LSE_j(-M_ij / reg + g_j)
        g = log b - LSE_i(-M_ij / reg + f_i)
    so that exp(-M / reg) is never formed and small ``reg`` cannot underflow.
    After each g-update the column marginals are exact; convergence is
    declared once the L1 error of the row marginals drops below ``tol``.

    Returns:
        SinkhornResult with the plan P and transport cost <P, M>
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    log_a, log_b = np.log(a), np.log(b)
    log_kernel = -np.asarray(M, dtype=np.float64) / reg

    f = np.zeros_like(a)
    g = np.zeros_like(b)
    error = np.inf
    plan = np.outer(a, b)

    for it in range(1, max_iter + 1):
        f = log_a - logsumexp(log_kernel + g[None, :], axis=1)
        g = log_b - logsumexp(log_kernel + f[:, None], axis=0)

        if not (np.all(np.isfinite(f)) and np.all(np.isfinite(g))):
            return SinkhornResult(plan, float("nan"), float("nan"), it, False)

        plan = np.exp(log_kernel + f[:, None] + g[None, :])
        error = float(np.abs(plan.sum(axis=1) - a).sum())
        if error < tol:
            return SinkhornResult(plan, float(np.sum(plan * M)), error, it, True)

    return SinkhornResult(plan, float(np.sum(plan * M)), error, max_iter, False)


def sinkhorn_wasserstein(a, b, M, pair=None, reg=SINKHORN_REG, max_iter=SINKHORN_MAX_ITER, tol=SINKHORN_TOL):
    """
    Sinkhorn approximation of the Wasserstein distance.

    A run that does not converge is retried once with a larger
    regularisation and iteration cap; a second failure raises
    SolverDivergence.
    """
    result = sinkhorn_log(a, b, M, reg=reg, max_iter=max_iter, tol=tol)
    if result.converged:
        return result.cost

    retry_reg = reg * SINKHORN_RETRY_REG_FACTOR
    retry_iter = max_iter * SINKHORN_RETRY_ITER_FACTOR
    logger.warning(
        f"Sinkhorn did not converge for graphs {pair} (error={result.error:.3e}); "
        f"retrying with reg={retry_reg:g}, max_iter={retry_iter}"
    )
    retry = sinkhorn_log(a, b, M, reg=retry_reg, max_iter=retry_iter, tol=tol)
    if retry.converged:
        return retry.cost

    raise SolverDivergence(
        pair, "Sinkhorn",
        f"reg={retry_reg:g}, max_iter={retry_iter}, marginal error={retry.error:.3e}",
    )


def wasserstein_distance(x, y, categorical, sinkhorn=False, pair=None,
                         reg=SINKHORN_REG, max_iter=SINKHORN_MAX_ITER, tol=SINKHORN_TOL,
                         exact_max_iter=EXACT_MAX_ITER):
    """
    Wasserstein-1 distance between two uniform node distributions.

    Args:
        x, y: node embedding arrays (n_x, m) and (n_y, m)
        categorical: label sequences (Hamming cost) vs. vectors (Euclidean)
        sinkhorn: entropic approximation instead of the exact solver
        pair: (i, j) graph indices, used in error messages
        reg, max_iter, tol: Sinkhorn parameters
        exact_max_iter: network simplex iteration cap

    Returns:
        float distance
    """
    a = uniform_weights(len(x))
    b = uniform_weights(len(y))
    M = cost_matrix(x, y, categorical)
    if sinkhorn:
        return sinkhorn_wasserstein(a, b, M, pair=pair, reg=reg, max_iter=max_iter, tol=tol)
    return exact_wasserstein(a, b, M, pair=pair, max_iter=exact_max_iter)
