"""
Shared numeric helpers for the WWL pipeline
"""

import numpy as np
import scipy.sparse as sp


def uniform_weights(n):
    """Uniform probability mass 1/n over n nodes."""
    return np.full(n, 1.0 / n, dtype=np.float64)


def adjacency_lists(n, edges):
    neighbours = [[] for _ in range(n)]
    for u, v in edges:
        neighbours[u].append(v)
        neighbours[v].append(u)
    return neighbours


def degrees(n, edges):
    deg = np.zeros(n, dtype=np.int64)
    for u, v in edges:
        deg[u] += 1
        deg[v] += 1
    return deg


def closed_neighbourhood_mean_operator(n, edges):
    """
    Row-stochastic sparse operator M = D^-1 (A + I), D = deg + 1.

    ``M @ X`` replaces every row of X by the mean over the node itself and
    each of its neighbours (isolated nodes are left unchanged).
    """
    if edges:
        rows, cols = np.asarray(edges, dtype=np.int64).T
        adj = sp.coo_matrix(
            (np.ones(2 * len(rows)), (np.concatenate([rows, cols]), np.concatenate([cols, rows]))),
            shape=(n, n),
        ).tocsr()
    else:
        adj = sp.csr_matrix((n, n), dtype=np.float64)
    closed = adj + sp.identity(n, dtype=np.float64, format="csr")
    inv_deg = 1.0 / np.asarray(closed.sum(axis=1)).ravel()
    return sp.diags(inv_deg) @ closed


def upper_triangle_pairs(n):
    return [(i, j) for i in range(n) for j in range(i + 1, n)]


def chunked(lst, size):
    for i in range(0, len(lst), size):
        yield lst[i:i + size]


def symmetric_from_upper(n, pairs, values):
    """Square matrix with ``values`` on the given (i, j) pairs, mirrored, zero diagonal."""
    matrix = np.zeros((n, n), dtype=np.float64)
    for (i, j), value in zip(pairs, values):
        matrix[i, j] = value
        matrix[j, i] = value
    return matrix


def off_diagonal(matrix):
    n = matrix.shape[0]
    return matrix[~np.eye(n, dtype=bool)]
