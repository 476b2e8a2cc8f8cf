"""
Laplacian kernel over a Wasserstein distance matrix

K(i, j) = exp(-gamma * D(i, j))   (or exp(-gamma * D(i, j)^2) when squared)
"""

import numpy as np
from loguru import logger

from .config import GAMMA_HEURISTICS
from .utils import off_diagonal


def estimate_gamma(distance_matrix, heuristic="unit"):
    """
    Pick gamma from the realised distances.

    'unit'   -> 1
    'median' -> 1 / median of the positive off-diagonal distances
    'mean'   -> 1 / mean of the positive off-diagonal distances

    When no positive off-diagonal distance exists (one graph, or all graphs
    identical) every heuristic returns 1.
    """
    if heuristic not in GAMMA_HEURISTICS:
        raise ValueError(f"Unknown gamma heuristic: {heuristic}. Supported: {', '.join(GAMMA_HEURISTICS)}")
    if heuristic == "unit":
        return 1.0

    distances = off_diagonal(np.asarray(distance_matrix, dtype=np.float64))
    distances = distances[distances > 0]
    if distances.size == 0:
        return 1.0
    scale = np.median(distances) if heuristic == "median" else np.mean(distances)
    return float(1.0 / scale)


def laplacian_kernel(distance_matrix, gamma=None, heuristic="unit", squared=False):
    """
    Turn a Wasserstein distance matrix into the WWL kernel matrix.

    Args:
        distance_matrix: (N, N) symmetric, zero diagonal
        gamma: bandwidth; None means estimate_gamma(distance_matrix, heuristic)
        heuristic: see estimate_gamma
        squared: exponentiate the squared distance instead

    Returns:
        (N, N) symmetric kernel matrix with unit diagonal
    """
    D = np.asarray(distance_matrix, dtype=np.float64)
    if gamma is None:
        gamma = estimate_gamma(D, heuristic)
        logger.debug(f"gamma={gamma:.6g} from '{heuristic}' heuristic")
    elif gamma <= 0:
        raise ValueError(f"gamma must be > 0, got {gamma}")

    exponent = D ** 2 if squared else D
    K = np.exp(-gamma * exponent)
    K = 0.5 * (K + K.T)
    np.fill_diagonal(K, 1.0)
    return K
