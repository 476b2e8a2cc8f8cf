"""
Configuration for WWL kernel and distance computation
"""

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

DEFAULT_ITERATIONS = 3

SINKHORN_REG = 1e-2             # entropic regularisation (lambda)
SINKHORN_MAX_ITER = 1000
SINKHORN_TOL = 1e-6             # L1 violation of the transport plan marginals
SINKHORN_RETRY_REG_FACTOR = 10.0
SINKHORN_RETRY_ITER_FACTOR = 10

EXACT_MAX_ITER = 100000         # network simplex iteration cap
TIMEOUT_POLICIES = ("raise", "sinkhorn")
GAMMA_HEURISTICS = ("unit", "median", "mean")

DEFAULT_WORKERS = 1
DEFAULT_PAIR_BATCH_SIZE = 64


@dataclass
class _SolverConfig:
    iterations: int = DEFAULT_ITERATIONS
    sinkhorn: bool = False
    sinkhorn_reg: float = SINKHORN_REG
    sinkhorn_max_iter: int = SINKHORN_MAX_ITER
    sinkhorn_tol: float = SINKHORN_TOL
    exact_max_iter: int = EXACT_MAX_ITER
    exact_timeout: float | None = None
    timeout_policy: str = "raise"
    n_jobs: int = DEFAULT_WORKERS
    pair_batch_size: int = DEFAULT_PAIR_BATCH_SIZE

    def __post_init__(self):
        if isinstance(self.iterations, bool) or int(self.iterations) != self.iterations:
            raise ValueError(f"iterations must be an integer, got {self.iterations!r}")
        if self.iterations < 0:
            raise ValueError(f"iterations must be >= 0, got {self.iterations}")
        if self.sinkhorn_reg <= 0:
            raise ValueError(f"sinkhorn_reg must be > 0, got {self.sinkhorn_reg}")
        if self.sinkhorn_max_iter < 1:
            raise ValueError(f"sinkhorn_max_iter must be >= 1, got {self.sinkhorn_max_iter}")
        if self.sinkhorn_tol <= 0:
            raise ValueError(f"sinkhorn_tol must be > 0, got {self.sinkhorn_tol}")
        if self.exact_max_iter < 1:
            raise ValueError(f"exact_max_iter must be >= 1, got {self.exact_max_iter}")
        if self.exact_timeout is not None and self.exact_timeout <= 0:
            raise ValueError(f"exact_timeout must be > 0 or None, got {self.exact_timeout}")
        if self.timeout_policy not in TIMEOUT_POLICIES:
            raise ValueError(
                f"Unknown timeout_policy: {self.timeout_policy}. Supported: {', '.join(TIMEOUT_POLICIES)}"
            )
        if self.n_jobs < 1:
            raise ValueError(f"n_jobs must be >= 1, got {self.n_jobs}")
        if self.pair_batch_size < 1:
            raise ValueError(f"pair_batch_size must be >= 1, got {self.pair_batch_size}")
        self.iterations = int(self.iterations)


@dataclass
class DistanceConfig(_SolverConfig):
    """
    Settings for pairwise Wasserstein distance computation.

    Args:
        iterations: number of WL propagation rounds (K)
        sinkhorn: use the entropic (Sinkhorn) solver instead of the exact one
        enforce_continuous: propagate labels (or degrees) as 1-D continuous
            features even when no feature matrix is given
        sinkhorn_reg / sinkhorn_max_iter / sinkhorn_tol: Sinkhorn parameters
        exact_max_iter: network simplex iteration cap
        exact_timeout: seconds to wait for one exact solve (None = no limit)
        timeout_policy: 'raise' to abort, 'sinkhorn' to fall back for that pair
        n_jobs: worker processes for the pairwise solves
        pair_batch_size: graph pairs handed to a worker at a time
    """
    enforce_continuous: bool = False


@dataclass
class KernelConfig(_SolverConfig):
    """
    Settings for the WWL kernel.

    Args:
        gamma: kernel bandwidth; None picks it with ``gamma_heuristic``
        gamma_heuristic: 'unit' (gamma = 1), 'median' or 'mean'
            (inverse of the median / mean positive off-diagonal distance)
        squared: use exp(-gamma * d^2) instead of exp(-gamma * d)

    The solver fields are the same as in :class:`DistanceConfig`.
    """
    gamma: float | None = None
    gamma_heuristic: str = "unit"
    squared: bool = False

    def __post_init__(self):
        super().__post_init__()
        if self.gamma is not None and self.gamma <= 0:
            raise ValueError(f"gamma must be > 0, got {self.gamma}")
        if self.gamma_heuristic not in GAMMA_HEURISTICS:
            raise ValueError(
                f"Unknown gamma_heuristic: {self.gamma_heuristic}. Supported: {', '.join(GAMMA_HEURISTICS)}"
            )

    def distance_config(self):
        """The distance settings this kernel is computed from."""
        return DistanceConfig(
            iterations=self.iterations,
            sinkhorn=self.sinkhorn,
            sinkhorn_reg=self.sinkhorn_reg,
            sinkhorn_max_iter=self.sinkhorn_max_iter,
            sinkhorn_tol=self.sinkhorn_tol,
            exact_max_iter=self.exact_max_iter,
            exact_timeout=self.exact_timeout,
            timeout_policy=self.timeout_policy,
            n_jobs=self.n_jobs,
            pair_batch_size=self.pair_batch_size,
        )
