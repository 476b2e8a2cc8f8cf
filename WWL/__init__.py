"""
WWL (Wasserstein Weisfeiler-Lehman) graph kernels
Weisfeiler-Lehman propagation + optimal transport + Laplacian kernel
"""

from loguru import logger

from .adapters import EdgeListGraph, GraphAdapter, NetworkXGraph, as_adapter
from .config import DistanceConfig, KernelConfig
from .errors import (
    DimensionMismatch,
    EmptyInput,
    InvalidFeatures,
    InvalidGraph,
    MixedModeNotAllowed,
    SolverDivergence,
    SolverTimeout,
    WWLError,
)
from .kernel import estimate_gamma, laplacian_kernel
from .propagation import PropagationContext
from .wwl_kernel import (
    WWLKernel,
    compute_distance_categorical,
    compute_distance_continuous,
    compute_kernel_categorical,
    compute_kernel_continuous,
    pairwise_wasserstein_distance,
    wwl,
)

# Library code stays quiet unless the application calls logger.enable("WWL")
logger.disable("WWL")

__all__ = [
    # Graphs
    'GraphAdapter', 'EdgeListGraph', 'NetworkXGraph', 'as_adapter',
    # Config
    'KernelConfig', 'DistanceConfig',
    # Operations
    'compute_kernel_categorical', 'compute_kernel_continuous',
    'compute_distance_categorical', 'compute_distance_continuous',
    'pairwise_wasserstein_distance', 'wwl', 'WWLKernel',
    'laplacian_kernel', 'estimate_gamma', 'PropagationContext',
    # Errors
    'WWLError', 'EmptyInput', 'DimensionMismatch', 'MixedModeNotAllowed',
    'SolverDivergence', 'SolverTimeout', 'InvalidGraph', 'InvalidFeatures',
]
