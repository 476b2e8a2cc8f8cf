"""
Node embedding assembly

Stacks each node's per-round representations into one row, and pairs the
rows with uniform node mass to form the graph's empirical distribution.
"""

from dataclasses import dataclass

import numpy as np

from .utils import uniform_weights


@dataclass
class GraphDistribution:
    embeddings: np.ndarray   # (n, K+1) labels or (n, d*(K+1)) features
    weights: np.ndarray      # (n,) uniform 1/n
    categorical: bool

    @property
    def num_nodes(self):
        return self.embeddings.shape[0]


def assemble_categorical(history):
    """Round labels side by side: row v is node v's label sequence."""
    return np.column_stack(history).astype(np.int64)


def assemble_continuous(history):
    """Round vectors concatenated: row v has length d * (K+1)."""
    return np.hstack(history).astype(np.float64)


def build_distributions(histories, categorical):
    assemble = assemble_categorical if categorical else assemble_continuous
    distributions = []
    for history in histories:
        embeddings = assemble(history)
        distributions.append(GraphDistribution(
            embeddings=embeddings,
            weights=uniform_weights(embeddings.shape[0]),
            categorical=categorical,
        ))
    return distributions
