"""
Weisfeiler-Lehman propagation
Reference: Togninalli et al. "Wasserstein Weisfeiler-Lehman Graph Kernels" (NeurIPS 2019)

Categorical scheme: WL relabelling, node label at round r is a compact id for
(own label, sorted neighbour labels) at round r-1.
Continuous scheme: node vector at round r is the mean over its closed
neighbourhood at round r-1.
"""

from collections import Counter

import numpy as np
from loguru import logger

from .utils import adjacency_lists, closed_neighbourhood_mean_operator


class PropagationContext:
    """
    Signature -> compact label tables for one computation call.

    The tables are kept per round: within a round the same signature always
    maps to the same label, across all graphs of the call, while ids restart
    at 0 in the next round. Round r labels are only ever compared with round
    r labels (the Hamming cost works column by column). Labels are handed
    out in first-seen order, graphs in input order and nodes in index order.
    Create one per call and drop it afterwards.
    """

    def __init__(self):
        self.label_tables = []

    @property
    def num_rounds(self):
        return len(self.label_tables)

    def assign(self, signatures_per_graph):
        table = {}
        self.label_tables.append(table)
        relabelled = []
        for signatures in signatures_per_graph:
            labels = np.empty(len(signatures), dtype=np.int64)
            for i, signature in enumerate(signatures):
                label = table.get(signature)
                if label is None:
                    label = table[signature] = len(table)
                labels[i] = label
            relabelled.append(labels)
        return relabelled


def _graph_signatures(labels, neighbours):
    """Canonical (own label, *sorted neighbour labels) tuple per node."""
    return [
        (int(labels[v]),) + tuple(sorted(int(labels[u]) for u in neighbours[v]))
        for v in range(len(labels))
    ]


def categorical_propagation(initial_labels, edges_per_graph, iterations, context=None):
    """
    Run WL relabelling on all graphs together.

    Args:
        initial_labels: per graph, a hashable label per node
        edges_per_graph: per graph, its undirected edge list
        iterations: number of rounds K (0 keeps only the initial labelling)
        context: PropagationContext to fill; a fresh one by default

    Returns:
        per graph, a list of K+1 int arrays (round labels per node)
    """
    if context is None:
        context = PropagationContext()

    neighbours = [adjacency_lists(len(labels), edges) for labels, edges in zip(initial_labels, edges_per_graph)]

    # Round 0 compresses the raw labels, so any hashable label type works
    current = context.assign([list(labels) for labels in initial_labels])
    history = [[labels] for labels in current]

    for it in range(1, iterations + 1):
        # Phase 1: collect every graph's signatures
        signatures = [_graph_signatures(labels, nbrs) for labels, nbrs in zip(current, neighbours)]
        # Phase 2: assign labels in graph order, node order
        current = context.assign(signatures)
        for graph_history, labels in zip(history, current):
            graph_history.append(labels)
        logger.debug(f"WL round {it}: {len(context.label_tables[-1])} distinct labels")

    return history


def label_histograms(history):
    """Per round, the multiset of node labels of one graph."""
    return [Counter(labels.tolist()) for labels in history]


def continuous_propagation(initial_features, edges_per_graph, iterations):
    """
    Diffuse node features over each graph's closed neighbourhood.

    Args:
        initial_features: per graph, an (n, d) array
        edges_per_graph: per graph, its undirected edge list
        iterations: number of rounds K

    Returns:
        per graph, a list of K+1 float64 (n, d) arrays
    """
    histories = []
    for features, edges in zip(initial_features, edges_per_graph):
        x = np.asarray(features, dtype=np.float64)
        operator = closed_neighbourhood_mean_operator(x.shape[0], edges)
        rounds = [x]
        for _ in range(iterations):
            x = np.asarray(operator @ x)
            rounds.append(x)
        histories.append(rounds)
    return histories
