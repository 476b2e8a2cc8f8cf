"""
Input validation

Everything here runs before any propagation or transport work: a call either
passes all checks and proceeds, or fails here with a typed error.
"""

import numpy as np
from loguru import logger
from sklearn.utils import check_array

from .errors import (
    DimensionMismatch,
    EmptyInput,
    InvalidFeatures,
    InvalidGraph,
    MixedModeNotAllowed,
)
from .utils import degrees

LABELS = "labels"
FEATURES = "features"
UNANNOTATED = "unannotated"


def validate_graphs(graphs):
    """
    Check the graph collection itself: non-empty, every graph has nodes,
    and edges form an undirected simple graph over ``0..n-1``.
    """
    if len(graphs) == 0:
        raise EmptyInput()

    for g_idx, graph in enumerate(graphs):
        n = graph.node_count()
        if n <= 0:
            raise InvalidGraph(g_idx, "graph has no nodes")
        seen = set()
        for u, v in graph.edges():
            if not (0 <= u < n and 0 <= v < n):
                raise InvalidGraph(g_idx, f"edge ({u}, {v}) out of range for {n} nodes")
            if u == v:
                raise InvalidGraph(g_idx, f"self loop on node {u}")
            key = (min(u, v), max(u, v))
            if key in seen:
                raise InvalidGraph(g_idx, f"duplicate edge {key}")
            seen.add(key)


def annotation_kind(graph, graph_index):
    """
    Determine whether a graph is labelled, featured, or carries neither.

    A node may not carry both a label and a feature, and a graph may not
    annotate only some of its nodes.
    """
    kinds = set()
    for i in range(graph.node_count()):
        has_label = graph.node_label(i) is not None
        has_feature = graph.node_feature(i) is not None
        if has_label and has_feature:
            raise MixedModeNotAllowed(graph_index, "node carries both a label and a feature", node_index=i)
        if has_label:
            kinds.add(LABELS)
        elif has_feature:
            kinds.add(FEATURES)
        else:
            kinds.add(UNANNOTATED)

    if len(kinds) > 1:
        raise MixedModeNotAllowed(graph_index, f"nodes mix {' and '.join(sorted(kinds))}")
    return kinds.pop()


def validate_node_features(graphs, node_features):
    """
    Validate an externally supplied feature matrix against the graphs.

    The matrix has one row per graph and at least as many columns (node
    slots) as the largest graph; unused trailing slots are padding. A 3-D
    array carries a vector per slot.

    Returns:
        the matrix as a float64 ndarray
    """
    try:
        ndim = np.ndim(node_features)
    except ValueError as e:
        raise InvalidFeatures(f"ragged feature matrix ({e})") from e
    if ndim not in (2, 3):
        raise DimensionMismatch("ndim in (2, 3)", "2 or 3", ndim)

    try:
        features = check_array(
            node_features,
            dtype=np.float64,
            ensure_2d=False,
            allow_nd=True,
            ensure_min_samples=0,
            ensure_min_features=0,
        )
    except ValueError as e:
        raise InvalidFeatures(str(e)) from e

    num_rows, num_slots = features.shape[:2]
    if num_rows != len(graphs):
        raise DimensionMismatch(
            "rows == len(graphs)", len(graphs), num_rows,
            message=f"Node features has {num_rows} graphs but {len(graphs)} graphs provided",
        )

    max_nodes = max((g.node_count() for g in graphs), default=0)
    if num_slots < max_nodes:
        raise DimensionMismatch(
            "cols >= max node count", max_nodes, num_slots,
            message=f"Node features has {num_slots} node slots but largest graph has {max_nodes} nodes",
        )
    return features


# =============================================================================
# Initial node annotations per propagation scheme
# =============================================================================

def categorical_initial_labels(graphs):
    """Node labels per graph; unannotated graphs fall back to node degree."""
    initial = []
    for g_idx, graph in enumerate(graphs):
        kind = annotation_kind(graph, g_idx)
        n = graph.node_count()
        if kind == FEATURES:
            raise MixedModeNotAllowed(g_idx, "continuous features supplied to categorical propagation")
        if kind == LABELS:
            initial.append([graph.node_label(i) for i in range(n)])
        else:
            logger.debug(f"graph {g_idx} has no labels, using node degree")
            initial.append(degrees(n, graph.edges()).tolist())
    return initial


def _scalar_features(values, g_idx):
    try:
        return np.asarray(values, dtype=np.float64).reshape(-1, 1)
    except (TypeError, ValueError) as e:
        raise InvalidFeatures(f"labels cannot be used as continuous features ({e})", graph_index=g_idx) from e


def continuous_initial_features(graphs, node_features=None):
    """
    Initial feature matrix (n, d) per graph.

    With ``node_features`` given, node i of graph g reads row g, slot i.
    Otherwise per-node vectors come from the graphs themselves; labelled
    graphs use their (numeric) labels and unannotated graphs their degrees
    as 1-D features.
    """
    kinds = [annotation_kind(graph, g_idx) for g_idx, graph in enumerate(graphs)]

    if node_features is not None:
        features = validate_node_features(graphs, node_features)
        initial = []
        for g_idx, graph in enumerate(graphs):
            block = features[g_idx, :graph.node_count()]
            initial.append(block.reshape(graph.node_count(), -1).copy())
        return initial

    initial = []
    for g_idx, (graph, kind) in enumerate(zip(graphs, kinds)):
        n = graph.node_count()
        if kind == FEATURES:
            vectors = [graph.node_feature(i) for i in range(n)]
            dims = {v.shape[0] for v in vectors}
            if len(dims) > 1:
                raise InvalidFeatures(f"feature vectors of differing lengths {sorted(dims)}", graph_index=g_idx)
            block = np.vstack(vectors).astype(np.float64)
        elif kind == LABELS:
            block = _scalar_features([graph.node_label(i) for i in range(n)], g_idx)
        else:
            block = degrees(n, graph.edges()).astype(np.float64).reshape(-1, 1)
        if not np.all(np.isfinite(block)):
            raise InvalidFeatures("non-finite node features", graph_index=g_idx)
        initial.append(block)

    dim = initial[0].shape[1]
    for g_idx, block in enumerate(initial):
        if block.shape[1] != dim:
            raise DimensionMismatch(
                "feature dimension equal across graphs", dim, block.shape[1],
                message=f"graph {g_idx} has {block.shape[1]}-dimensional features, graph 0 has {dim}",
            )
    return initial
