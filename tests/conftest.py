import networkx as nx
import numpy as np
import pytest

from WWL import EdgeListGraph


@pytest.fixture
def edge_graph():
    """2 nodes, labels [1, 2], edge (0, 1)."""
    return EdgeListGraph(2, [(0, 1)], labels=[1, 2])


@pytest.fixture
def path_graph():
    """3-node path, labels [1, 2, 3]."""
    return EdgeListGraph(3, [(0, 1), (1, 2)], labels=[1, 2, 3])


@pytest.fixture
def labelled_graphs():
    rng = np.random.default_rng(7)
    graphs = []
    for n, p in [(6, 0.4), (8, 0.3), (5, 0.5), (7, 0.35)]:
        G = nx.gnp_random_graph(n, p, seed=int(rng.integers(1000)))
        edges = [(int(u), int(v)) for u, v in G.edges()]
        labels = rng.integers(0, 3, size=n).tolist()
        graphs.append(EdgeListGraph(n, edges, labels=labels))
    return graphs


def permute_graph(graph, perm):
    """Relabel node i as perm[i]; labels / features follow their node."""
    n = graph.node_count()
    edges = [(perm[u], perm[v]) for u, v in graph.edges()]
    labels = None
    features = None
    if graph.labels is not None:
        labels = [None] * n
        for i in range(n):
            labels[perm[i]] = graph.labels[i]
    if graph.features is not None:
        features = [None] * n
        for i in range(n):
            features[perm[i]] = graph.features[i]
    return EdgeListGraph(n, edges, labels=labels, features=features)


@pytest.fixture
def permute():
    return permute_graph
