"""
Graph adapters

The WWL pipeline only ever reads graphs through the small ``GraphAdapter``
protocol below: node count, undirected edge list, and an optional label or
feature vector per node. Two implementations are provided, a plain edge-list
container and a wrapper around ``networkx.Graph``.
"""

from dataclasses import dataclass, field
from typing import Hashable, Optional, Protocol, Sequence, runtime_checkable

import networkx as nx
import numpy as np

from .errors import InvalidGraph


@runtime_checkable
class GraphAdapter(Protocol):
    def node_count(self) -> int: ...

    def edges(self) -> Sequence[tuple[int, int]]: ...

    def node_label(self, i: int) -> Optional[Hashable]: ...

    def node_feature(self, i: int) -> Optional[np.ndarray]: ...


@dataclass
class EdgeListGraph:
    """
    Undirected simple graph given as a node count and an edge list.

    Example:
        >>> g = EdgeListGraph(2, [(0, 1)], labels=[1, 2])
        >>> g.node_count(), g.edges(), g.node_label(1)
        (2, [(0, 1)], 2)
    """
    num_nodes: int
    edge_list: Sequence[tuple[int, int]] = field(default_factory=list)
    labels: Optional[Sequence[Optional[Hashable]]] = None
    features: Optional[Sequence[Optional[Sequence[float]]]] = None

    def node_count(self):
        return int(self.num_nodes)

    def edges(self):
        return [(int(u), int(v)) for u, v in self.edge_list]

    def node_label(self, i):
        if self.labels is None:
            return None
        return self.labels[i]

    def node_feature(self, i):
        if self.features is None or self.features[i] is None:
            return None
        return np.atleast_1d(np.asarray(self.features[i], dtype=np.float64))


class NetworkXGraph:
    """
    Read-only view of a ``networkx.Graph``.

    Nodes are mapped to dense indices in the graph's node iteration order.
    Labels and features are read from the node attributes ``label_attr`` and
    ``feature_attr``; a missing attribute means "not supplied".
    """

    def __init__(self, graph, label_attr="label", feature_attr="feature", graph_index=None):
        if graph.is_directed():
            raise InvalidGraph(graph_index, "directed graphs are not supported")
        if graph.is_multigraph():
            raise InvalidGraph(graph_index, "multigraphs are not supported")
        self.graph = graph
        self.label_attr = label_attr
        self.feature_attr = feature_attr
        self._nodes = list(graph.nodes())
        self._index = {node: i for i, node in enumerate(self._nodes)}

    def node_count(self):
        return len(self._nodes)

    def edges(self):
        return [(self._index[u], self._index[v]) for u, v in self.graph.edges()]

    def node_label(self, i):
        return self.graph.nodes[self._nodes[i]].get(self.label_attr)

    def node_feature(self, i):
        value = self.graph.nodes[self._nodes[i]].get(self.feature_attr)
        if value is None:
            return None
        return np.atleast_1d(np.asarray(value, dtype=np.float64))

    def __repr__(self):
        return (f"NetworkXGraph(nodes={self.graph.number_of_nodes()}, "
                f"edges={self.graph.number_of_edges()})")


def as_adapter(graph, graph_index=None):
    """Wrap ``networkx`` graphs; pass anything implementing GraphAdapter through."""
    if isinstance(graph, nx.Graph):
        return NetworkXGraph(graph, graph_index=graph_index)
    if isinstance(graph, GraphAdapter):
        return graph
    raise InvalidGraph(graph_index, f"{type(graph).__name__} does not implement GraphAdapter")


def as_adapters(graphs):
    return [as_adapter(g, graph_index=i) for i, g in enumerate(graphs)]
