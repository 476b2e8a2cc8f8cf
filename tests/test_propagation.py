from collections import Counter

import numpy as np

from WWL import PropagationContext
from WWL.propagation import categorical_propagation, continuous_propagation, label_histograms

EDGE = [(0, 1)]
PATH = [(0, 1), (1, 2)]


def _rounds(history):
    return [labels.tolist() for labels in history]


def test_shared_label_tables_across_graphs():
    context = PropagationContext()
    edge, path = categorical_propagation([[1, 2], [1, 2, 3]], [EDGE, PATH], 3, context=context)

    assert _rounds(edge) == [[0, 1], [0, 1], [0, 1], [0, 1]]
    assert _rounds(path) == [[0, 1, 2], [0, 2, 3], [2, 3, 4], [2, 3, 4]]
    assert context.num_rounds == 4
    # round 1: the path's end node has the same neighbourhood as the edge's first node
    assert context.label_tables[1] == {(0, 1): 0, (1, 0): 1, (1, 0, 2): 2, (2, 1): 3}


def test_zero_iterations_keeps_compressed_labels():
    history = categorical_propagation([['b', 'a', 'b']], [PATH], 0)
    assert _rounds(history[0]) == [[0, 1, 0]]


def test_isolated_nodes_keep_their_own_label_class():
    history = categorical_propagation([[5, 5, 7]], [[]], 2)
    assert _rounds(history[0]) == [[0, 0, 1], [0, 0, 1], [0, 0, 1]]


def test_labels_reproducible_across_calls():
    first = categorical_propagation([[1, 2], [1, 2, 3]], [EDGE, PATH], 3)
    second = categorical_propagation([[1, 2], [1, 2, 3]], [EDGE, PATH], 3)
    for a, b in zip(first, second):
        assert _rounds(a) == _rounds(b)


def test_label_histograms():
    _, path = categorical_propagation([[1, 2], [1, 2, 3]], [EDGE, PATH], 1)
    assert label_histograms(path) == [Counter({0: 1, 1: 1, 2: 1}), Counter({0: 1, 2: 1, 3: 1})]


def test_continuous_closed_neighbourhood_mean():
    (history,) = continuous_propagation([np.array([[0.0], [3.0], [6.0]])], [PATH], 2)
    assert len(history) == 3
    np.testing.assert_allclose(history[1].ravel(), [1.5, 3.0, 4.5])
    np.testing.assert_allclose(history[2].ravel(), [2.25, 3.0, 3.75])


def test_continuous_isolated_node_unchanged():
    (history,) = continuous_propagation([np.array([[1.0, -2.0]])], [[]], 3)
    for x in history:
        np.testing.assert_array_equal(x, [[1.0, -2.0]])


def test_label_tables_are_per_round():
    context = PropagationContext()
    history = categorical_propagation([[1, 2], [2, 1]], [EDGE, EDGE], 2, context=context)

    assert context.num_rounds == 3
    for table in context.label_tables:
        assert sorted(table.values()) == list(range(len(table)))
    # within a round one signature gets one label, whichever graph it came from
    for r, table in enumerate(context.label_tables[1:], start=1):
        for g, graph_history in enumerate(history):
            labels_before = history[g][r - 1]
            for v, label in enumerate(graph_history[r]):
                neighbour = labels_before[1 - v]
                assert table[(int(labels_before[v]), int(neighbour))] == label
