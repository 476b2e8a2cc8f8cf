import csv

import networkx as nx
import numpy as np
import pytest

from evaluate_wwl import FAMILIES, generate_graphs, make_graph, process, report_agreement


@pytest.mark.parametrize("family", FAMILIES)
def test_make_graph(family):
    G = make_graph(family, 6, np.random.default_rng(0))
    assert isinstance(G, nx.Graph)
    assert G.number_of_nodes() >= 6


def test_unknown_family():
    with pytest.raises(ValueError):
        make_graph('lattice', 4, np.random.default_rng(0))


def test_generate_graphs_is_seeded():
    graphs_a, families = generate_graphs(2, 3, 6, num_labels=3, continuous=False)
    graphs_b, _ = generate_graphs(2, 3, 6, num_labels=3, continuous=False)
    assert len(graphs_a) == len(families) == 2 * len(FAMILIES)
    for a, b in zip(graphs_a, graphs_b):
        assert nx.utils.graphs_equal(a, b)


def test_process_writes_every_pair(tmp_path, capsys):
    output = tmp_path / "wwl" / "distances.csv"
    results, timings = process(str(output), per_family=1, min_nodes=3, max_nodes=5,
                               workers=1, sinkhorn_reg=0.1)
    n = len(FAMILIES)
    assert len(results) == n * (n - 1) // 2
    assert set(timings) == {'exact', 'sinkhorn'}

    with open(output, encoding='utf-8') as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == len(results)
    assert all(float(r['exact_distance']) >= 0.0 for r in rows)

    summary = report_agreement(results, timings)
    assert summary['n'] == len(results)
    assert "EXACT vs. SINKHORN AGREEMENT" in capsys.readouterr().out
