import numpy as np
import pytest

from WWL import DistanceConfig, SolverDivergence, SolverTimeout
from WWL.distance import pairwise_distances
from WWL.embedding import GraphDistribution, build_distributions
from WWL.propagation import categorical_propagation
from WWL.transport import wasserstein_distance


def _distributions(labels, edges, iterations=3):
    history = categorical_propagation(labels, edges, iterations)
    return build_distributions(history, categorical=True)


@pytest.fixture
def golden_distributions():
    return _distributions([[1, 2], [1, 2, 3]], [[(0, 1)], [(0, 1), (1, 2)]])


@pytest.fixture
def many_distributions():
    rng = np.random.default_rng(3)
    labels, edges = [], []
    for n in [4, 5, 6, 3, 7, 5]:
        labels.append(rng.integers(0, 3, size=n).tolist())
        edges.append([(i, i + 1) for i in range(n - 1)])
    return _distributions(labels, edges)


def test_embeddings_are_label_sequences(golden_distributions):
    edge, path = golden_distributions
    assert isinstance(edge, GraphDistribution)
    assert edge.num_nodes == 2
    np.testing.assert_array_equal(path.embeddings, [[0, 0, 2, 2], [1, 2, 3, 3], [2, 3, 4, 4]])
    np.testing.assert_allclose(path.weights, [1 / 3] * 3)


def test_golden_distance(golden_distributions):
    D = pairwise_distances(golden_distributions, DistanceConfig())
    assert D[0, 1] == pytest.approx(0.75, abs=1e-9)
    assert D[1, 0] == D[0, 1]
    assert D[0, 0] == 0.0


def test_single_graph_gives_zero_matrix(golden_distributions):
    D = pairwise_distances(golden_distributions[:1], DistanceConfig())
    np.testing.assert_array_equal(D, [[0.0]])


def test_parallel_matches_serial(many_distributions):
    serial = pairwise_distances(many_distributions, DistanceConfig())
    parallel = pairwise_distances(many_distributions, DistanceConfig(n_jobs=2, pair_batch_size=4))
    np.testing.assert_allclose(parallel, serial, atol=1e-12)
    np.testing.assert_array_equal(parallel, parallel.T)
    np.testing.assert_array_equal(np.diag(parallel), 0.0)


def test_parallel_sinkhorn_matches_serial(many_distributions):
    serial = pairwise_distances(many_distributions, DistanceConfig(sinkhorn=True, sinkhorn_reg=0.1))
    parallel = pairwise_distances(many_distributions, DistanceConfig(sinkhorn=True, sinkhorn_reg=0.1, n_jobs=3, pair_batch_size=2))
    np.testing.assert_allclose(parallel, serial, atol=1e-12)


def test_generous_timeout_matches_untimed(many_distributions):
    untimed = pairwise_distances(many_distributions, DistanceConfig())
    timed = pairwise_distances(many_distributions, DistanceConfig(exact_timeout=60.0, n_jobs=2))
    np.testing.assert_allclose(timed, untimed, atol=1e-12)


def test_timeout_raises(golden_distributions):
    config = DistanceConfig(exact_timeout=1e-9, timeout_policy="raise")
    with pytest.raises(SolverTimeout) as excinfo:
        pairwise_distances(golden_distributions, config)
    assert excinfo.value.pair == (0, 1)


def test_timeout_falls_back_to_sinkhorn(golden_distributions):
    config = DistanceConfig(exact_timeout=1e-9, timeout_policy="sinkhorn", sinkhorn_reg=0.05)
    D = pairwise_distances(golden_distributions, config)
    assert D[0, 1] == pytest.approx(0.75, abs=0.05)


def test_exact_iteration_cap_from_config(many_distributions):
    with pytest.raises(SolverDivergence):
        pairwise_distances(many_distributions, DistanceConfig(exact_max_iter=1))


@pytest.mark.parametrize("n_jobs", [1, 2])
def test_slow_pair_does_not_push_later_pairs_to_sinkhorn(n_jobs):
    rng = np.random.default_rng(8)
    # (0, 1) is a 3500 x 3500 exact solve; (0, 2) and (1, 2) take milliseconds
    embeddings = [rng.random((3500, 2)), rng.random((3500, 2)), rng.random((2, 2))]
    distributions = build_distributions([[e] for e in embeddings], categorical=False)
    config = DistanceConfig(iterations=0, exact_timeout=0.5, timeout_policy="sinkhorn",
                            sinkhorn_reg=10.0, n_jobs=n_jobs)

    D = pairwise_distances(distributions, config)

    for i, j in [(0, 2), (1, 2)]:
        exact = wasserstein_distance(embeddings[i], embeddings[j], categorical=False)
        assert D[i, j] == pytest.approx(exact, abs=1e-9)
    assert np.isfinite(D[0, 1]) and D[0, 1] > 0.0
