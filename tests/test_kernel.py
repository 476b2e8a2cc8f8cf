import numpy as np
import pytest

from WWL import estimate_gamma, laplacian_kernel

D = np.array([
    [0.0, 1.0, 2.0],
    [1.0, 0.0, 6.0],
    [2.0, 6.0, 0.0],
])


@pytest.mark.parametrize("heuristic, expected", [("unit", 1.0), ("median", 0.5), ("mean", 1.0 / 3.0)])
def test_gamma_heuristics(heuristic, expected):
    assert estimate_gamma(D, heuristic) == pytest.approx(expected)


def test_gamma_without_positive_distances():
    assert estimate_gamma(np.zeros((3, 3)), "median") == 1.0
    assert estimate_gamma(np.zeros((1, 1)), "mean") == 1.0


def test_unknown_heuristic():
    with pytest.raises(ValueError):
        estimate_gamma(D, "max")


def test_laplacian_kernel_values():
    K = laplacian_kernel(D)
    np.testing.assert_allclose(K, np.exp(-D))
    np.testing.assert_array_equal(np.diag(K), 1.0)


def test_explicit_gamma_and_squared():
    K = laplacian_kernel(D, gamma=0.25, squared=True)
    assert K[1, 2] == pytest.approx(np.exp(-0.25 * 36.0))
    assert K[2, 1] == K[1, 2]


def test_kernel_is_symmetrised():
    asymmetric = D.copy()
    asymmetric[0, 1] = 1.0 + 1e-12
    K = laplacian_kernel(asymmetric)
    np.testing.assert_array_equal(K, K.T)


def test_non_positive_gamma():
    with pytest.raises(ValueError):
        laplacian_kernel(D, gamma=0.0)
