import numpy as np
import pytest

from pydgfem.fem import transform


def _skewed_quad():
    return np.array([[0.0, 0.0], [2.0, 0.2], [2.3, 1.5], [-0.1, 1.1]])


def test_corners_map_to_reference_corners():
    corners = _skewed_quad()
    ref_corners = [(-1, -1), (1, -1), (1, 1), (-1, 1)]
    for c, xi in zip(corners, ref_corners):
        assert np.allclose(transform.x_mapping(corners, xi), c)


def test_jacobian_against_finite_differences():
    corners = _skewed_quad()
    xi = np.array([0.2, -0.4])
    J = transform.jacobian(corners, xi)
    h = 1e-6
    for j in range(2):
        e = np.zeros(2)
        e[j] = h
        fd = (transform.x_mapping(corners, xi + e) - transform.x_mapping(corners, xi - e)) / (2 * h)
        assert np.allclose(J[:, j], fd, atol=1e-8)
    assert transform.det_jacobian(corners, xi) > 0.0
    assert np.allclose(transform.inv_jac_T(corners, xi), np.linalg.inv(J).T)


def test_inverse_mapping_round_trip():
    corners = _skewed_quad()
    xi = np.array([0.35, 0.8])
    x = transform.x_mapping(corners, xi)
    assert np.allclose(transform.inverse_mapping(corners, x), xi, atol=1e-12)


def test_line_mapping():
    corners = np.array([[0.5], [1.5]])
    assert np.allclose(transform.x_mapping(corners, [0.0]), [1.0])
    assert np.isclose(transform.det_jacobian(corners, [0.3]), 0.5)


def test_inverse_mapping_degenerate_cell():
    corners = np.array([[0.0, 0.0], [1.0, 0.0], [2.0, 0.0], [3.0, 0.0]])
    with pytest.raises(ValueError):
        transform.inverse_mapping(corners, [0.5, 0.5])
