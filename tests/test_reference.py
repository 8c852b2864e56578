import numpy as np
import pytest

from pydgfem.fem.reference import get_reference, get_reference_on_nodes
from pydgfem.integration.quadrature import volume


@pytest.mark.parametrize("element_type", ["line", "quad"])
@pytest.mark.parametrize("p", [0, 1, 2, 3])
def test_partition_of_unity(element_type, p):
    ref = get_reference(element_type, p)
    pts, _ = volume(element_type, p + 2)
    vals, grads = ref.tabulate(pts)
    assert vals.shape == (pts.shape[0], (p + 1) ** ref.dim)
    assert np.allclose(vals.sum(axis=1), 1.0)
    assert np.allclose(grads.sum(axis=1), 0.0, atol=1e-10)


@pytest.mark.parametrize("family", ["equispaced", "gauss", "gauss_lobatto"])
def test_kronecker_property_at_nodes(family):
    ref = get_reference("quad", 2, family)
    vals, _ = ref.tabulate(ref.nodes)
    assert np.allclose(vals, np.eye(ref.n_shape), atol=1e-12)


def test_quad_node_ordering_eta_outer():
    ref = get_reference("quad", 2)
    # index j*(n+1)+i sits at (x_i, y_j)
    assert np.allclose(ref.nodes[1], [0.0, -1.0])
    assert np.allclose(ref.nodes[3], [-1.0, 0.0])


def test_gradient_reproduces_linear_field():
    ref = get_reference("quad", 3, "gauss_lobatto")
    f = 2.0 * ref.nodes[:, 0] - 0.5 * ref.nodes[:, 1]
    _, grads = ref.tabulate(np.array([[0.3, -0.2], [0.9, 0.1]]))
    assert np.allclose(np.einsum('qkd,k->qd', grads, f), [[2.0, -0.5], [2.0, -0.5]])


def test_reference_cache_and_unknown_type():
    assert get_reference("line", 2) is get_reference("line", 2)
    assert get_reference_on_nodes("line", (-1.0, 1.0)).degree == 1
    with pytest.raises(KeyError):
        get_reference_on_nodes("tri", (-1.0, 1.0))
    with pytest.raises(ValueError):
        get_reference("quad", -1)
