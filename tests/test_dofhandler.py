import numpy as np
import pytest

from pydgfem.core import DofHandler
from pydgfem.utils.meshgen import quad_mesh, line_mesh


def test_component_major_numbering():
    mesh = quad_mesh(1.0, 1.0, nx=2, ny=1)
    dh = DofHandler(mesh, poly_order=1, nstate=3)
    assert dh.n_shape == 4
    assert dh.n_dofs_per_cell == 12
    assert dh.n_dofs == 24
    assert np.array_equal(dh.get_elemental_dofs(1), np.arange(12, 24))
    assert dh.local_index(2, 1) == 9
    assert dh.component(9) == 2
    assert np.array_equal(dh.components, np.repeat([0, 1, 2], 4))
    assert len(dh.cell_dofs_list()) == 2


def test_interpolate_reproduces_polynomials():
    mesh = quad_mesh(2.0, 1.0, nx=2, ny=2)
    dh = DofHandler(mesh, poly_order=2, nstate=2)
    U = dh.interpolate(lambda x: [x[0] * x[1], 1.0 + x[0] ** 2])
    for elem in mesh.elements_list:
        dofs = dh.get_elemental_dofs(elem.id)
        pts = dh.support_points(elem.id)
        assert np.allclose(U[dofs[:dh.n_shape]], pts[:, 0] * pts[:, 1])
        assert np.allclose(U[dofs[dh.n_shape:]], 1.0 + pts[:, 0] ** 2)


def test_support_points_of_line_cells():
    mesh = line_mesh(1.0, nx=2)
    dh = DofHandler(mesh, poly_order=2, nstate=1)
    assert np.allclose(dh.support_points(1)[:, 0], [0.5, 0.75, 1.0])


def test_interpolate_state_count_mismatch():
    dh = DofHandler(line_mesh(1.0, nx=2), poly_order=1, nstate=2)
    with pytest.raises(ValueError):
        dh.interpolate(lambda x: [1.0])
