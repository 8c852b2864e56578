import numpy as np
import pytest

from pydgfem.assembly import SparseAccumulator
from pydgfem.core import DofHandler
from pydgfem.dg import StrongDG
from pydgfem.fem.values import Discretization, CellValues
from pydgfem.numerical_flux import (LaxFriedrichs, Upwind, RoePike, SymmetricInternalPenalty)
from pydgfem.physics import BoundaryType, ConvectionDiffusion, Euler, ManufacturedSolution
from pydgfem.utils.meshgen import line_mesh, quad_mesh


def _setup(mesh, physics, p=1, conv=LaxFriedrichs):
    disc = Discretization(mesh, p, physics.nstate)
    dh = DofHandler(mesh, p, physics.nstate)
    dg = StrongDG(physics, conv(physics), SymmetricInternalPenalty(physics))
    return disc, dh, dg


def _fd(func, U, dofs, h=1e-7):
    cols = []
    for k in dofs:
        up, um = U.copy(), U.copy()
        up[k] += h
        um[k] -= h
        cols.append((func(up) - func(um)) / (2 * h))
    return np.array(cols).T


def _euler_state(mesh, dh, physics, amplitude=0.05, seed=0):
    rng = np.random.default_rng(seed)
    U = dh.interpolate(lambda x: physics.free_stream_state())
    return U * (1.0 + amplitude * rng.uniform(-1.0, 1.0, U.shape))


# ----------------------------------------------------------------------
# face terms
# ----------------------------------------------------------------------
def test_interior_face_is_conservative_in_1d():
    mesh = line_mesh(1.0, nx=2)
    ph = ConvectionDiffusion(1, 1, diffusion=False)
    disc, dh, dg = _setup(mesh, ph, p=2, conv=Upwind)
    U = np.random.default_rng(4).uniform(-1.0, 1.0, dh.n_dofs)
    face = mesh.interior_faces()[0]
    fv_int, fv_ext = disc.face_values(face.gid)
    rhs_int, rhs_ext, _ = dg.assemble_interior_face(
        fv_int, fv_ext, 1.0, dh.get_elemental_dofs(face.left), dh.get_elemental_dofs(face.right),
        U, np.zeros(dh.n_dofs))
    # sum over a partition of unity: -(F* - F_L) and -(-F* + F_R)
    u_left = U[dh.get_elemental_dofs(face.left)][-1]
    u_right = U[dh.get_elemental_dofs(face.right)][0]
    assert np.isclose(rhs_int.sum() + rhs_ext.sum(), -1.1 * (u_right - u_left))
    # upwind: the left side already carries F* = c u_left
    assert np.isclose(rhs_int.sum(), 0.0, atol=1e-14)


def test_two_cell_upwind_flux_contributions_are_exact_negatives():
    mesh = line_mesh(1.0, nx=2)
    ph = ConvectionDiffusion(1, 1, diffusion=False)
    disc, dh, dg = _setup(mesh, ph, p=1, conv=Upwind)
    U = np.array([0.3, -0.8, 1.7, 0.4])
    face = mesh.interior_faces()[0]
    fv_int, fv_ext = disc.face_values(face.gid)
    rhs_int, rhs_ext, _ = dg.assemble_interior_face(fv_int, fv_ext, 1.0, np.array([0, 1]), np.array([2, 3]),
                                                    U, np.zeros(4))
    c, u_left, u_right = 1.1, U[1], U[2]
    # strip the one-sided physical fluxes; what is left is -F* and +F*
    assert np.isclose(rhs_int.sum() - c * u_left, -(rhs_ext.sum() + c * u_right))
    assert np.isclose(rhs_int.sum() - c * u_left, -c * u_left)


def test_extrapolation_boundary_has_no_convective_jump():
    mesh = quad_mesh(1.0, 1.0, nx=1, ny=1, default_boundary_id=BoundaryType.EXTRAPOLATION)
    ph = Euler(2)
    disc, dh, dg = _setup(mesh, ph)
    U = _euler_state(mesh, dh, ph)
    for f in mesh.boundary_faces():
        fv, _ = disc.face_values(f.gid)
        rhs, _ = dg.assemble_boundary_face(f.boundary_id, fv, 1.0, dh.get_elemental_dofs(f.left),
                                           U, np.zeros(dh.n_dofs))
        assert np.allclose(rhs, 0.0, atol=1e-13)


def test_dof_count_mismatch_raises():
    mesh = quad_mesh(1.0, 1.0, nx=1, ny=1)
    ph = ConvectionDiffusion(2, 1)
    disc, dh, dg = _setup(mesh, ph)
    with pytest.raises(ValueError):
        dg.assemble_cell(disc.cell_values(0), disc.flux_values(0), np.arange(3), np.zeros(4), np.zeros(4))
    fv, _ = disc.face_values(0)
    with pytest.raises(ValueError):
        dg.assemble_boundary_face(BoundaryType.MANUFACTURED_SOLUTION, fv, 1.0, np.arange(5),
                                  np.zeros(5), np.zeros(5))
    other = Discretization(mesh, 1, 2)
    with pytest.raises(ValueError):
        dg.assemble_cell(other.cell_values(0), other.flux_values(0), np.arange(8), np.zeros(8), np.zeros(8))


def test_jxw_mismatch_raises():
    ph = ConvectionDiffusion(2, 1)
    disc, dh, dg = _setup(quad_mesh(1.0, 1.0, nx=1, ny=1), ph)
    wide, _, _ = _setup(quad_mesh(2.0, 1.0, nx=1, ny=1), ph)
    with pytest.raises(RuntimeError):
        dg.assemble_cell(disc.cell_values(0), wide.flux_values(0), dh.get_elemental_dofs(0),
                         np.zeros(dh.n_dofs), np.zeros(dh.n_dofs))


def test_cell_residual_of_constant_flux_is_zero():
    mesh = quad_mesh(1.0, 1.0, nx=2, ny=2, perturbation=0.1, seed=5)
    ph = Euler(2)
    disc, dh, dg = _setup(mesh, ph, p=2)
    U = dh.interpolate(lambda x: ph.free_stream_state())
    for elem in mesh.elements_list:
        rhs, _ = dg.assemble_cell(disc.cell_values(elem.id), disc.flux_values(elem.id),
                                  dh.get_elemental_dofs(elem.id), U, np.zeros(dh.n_dofs))
        assert np.allclose(rhs, 0.0, atol=1e-12)


# ----------------------------------------------------------------------
# local Jacobians against finite differences
# ----------------------------------------------------------------------
def _physics_cases():
    yield (ConvectionDiffusion(2, 2, manufactured=ManufacturedSolution.sine_product(2, 2)),
           LaxFriedrichs, BoundaryType.MANUFACTURED_SOLUTION)
    yield Euler(2, angle_of_attack=0.3), LaxFriedrichs, BoundaryType.FARFIELD
    yield (Euler(2, angle_of_attack=0.3, manufactured=Euler.default_manufactured_solution(2)),
           RoePike, BoundaryType.MANUFACTURED_SOLUTION)


@pytest.mark.parametrize("case", list(_physics_cases()))
def test_local_jacobians_match_finite_differences(case):
    ph, conv, bid = case
    mesh = quad_mesh(1.0, 1.0, nx=2, ny=2, perturbation=0.05, seed=2, default_boundary_id=bid)
    disc, dh, dg = _setup(mesh, ph, conv=conv)
    if isinstance(ph, Euler):
        U = _euler_state(mesh, dh, ph, seed=7)
    else:
        U = np.random.default_rng(7).uniform(-1.0, 1.0, dh.n_dofs)
    n = dh.n_dofs

    # cell
    cv, fl = disc.cell_values(3), disc.flux_values(3)
    dofs = dh.get_elemental_dofs(3)
    _, J = dg.assemble_cell(cv, fl, dofs, U, np.zeros(n), compute_jacobian=True)
    fd = _fd(lambda V: dg.assemble_cell(cv, fl, dofs, V, np.zeros(n))[0], U, dofs)
    assert np.allclose(J, fd, rtol=1e-5, atol=1e-6)

    # boundary face
    f = mesh.boundary_faces()[0]
    fv, _ = disc.face_values(f.gid)
    dofs = dh.get_elemental_dofs(f.left)
    pen = 4.0
    _, J = dg.assemble_boundary_face(f.boundary_id, fv, pen, dofs, U, np.zeros(n), compute_jacobian=True)
    fd = _fd(lambda V: dg.assemble_boundary_face(f.boundary_id, fv, pen, dofs, V, np.zeros(n))[0], U, dofs)
    assert np.allclose(J, fd, rtol=1e-5, atol=1e-6)

    # interior face, all four blocks
    f = mesh.interior_faces()[0]
    fv_i, fv_e = disc.face_values(f.gid)
    d_i, d_e = dh.get_elemental_dofs(f.left), dh.get_elemental_dofs(f.right)
    _, _, blocks = dg.assemble_interior_face(fv_i, fv_e, pen, d_i, d_e, U, np.zeros(n),
                                             compute_jacobian=True)

    def side(V, which):
        r_i, r_e, _ = dg.assemble_interior_face(fv_i, fv_e, pen, d_i, d_e, V, np.zeros(n))
        return r_i if which == "int" else r_e

    for row in ("int", "ext"):
        for col, cdofs in (("int", d_i), ("ext", d_e)):
            fd = _fd(lambda V: side(V, row), U, cdofs)
            assert np.allclose(blocks[(row, col)], fd, rtol=1e-5, atol=1e-6), (row, col)


def test_residual_scatter_and_jacobian_accumulation():
    mesh = line_mesh(1.0, nx=2)
    ph = ConvectionDiffusion(1, 1)
    disc, dh, dg = _setup(mesh, ph)
    U = np.array([0.1, 0.4, 0.3, -0.2])
    residual = np.ones(dh.n_dofs)
    acc = SparseAccumulator(dh.n_dofs)
    rhs, J = dg.assemble_cell(disc.cell_values(1), disc.flux_values(1), dh.get_elemental_dofs(1),
                              U, residual, acc, compute_jacobian=True)
    assert np.allclose(residual[:2], 1.0)
    assert np.allclose(residual[2:], 1.0 + rhs)
    assert np.allclose(acc.toarray()[2:, 2:], J)
    assert np.allclose(acc.toarray()[:2], 0.0)
    assert isinstance(disc.cell_values(1), CellValues)
