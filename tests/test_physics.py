import numpy as np
import pytest

from pydgfem import DGParameters
from pydgfem.physics import (BoundaryType, ConvectionDiffusion, Euler, InviscidBurgers,
                             ManufacturedSolution, create_physics)


def test_euler_free_stream_non_dimensionalisation():
    ph = Euler(2, mach_inf=0.5, angle_of_attack=0.1)
    u = ph.free_stream_state()
    w = ph.convert_conservative_to_primitive(u)
    assert np.isclose(w[0], 1.0)
    assert np.isclose(np.linalg.norm(w[1:3]), 1.0)
    assert np.isclose(w[-1], 1.0 / (1.4 * 0.25))
    assert np.isclose(ph.compute_sound(u), 2.0)
    assert np.isclose(ph.compute_mach_number(u), 0.5)
    assert np.isclose(ph.compute_temperature(w), 1.0)
    assert np.isclose(ph.compute_density_from_pressure_temperature(w[-1], 1.0), 1.0)


def test_euler_primitive_round_trip_and_entropy():
    ph = Euler(2)
    w = np.array([1.3, 0.2, -0.4, 2.1])
    u = ph.convert_primitive_to_conservative(w)
    assert np.allclose(ph.convert_conservative_to_primitive(u), w)
    assert np.isclose(ph.compute_entropy_measure(u), 2.1 / 1.3 ** 1.4)
    assert np.isclose(ph.compute_dimensional_temperature(w), 2.1 / (1.3 * 287.058))


def test_euler_eigenvalues_and_flux_jacobian():
    ph = Euler(2)
    u = ph.convert_primitive_to_conservative(np.array([1.1, 0.3, 0.2, 2.0]))
    n = np.array([0.6, 0.8])
    lam = ph.convective_eigenvalues(u, n)
    A = ph.convective_flux_directional_jacobian(u, n)
    assert np.allclose(np.sort(np.linalg.eigvals(A).real), np.sort(lam))
    assert np.isclose(ph.max_convective_normal_eigenvalue(u, n), np.max(np.abs(lam)))


def test_euler_slip_wall_mirrors_normal_momentum():
    ph = Euler(2)
    u = ph.convert_primitive_to_conservative(np.array([1.0, 0.5, 0.3, 2.0]))
    n = np.array([0.0, 1.0])
    u_ext, _ = ph.boundary_face_values(BoundaryType.WALL, np.zeros(2), n, u, np.zeros((4, 2)))
    assert np.allclose(u_ext, [u[0], u[1], -u[2], u[3]])
    assert np.allclose(0.5 * (u_ext[1:3] + u[1:3]) @ n, 0.0)


def test_boundary_dispatch():
    ph = ConvectionDiffusion(1, 1, diffusion=False, manufactured=ManufacturedSolution.polynomial(["2*x"], 1))
    u, g = np.array([5.0]), np.zeros((1, 1))
    x = np.array([0.25])
    inflow, _ = ph.boundary_face_values(BoundaryType.MANUFACTURED_SOLUTION, x, np.array([-1.0]), u, g)
    outflow, _ = ph.boundary_face_values(BoundaryType.MANUFACTURED_SOLUTION, x, np.array([1.0]), u, g)
    assert np.allclose(inflow, [0.5]) and np.allclose(outflow, [5.0])
    extrap, _ = ph.boundary_face_values(BoundaryType.EXTRAPOLATION, x, np.array([-1.0]), u, g)
    assert np.allclose(extrap, u)
    with pytest.raises(ValueError):
        ph.boundary_face_values(BoundaryType.WALL, x, np.array([1.0]), u, g)
    with pytest.raises(ValueError):
        ph.boundary_face_values(42, x, np.array([1.0]), u, g)


def test_burgers_source_term():
    ms = ManufacturedSolution.polynomial(["x*y + 1"], 2)
    ph = InviscidBurgers(2, manufactured=ms)
    x = np.array([0.5, 0.2])
    # u (u_x + u_y)
    assert np.allclose(ph.source_term(x), [1.1 * (0.2 + 0.5)])


def test_manufactured_solution_derivatives_and_integral():
    ms = ManufacturedSolution.polynomial(["x**2*y", "3*x + y"], 2)
    x = np.array([0.5, 2.0])
    assert np.allclose(ms.value(x), [0.5, 3.5])
    assert np.allclose(ms.gradient(x), [[2.0, 0.25], [3.0, 1.0]])
    assert np.allclose(ms.hessian(x)[0], [[4.0, 1.0], [1.0, 0.0]])
    assert np.allclose(ms.integral(), [1.0 / 6.0, 2.0])
    assert np.allclose(ms.integral(linear=False)[1], 9 / 3 + 2 * 3 / 4 + 1 / 3)


def test_sine_product_integral_in_two_dimensions():
    ms = ManufacturedSolution.sine_product(2, 1)
    # int_0^1 sin(a s + d) ds = (cos d - cos(a + d)) / a, per direction
    expected = np.prod([(np.cos(d) - np.cos(a + d)) / a for a, d in [(1.59, 1.0), (1.81, 1.2)]])
    assert np.isclose(ms.integral()[0], expected)
    ph = create_physics(DGParameters(pde_type="advection", dimension=2))
    assert np.allclose(ph.integral_output(), [expected])


def test_sine_product_components_differ():
    ms = ManufacturedSolution.sine_product(2, 2)
    v = ms.value([0.3, 0.7])
    assert v.shape == (2,) and not np.isclose(v[0], v[1])


def test_factory_builds_each_pde():
    expected = {"advection": 1, "advection_vector": 2, "diffusion": 1,
                "convection_diffusion": 1, "burgers_inviscid": 1, "euler": 4}
    for pde, nstate in expected.items():
        ph = create_physics(DGParameters(pde_type=pde, dimension=2))
        assert ph.nstate == nstate and ph.dim == 2
        assert ph.manufactured is not None
    assert not create_physics(DGParameters(pde_type="advection")).has_dissipation
    assert create_physics(DGParameters(pde_type="diffusion")).has_dissipation


def test_invalid_physics_settings():
    with pytest.raises(ValueError):
        ConvectionDiffusion(2, 1, diffusion_tensor=((1.0, 0.0), (0.0, -1.0)))
    with pytest.raises(ValueError):
        Euler(2, mach_inf=0.0)
    with pytest.raises(ValueError):
        ConvectionDiffusion(2, 1, convection=False, diffusion=False)
    with pytest.raises(ValueError):
        InviscidBurgers(2).manufactured_solution(np.zeros(2))
