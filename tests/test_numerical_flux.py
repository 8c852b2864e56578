import numpy as np
import pytest

from pydgfem.ad import DerivativeArena, jacobian_of
from pydgfem.numerical_flux import (LaxFriedrichs, Upwind, RoePike, SymmetricInternalPenalty,
                                    create_convective_numerical_flux, create_dissipative_numerical_flux)
from pydgfem.physics import ConvectionDiffusion, Euler, InviscidBurgers


def _euler_pair(dim):
    ph = Euler(dim, mach_inf=0.5, angle_of_attack=0.2)
    if dim == 1:
        wL, wR = np.array([1.0, 0.6, 2.9]), np.array([0.9, 0.4, 2.5])
    else:
        wL, wR = np.array([1.0, 0.6, 0.1, 2.9]), np.array([0.9, 0.4, -0.2, 2.5])
    return ph, ph.convert_primitive_to_conservative(wL), ph.convert_primitive_to_conservative(wR)


def _cases():
    n2 = np.array([0.6, 0.8])
    ph, uL, uR = _euler_pair(2)
    yield ph, uL, uR, n2
    ph, uL, uR = _euler_pair(1)
    yield ph, uL, uR, np.array([1.0])
    yield InviscidBurgers(2), np.array([0.7]), np.array([-0.3]), n2
    yield ConvectionDiffusion(2, 2), np.array([0.7, 1.1]), np.array([-0.3, 0.2]), n2


@pytest.mark.parametrize("flux_cls", [LaxFriedrichs, Upwind, RoePike])
def test_consistency_and_conservation(flux_cls):
    for ph, uL, uR, n in _cases():
        if flux_cls is RoePike and not isinstance(ph, Euler):
            continue
        flux = flux_cls(ph)
        assert np.allclose(flux.evaluate_flux(uL, uL, n), ph.convective_normal_flux(uL, n))
        assert np.allclose(flux.evaluate_flux(uL, uR, n), -flux.evaluate_flux(uR, uL, -n))


def test_upwind_is_exact_upwinding_for_advection():
    ph = ConvectionDiffusion(2, 1, diffusion=False, advection_speed=(1.0, 0.5))
    n = np.array([1.0, 0.0])
    F = Upwind(ph).evaluate_flux(np.array([2.0]), np.array([5.0]), n)
    assert np.allclose(F, [2.0])
    F = Upwind(ph).evaluate_flux(np.array([2.0]), np.array([5.0]), -n)
    assert np.allclose(F, [-5.0])


def test_lax_friedrichs_uses_both_sides():
    ph = InviscidBurgers(1)
    n = np.array([1.0])
    F = LaxFriedrichs(ph).evaluate_flux(np.array([1.0]), np.array([-3.0]), n)
    # 0.5 (0.5 + 4.5) - 0.5 * 3 * (-3 - 1)
    assert np.allclose(F, [8.5])


def test_roe_resolves_a_stationary_contact():
    ph = Euler(1, mach_inf=0.5)
    p = 1.0 / (1.4 * 0.25)
    uL = ph.convert_primitive_to_conservative(np.array([1.0, 0.0, p]))
    uR = ph.convert_primitive_to_conservative(np.array([2.0, 0.0, p]))
    F = RoePike(ph).evaluate_flux(uL, uR, np.array([1.0]))
    assert np.allclose(F, [0.0, p, 0.0])


def test_roe_rejects_non_euler_physics():
    with pytest.raises(ValueError):
        RoePike(InviscidBurgers(1))


@pytest.mark.parametrize("name", ["lax_friedrichs", "upwind", "roe"])
def test_flux_jacobian_matches_finite_differences(name):
    ph, uL, uR = _euler_pair(2)
    n = np.array([0.6, 0.8])
    flux = create_convective_numerical_flux(name, ph)
    arena = DerivativeArena(8)
    J = jacobian_of(flux.evaluate_flux(arena.seed(uL, 0), arena.seed(uR, 4), n), 8)
    h = 1e-7
    u0 = np.concatenate([uL, uR])
    for k in range(8):
        up, um = u0.copy(), u0.copy()
        up[k] += h
        um[k] -= h
        fd = (flux.evaluate_flux(up[:4], up[4:], n) - flux.evaluate_flux(um[:4], um[4:], n)) / (2 * h)
        assert np.allclose(J[:, k], fd, rtol=1e-5, atol=1e-6)


def test_factories_reject_unknown_names():
    ph = InviscidBurgers(1)
    with pytest.raises(KeyError):
        create_convective_numerical_flux("hllc", ph)
    with pytest.raises(KeyError):
        create_dissipative_numerical_flux("bassi_rebay", ph)


def test_sipg_boundary_collapses_to_interior_side():
    ph = ConvectionDiffusion(2, 1, convection=False, diffusion_tensor=((1.0, 0.0), (0.0, 1.0)))
    sipg = SymmetricInternalPenalty(ph)
    n = np.array([1.0, 0.0])
    u_i, u_e = np.array([1.0]), np.array([0.4])
    g_i, g_e = np.array([[2.0, 1.0]]), np.array([[-7.0, 3.0]])
    aux = sipg.evaluate_auxiliary_flux(u_i, u_e, g_i, g_e, n, penalty=10.0, on_boundary=True)
    # (-k g_i + 10 k (u_i - u_e) n) . n with k = 0.1
    assert np.allclose(aux, [-0.2 + 10.0 * 0.1 * 0.6])
    aux = sipg.evaluate_auxiliary_flux(u_i, u_e, g_i, g_e, n, penalty=10.0)
    assert np.allclose(aux, [-0.1 * 0.5 * (2.0 - 7.0) + 0.6])
    assert np.allclose(sipg.evaluate_solution_flux(u_i, u_e, n), [0.7])
