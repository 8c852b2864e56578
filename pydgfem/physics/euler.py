"""
pydgfem/physics/euler.py
------------------------
Compressible Euler equations for a calorically perfect gas.

Conservative state ``[rho, rho v_1, ..., rho v_dim, E]``;
``p = (gamma - 1) (E - rho |v|^2 / 2)``.  Free-stream non-dimensionalisation:
``rho_inf = 1``, ``|v_inf| = 1``, ``a_inf = 1 / M_inf``.
"""
import numpy as np
import sympy as sp

from pydgfem.ad import empty_like_state, sqrt, fabs, dot
from pydgfem.physics.base import PhysicsModel
from pydgfem.physics.boundary import BoundaryType
from pydgfem.physics.manufactured import ManufacturedSolution, _COORDS

GAS_CONSTANT_AIR = 287.058  # J/(kg K)


class Euler(PhysicsModel):
    def __init__(self, dim, *, gamma=1.4, mach_inf=0.5, angle_of_attack=0.0,
                 ref_length=1.0, manufactured=None):
        super().__init__(dim, dim + 2, manufactured)
        if mach_inf <= 0.0:
            raise ValueError(f"mach_inf must be positive, got {mach_inf}")
        self.gam = float(gamma)
        self.gamm1 = self.gam - 1.0
        self.ref_length = float(ref_length)
        self.mach_inf = float(mach_inf)
        self.mach_inf_sqr = self.mach_inf ** 2
        self.angle_of_attack = float(angle_of_attack)
        self.density_inf = 1.0
        self.sound_inf = 1.0 / self.mach_inf
        self.pressure_inf = 1.0 / (self.gam * self.mach_inf_sqr)
        if dim == 1:
            self.velocities_inf = np.array([1.0])
        else:
            self.velocities_inf = np.array([np.cos(self.angle_of_attack), np.sin(self.angle_of_attack)])

    # ------------------------------------------------------------------
    # state helpers
    # ------------------------------------------------------------------
    def compute_velocities(self, u):
        out = empty_like_state(self.dim, u)
        for d in range(self.dim):
            out[d] = u[1 + d] / u[0]
        return out

    @staticmethod
    def compute_velocity_squared(vel):
        return dot(vel, vel)

    def compute_pressure(self, u):
        vel = self.compute_velocities(u)
        return self.gamm1 * (u[-1] - 0.5 * u[0] * self.compute_velocity_squared(vel))

    def compute_sound(self, u):
        return sqrt(self.gam * self.compute_pressure(u) / u[0])

    def convert_conservative_to_primitive(self, u):
        out = empty_like_state(self.nstate, u)
        out[0] = u[0]
        out[1:1 + self.dim] = self.compute_velocities(u)
        out[-1] = self.compute_pressure(u)
        return out

    def convert_primitive_to_conservative(self, w):
        out = empty_like_state(self.nstate, w)
        out[0] = w[0]
        for d in range(self.dim):
            out[1 + d] = w[0] * w[1 + d]
        out[-1] = self.compute_total_energy(w)
        return out

    def compute_total_energy(self, w):
        """ Total energy from primitive variables. """
        vel = w[1:1 + self.dim]
        return w[-1] / self.gamm1 + 0.5 * w[0] * self.compute_velocity_squared(vel)

    def compute_entropy_measure(self, u):
        """ ``p / rho^gamma``; constant along isentropic flow. """
        return self.compute_pressure(u) / u[0] ** self.gam

    def compute_mach_number(self, u):
        vel = self.compute_velocities(u)
        return sqrt(self.compute_velocity_squared(vel)) / self.compute_sound(u)

    def compute_dimensional_temperature(self, w):
        return w[-1] / (w[0] * GAS_CONSTANT_AIR)

    def compute_temperature(self, w):
        """ Non-dimensional temperature (``T_inf = 1``) from primitive variables. """
        return self.gam * self.mach_inf_sqr * w[-1] / w[0]

    def compute_density_from_pressure_temperature(self, pressure, temperature):
        return self.gam * self.mach_inf_sqr * pressure / temperature

    def free_stream_state(self) -> np.ndarray:
        w = np.concatenate(([self.density_inf], self.velocities_inf, [self.pressure_inf]))
        return self.convert_primitive_to_conservative(w).astype(float)

    # ------------------------------------------------------------------
    # fluxes
    # ------------------------------------------------------------------
    def convective_flux(self, u):
        vel = self.compute_velocities(u)
        p = self.compute_pressure(u)
        out = empty_like_state((self.nstate, self.dim), u)
        for d in range(self.dim):
            out[0, d] = u[1 + d]
            for i in range(self.dim):
                out[1 + i, d] = u[1 + i] * vel[d]
            out[1 + d, d] = out[1 + d, d] + p
            out[-1, d] = vel[d] * (u[-1] + p)
        return out

    def convective_eigenvalues(self, u, normal):
        vn = dot(self.compute_velocities(u), normal)
        a = self.compute_sound(u)
        out = empty_like_state(self.nstate, u)
        out[0] = vn - a
        for d in range(self.dim):
            out[1 + d] = vn
        out[-1] = vn + a
        return out

    def max_convective_normal_eigenvalue(self, u, normal):
        return fabs(dot(self.compute_velocities(u), normal)) + self.compute_sound(u)

    def max_convective_eigenvalue(self, u):
        vel = self.compute_velocities(u)
        return sqrt(self.compute_velocity_squared(vel)) + self.compute_sound(u)

    # ------------------------------------------------------------------
    # boundaries
    # ------------------------------------------------------------------
    def _boundary_state(self, btype, x, normal, u_int, grad_int):
        if btype == BoundaryType.MANUFACTURED_SOLUTION:
            return self.manufactured_solution(x), grad_int.copy()
        if btype == BoundaryType.WALL:
            # slip wall: mirror the normal momentum
            u_ext = u_int.copy()
            mn = dot(u_int[1:1 + self.dim], normal)
            for d in range(self.dim):
                u_ext[1 + d] = u_int[1 + d] - 2.0 * mn * normal[d]
            return u_ext, grad_int.copy()
        if btype in (BoundaryType.FARFIELD, BoundaryType.INFLOW):
            return self.free_stream_state(), grad_int.copy()
        if btype == BoundaryType.OUTFLOW:
            return u_int.copy(), grad_int.copy()
        return super()._boundary_state(btype, x, normal, u_int, grad_int)

    # ------------------------------------------------------------------
    # manufactured solution
    # ------------------------------------------------------------------
    @classmethod
    def default_manufactured_solution(cls, dim, *, gamma=1.4, mach_inf=0.5):
        """Smooth subsonic primitive field mapped to conservative variables."""
        syms = _COORDS[:dim]
        wave = sp.Integer(1)
        for i, s in enumerate(syms):
            wave *= sp.sin((1.59 + 0.2 * i) * s + 1.0 + 0.2 * i)
        rho = 1 + sp.Rational(1, 10) * wave
        vel = [sp.Rational(1, 2) + sp.Rational(1, 10) * wave,
               -sp.Rational(1, 5) + sp.Rational(1, 20) * sp.cos(2 * syms[0])][:dim]
        p = (1 + sp.Rational(1, 10) * wave) / (gamma * mach_inf ** 2)
        E = p / (gamma - 1) + rho * sum(v**2 for v in vel) / 2
        return ManufacturedSolution([rho] + [rho * v for v in vel] + [E], dim)
