"""
pydgfem/physics/convection_diffusion.py
---------------------------------------
Linear advection, diffusion, or both, for one or two decoupled states.

    F_conv = c u          F_diss = -kappa A grad(u)
"""
import numpy as np

from pydgfem.ad import empty_like_state, dot
from pydgfem.physics.base import PhysicsModel
from pydgfem.physics.boundary import BoundaryType

_DEFAULT_SPEED = {1: (1.1,), 2: (1.1, -1.155)}
_DEFAULT_TENSOR = {1: ((1.0,),), 2: ((1.0, 0.1), (0.1, 0.8))}


class ConvectionDiffusion(PhysicsModel):
    def __init__(self, dim, nstate=1, *, convection=True, diffusion=True,
                 advection_speed=None, diffusion_coefficient=0.1,
                 diffusion_tensor=None, manufactured=None):
        if nstate not in (1, 2):
            raise ValueError(f"ConvectionDiffusion supports nstate 1 or 2, got {nstate}")
        if not (convection or diffusion):
            raise ValueError("ConvectionDiffusion needs convection, diffusion, or both.")
        super().__init__(dim, nstate, manufactured)
        self.has_convection = bool(convection)
        self.has_diffusion = bool(diffusion)
        c = _DEFAULT_SPEED[dim] if advection_speed is None else advection_speed
        self.advection_speed = np.asarray(c, dtype=float).reshape(dim)
        A = _DEFAULT_TENSOR[dim] if diffusion_tensor is None else diffusion_tensor
        self.diffusion_tensor = np.asarray(A, dtype=float).reshape(dim, dim)
        if self.has_diffusion and np.any(np.linalg.eigvalsh(0.5 * (self.diffusion_tensor + self.diffusion_tensor.T)) <= 0.0):
            raise ValueError("Diffusion tensor must be positive definite.")
        self.diffusion_coefficient = float(diffusion_coefficient)

    @property
    def has_dissipation(self) -> bool:
        return self.has_diffusion

    def _speed(self) -> np.ndarray:
        return self.advection_speed if self.has_convection else np.zeros(self.dim)

    def convective_flux(self, u):
        c = self._speed()
        out = empty_like_state((self.nstate, self.dim), u)
        for s in range(self.nstate):
            for d in range(self.dim):
                out[s, d] = c[d] * u[s]
        return out

    def convective_eigenvalues(self, u, normal):
        return np.full(self.nstate, float(np.dot(self._speed(), normal)))

    def max_convective_eigenvalue(self, u):
        return float(np.linalg.norm(self._speed()))

    def dissipative_flux(self, u, grad_u):
        out = empty_like_state((self.nstate, self.dim), u, grad_u)
        kA = self.diffusion_coefficient * self.diffusion_tensor if self.has_diffusion else np.zeros((self.dim, self.dim))
        for s in range(self.nstate):
            for i in range(self.dim):
                out[s, i] = -dot(kA[i], grad_u[s])
        return out

    def _dissipative_source(self, x):
        if not self.has_diffusion:
            return np.zeros(self.nstate)
        H = self.manufactured.hessian(x)
        kA = self.diffusion_coefficient * self.diffusion_tensor
        return -np.einsum('ij,sij->s', kA, H)

    def _boundary_state(self, btype, x, normal, u_int, grad_int):
        if btype == BoundaryType.MANUFACTURED_SOLUTION:
            inflow = float(np.dot(self._speed(), normal)) < 0.0
            if inflow or self.has_diffusion:
                return self.manufactured_solution(x), grad_int.copy()
            return u_int.copy(), grad_int.copy()
        if btype == BoundaryType.INFLOW:
            return self.manufactured_solution(x), grad_int.copy()
        if btype == BoundaryType.OUTFLOW:
            return u_int.copy(), grad_int.copy()
        return super()._boundary_state(btype, x, normal, u_int, grad_int)
