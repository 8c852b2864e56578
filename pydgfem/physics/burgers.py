"""
pydgfem/physics/burgers.py
--------------------------
Scalar inviscid Burgers equation.
"""
import numpy as np

from pydgfem.ad import empty_like_state, fabs
from pydgfem.physics.base import PhysicsModel
from pydgfem.physics.boundary import BoundaryType


class InviscidBurgers(PhysicsModel):
    """Scalar inviscid Burgers, ``F_d = u^2 / 2`` in every direction."""

    def __init__(self, dim, *, manufactured=None):
        super().__init__(dim, 1, manufactured)

    def convective_flux(self, u):
        out = empty_like_state((1, self.dim), u)
        for d in range(self.dim):
            out[0, d] = 0.5 * u[0] * u[0]
        return out

    def convective_eigenvalues(self, u, normal):
        out = empty_like_state(1, u)
        out[0] = u[0] * float(np.sum(normal))
        return out

    def max_convective_eigenvalue(self, u):
        return fabs(u[0]) * np.sqrt(self.dim)

    def _boundary_state(self, btype, x, normal, u_int, grad_int):
        if btype == BoundaryType.MANUFACTURED_SOLUTION:
            um = self.manufactured_solution(x)
            if um[0] * float(np.sum(normal)) < 0.0:
                return um, grad_int.copy()
            return u_int.copy(), grad_int.copy()
        if btype == BoundaryType.INFLOW:
            return self.manufactured_solution(x), grad_int.copy()
        if btype == BoundaryType.OUTFLOW:
            return u_int.copy(), grad_int.copy()
        return super()._boundary_state(btype, x, normal, u_int, grad_int)
