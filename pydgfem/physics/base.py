"""
pydgfem/physics/base.py
-----------------------
Abstract base class for the conservation laws

    div( F_conv(u) + F_diss(u, grad u) ) = s(x)

States are 1-D arrays of length ``nstate``; gradients and fluxes are
``(nstate, dim)`` arrays.  Every method accepts floats or AD duals (object
arrays) alike.
"""
import logging
from abc import ABC, abstractmethod
from typing import Optional, Tuple
import numpy as np

from pydgfem.ad import DerivativeArena, jacobian_of, value_of, empty_like_state, dot, fabs, maximum
from pydgfem.physics.boundary import BoundaryType, as_boundary_type
from pydgfem.physics.manufactured import ManufacturedSolution

logger = logging.getLogger(__name__)


class PhysicsModel(ABC):
    def __init__(self, dim: int, nstate: int, manufactured: Optional[ManufacturedSolution] = None):
        if dim not in (1, 2):
            raise ValueError(f"dim must be 1 or 2, got {dim}")
        self.dim = int(dim)
        self.nstate = int(nstate)
        if manufactured is not None and (manufactured.nstate != self.nstate or manufactured.dim != self.dim):
            raise ValueError(f"Manufactured solution has nstate={manufactured.nstate}, dim={manufactured.dim}; "
                             f"{type(self).__name__} needs nstate={self.nstate}, dim={self.dim}.")
        self.manufactured = manufactured

    # ------------------------------------------------------------------
    # interface
    # ------------------------------------------------------------------
    @abstractmethod
    def convective_flux(self, u) -> np.ndarray:
        """ Convective flux ``(nstate, dim)``. """

    @abstractmethod
    def convective_eigenvalues(self, u, normal) -> np.ndarray:
        """ Eigenvalues of ``dF/du . n``, one per state. """

    @abstractmethod
    def max_convective_eigenvalue(self, u):
        """ Spectral radius of the flux Jacobian over all directions. """

    @property
    def has_dissipation(self) -> bool:
        return False

    def dissipative_flux(self, u, grad_u) -> np.ndarray:
        """ Dissipative flux ``(nstate, dim)``; zero unless overridden. """
        out = empty_like_state((self.nstate, self.dim), u, grad_u)
        out[...] = 0.0
        return out

    def _boundary_state(self, btype: BoundaryType, x, normal, u_int, grad_int):
        raise ValueError(f"{type(self).__name__} does not support boundary type {btype.name}")

    # ------------------------------------------------------------------
    # shared behaviour
    # ------------------------------------------------------------------
    def convective_normal_flux(self, u, normal) -> np.ndarray:
        F = self.convective_flux(u)
        out = empty_like_state(self.nstate, F)
        for s in range(self.nstate):
            out[s] = dot(F[s], normal)
        return out

    def max_convective_normal_eigenvalue(self, u, normal):
        """ ``max_s |lambda_s(u, n)|``. """
        eig = self.convective_eigenvalues(u, normal)
        out = fabs(eig[0])
        for lam in eig[1:]:
            out = maximum(out, fabs(lam))
        return out

    def convective_flux_directional_jacobian(self, u, normal) -> np.ndarray:
        """ ``d(F(u) . n)/du`` as a dense ``(nstate, nstate)`` matrix, by forward AD. """
        arena = DerivativeArena(self.nstate)
        u_ad = arena.seed(value_of(np.asarray(u)))
        return jacobian_of(self.convective_normal_flux(u_ad, normal), self.nstate)

    def boundary_face_values(self, boundary_id, x, normal, u_int, grad_int) -> Tuple[np.ndarray, np.ndarray]:
        """ Ghost state and gradient outside a boundary face. """
        btype = as_boundary_type(boundary_id)
        if btype == BoundaryType.EXTRAPOLATION:
            return u_int.copy(), grad_int.copy()
        return self._boundary_state(btype, x, normal, u_int, grad_int)

    def _require_manufactured(self):
        if self.manufactured is None:
            raise ValueError(f"{type(self).__name__} has no manufactured solution configured.")
        return self.manufactured

    def manufactured_solution(self, x) -> np.ndarray:
        return self._require_manufactured().value(x)

    def manufactured_gradient(self, x) -> np.ndarray:
        return self._require_manufactured().gradient(x)

    def _dissipative_source(self, x) -> np.ndarray:
        return np.zeros(self.nstate)

    def source_term(self, x, u=None) -> np.ndarray:
        """ ``div F_conv(u_m) + div F_diss(u_m)`` for the manufactured solution ``u_m``.

        Independent of ``u``: the source never enters the Jacobian.
        """
        if self.manufactured is None:
            return np.zeros(self.nstate)
        um = self.manufactured_solution(x)
        gm = self.manufactured_gradient(x)
        s = np.zeros(self.nstate)
        for d in range(self.dim):
            e_d = np.zeros(self.dim)
            e_d[d] = 1.0
            s += self.convective_flux_directional_jacobian(um, e_d) @ gm[:, d]
        return s + self._dissipative_source(x)

    def integral_output(self, linear: bool = True) -> np.ndarray:
        """ ``int u_m`` or ``int u_m^2`` over the unit hypercube. """
        return self._require_manufactured().integral(linear)

    def __repr__(self):
        return f"{type(self).__name__}(dim={self.dim}, nstate={self.nstate})"
