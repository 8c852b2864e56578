"""pydgfem.numerical_flux.dissipative
Symmetric interior penalty (SIPG) trace and auxiliary fluxes.
"""
from abc import ABC, abstractmethod
import numpy as np

from pydgfem.ad import empty_like_state, dot
from pydgfem.physics.base import PhysicsModel


class DissipativeNumericalFlux(ABC):
    def __init__(self, physics: PhysicsModel):
        self.physics = physics

    @abstractmethod
    def evaluate_solution_flux(self, u_int, u_ext, normal) -> np.ndarray:
        """Shared trace state ``u*``."""

    @abstractmethod
    def evaluate_auxiliary_flux(self, u_int, u_ext, grad_int, grad_ext, normal_int,
                                penalty, on_boundary=False) -> np.ndarray:
        """Penalty-stabilised dissipative flux dotted with ``normal_int``."""


class SymmetricInternalPenalty(DissipativeNumericalFlux):
    """
    u*      = {u}
    sigma*.n = ({F_diss(u, grad u)} - penalty {F_diss(u, [[u]] (x) n)}) . n

    On a boundary face the averages collapse to the interior side.
    """

    def evaluate_solution_flux(self, u_int, u_ext, normal):
        out = empty_like_state(self.physics.nstate, u_int, u_ext)
        for s in range(self.physics.nstate):
            out[s] = 0.5 * (u_int[s] + u_ext[s])
        return out

    def evaluate_auxiliary_flux(self, u_int, u_ext, grad_int, grad_ext, normal_int,
                                penalty, on_boundary=False):
        ph = self.physics
        jump = empty_like_state((ph.nstate, ph.dim), u_int, u_ext)
        for s in range(ph.nstate):
            for d in range(ph.dim):
                jump[s, d] = (u_int[s] - u_ext[s]) * normal_int[d]

        flux_int = ph.dissipative_flux(u_int, grad_int)
        A_jump_int = ph.dissipative_flux(u_int, jump)
        if on_boundary:
            flux_avg, A_jump_avg = flux_int, A_jump_int
        else:
            flux_avg = 0.5 * (flux_int + ph.dissipative_flux(u_ext, grad_ext))
            A_jump_avg = 0.5 * (A_jump_int + ph.dissipative_flux(u_ext, jump))

        out = empty_like_state(ph.nstate, flux_avg, A_jump_avg)
        for s in range(ph.nstate):
            out[s] = dot(flux_avg[s] - penalty * A_jump_avg[s], normal_int)
        return out
