"""pydgfem.numerical_flux.split_form
Two-point split forms ``sum_pairs alpha f(u) d/dx g(u)`` for the volume term.

A split form is stored per ``[idim][istate]`` as a list of ``SplitFluxPair``.
It is consistent when ``sum alpha f dg/du = dF_{istate, idim}/du`` for every
state, so that on smooth data the split divergence equals ``div F``.
"""
from dataclasses import dataclass
from typing import Callable, List
import numpy as np

from pydgfem.ad import DerivativeArena, value_of, derivatives_of, jacobian_of
from pydgfem.physics.base import PhysicsModel


@dataclass(frozen=True)
class SplitFluxPair:
    f: Callable
    g: Callable
    alpha: float


class SplitForm:
    def __init__(self, physics: PhysicsModel, pairs: List[List[List[SplitFluxPair]]], name: str = ""):
        if len(pairs) != physics.dim or any(len(p) != physics.nstate for p in pairs):
            raise ValueError(f"Split form must be indexed [dim={physics.dim}][nstate={physics.nstate}].")
        self.physics = physics
        self.name = name
        self._pairs = pairs

    def pairs(self, idim: int, istate: int) -> List[SplitFluxPair]:
        return self._pairs[idim][istate]

    def consistency_defect(self, state) -> float:
        """Largest ``|sum alpha f dg/du - dF/du|`` over directions, states and unknowns."""
        ph = self.physics
        n = ph.nstate
        u = DerivativeArena(n).seed(value_of(np.asarray(state)))
        dF = jacobian_of(ph.convective_flux(u), n).reshape(n, ph.dim, n)
        worst = 0.0
        for d in range(ph.dim):
            for s in range(n):
                total = np.zeros(n)
                for pair in self.pairs(d, s):
                    total += pair.alpha * value_of(pair.f(u)) * derivatives_of(pair.g(u), n)
                worst = max(worst, float(np.max(np.abs(total - dF[s, d]))))
        return worst

    def __repr__(self):
        return f"SplitForm({self.name})"


def _one(u):
    return 1.0


def linear_advection_split_form(physics) -> SplitForm:
    """One pair per direction and state: ``f = 1``, ``g = c_d u_s``, ``alpha = 1``."""
    c = physics.advection_speed if physics.has_convection else np.zeros(physics.dim)
    pairs = [[[SplitFluxPair(f=_one, g=lambda u, cd=float(c[d]), s=s: cd * u[s], alpha=1.0)]
              for s in range(physics.nstate)]
             for d in range(physics.dim)]
    return SplitForm(physics, pairs, name="linear_advection")


def burgers_split_form(physics) -> SplitForm:
    """Energy-stable Burgers split: ``2/3 d(u^2/2)/dx + 1/3 u du/dx``."""
    pairs = [[[SplitFluxPair(f=_one, g=lambda u: 0.5 * u[0] * u[0], alpha=2.0 / 3.0),
               SplitFluxPair(f=lambda u: u[0], g=lambda u: u[0], alpha=1.0 / 3.0)]]
             for _ in range(physics.dim)]
    return SplitForm(physics, pairs, name="burgers")


SPLIT_FORMS = {
    "advection": linear_advection_split_form,
    "advection_vector": linear_advection_split_form,
    "convection_diffusion": linear_advection_split_form,
    "burgers_inviscid": burgers_split_form,
}


def create_split_form(pde_type: str, physics) -> SplitForm:
    if pde_type not in SPLIT_FORMS:
        raise ValueError(f"No split form is registered for pde_type '{pde_type}'; "
                         f"available: {sorted(SPLIT_FORMS)}")
    return SPLIT_FORMS[pde_type](physics)
