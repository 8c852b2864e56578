"""pydgfem.numerical_flux.convective
Two-state convective numerical fluxes ``F*(u_int, u_ext, n)``.

Every flux is consistent, ``F*(u, u, n) = F(u) . n``, and conservative,
``F*(a, b, n) = -F*(b, a, -n)``.
"""
from abc import ABC, abstractmethod
import numpy as np

from pydgfem.ad import empty_like_state, maximum, fabs, sqrt, dot
from pydgfem.physics.base import PhysicsModel
from pydgfem.physics.euler import Euler


class ConvectiveNumericalFlux(ABC):
    def __init__(self, physics: PhysicsModel):
        self.physics = physics

    @abstractmethod
    def evaluate_flux(self, u_int, u_ext, normal) -> np.ndarray:
        """Normal numerical flux, one entry per state."""

    def _central(self, u_int, u_ext, normal):
        Fi = self.physics.convective_normal_flux(u_int, normal)
        Fe = self.physics.convective_normal_flux(u_ext, normal)
        out = empty_like_state(self.physics.nstate, Fi, Fe)
        for s in range(self.physics.nstate):
            out[s] = 0.5 * (Fi[s] + Fe[s])
        return out

    def _scalar_dissipation(self, central, lam, u_int, u_ext):
        out = empty_like_state(self.physics.nstate, central, lam, u_int, u_ext)
        for s in range(self.physics.nstate):
            out[s] = central[s] - 0.5 * lam * (u_ext[s] - u_int[s])
        return out

    def __repr__(self):
        return f"{type(self).__name__}({type(self.physics).__name__})"


class LaxFriedrichs(ConvectiveNumericalFlux):
    """Local Lax-Friedrichs (Rusanov): dissipation from the larger normal wave speed of both sides."""

    def evaluate_flux(self, u_int, u_ext, normal):
        lam = maximum(self.physics.max_convective_normal_eigenvalue(u_int, normal),
                      self.physics.max_convective_normal_eigenvalue(u_ext, normal))
        return self._scalar_dissipation(self._central(u_int, u_ext, normal), lam, u_int, u_ext)


class Upwind(ConvectiveNumericalFlux):
    """Scalar upwinding with the normal wave speed of the averaged state.

    Exact upwinding for linear advection.
    """

    def evaluate_flux(self, u_int, u_ext, normal):
        u_avg = empty_like_state(self.physics.nstate, u_int, u_ext)
        for s in range(self.physics.nstate):
            u_avg[s] = 0.5 * (u_int[s] + u_ext[s])
        lam = self.physics.max_convective_normal_eigenvalue(u_avg, normal)
        return self._scalar_dissipation(self._central(u_int, u_ext, normal), lam, u_int, u_ext)


class RoePike(ConvectiveNumericalFlux):
    """Roe flux in the Roe-Pike form (wave strengths on Roe-averaged eigenvectors).

    Acoustic eigenvalues get Harten's entropy fix with threshold
    ``entropy_fix * a_roe``.
    """

    def __init__(self, physics: PhysicsModel, entropy_fix: float = 0.1):
        if not isinstance(physics, Euler):
            raise ValueError(f"RoePike requires Euler physics, got {type(physics).__name__}")
        super().__init__(physics)
        self.entropy_fix = float(entropy_fix)

    def _harten(self, lam, a):
        abs_lam = fabs(lam)
        delta = self.entropy_fix * a
        if abs_lam < delta:
            return (lam * lam + delta * delta) / (2.0 * delta)
        return abs_lam

    def evaluate_flux(self, u_int, u_ext, normal):
        ph = self.physics
        dim = ph.dim
        wL = ph.convert_conservative_to_primitive(u_int)
        wR = ph.convert_conservative_to_primitive(u_ext)
        rhoL, rhoR = wL[0], wR[0]
        vL, vR = wL[1:1 + dim], wR[1:1 + dim]
        pL, pR = wL[-1], wR[-1]
        HL = (u_int[-1] + pL) / rhoL
        HR = (u_ext[-1] + pR) / rhoR

        # Roe averages
        r = sqrt(rhoR / rhoL)
        rho = r * rhoL
        vel = empty_like_state(dim, vL, vR)
        for d in range(dim):
            vel[d] = (vL[d] + r * vR[d]) / (1.0 + r)
        H = (HL + r * HR) / (1.0 + r)
        vel2 = dot(vel, vel)
        a = sqrt(ph.gamm1 * (H - 0.5 * vel2))
        vn = dot(vel, normal)

        # jumps and wave strengths
        drho = rhoR - rhoL
        dp = pR - pL
        dv = empty_like_state(dim, vL, vR)
        for d in range(dim):
            dv[d] = vR[d] - vL[d]
        dvn = dot(dv, normal)
        a2 = a * a
        alpha1 = (dp - rho * a * dvn) / (2.0 * a2)
        alpha2 = drho - dp / a2
        alpha3 = (dp + rho * a * dvn) / (2.0 * a2)

        lam1 = self._harten(vn - a, a)
        lam2 = fabs(vn)
        lam3 = self._harten(vn + a, a)

        diss = empty_like_state(ph.nstate, u_int, u_ext)
        diss[0] = lam1 * alpha1 + lam2 * alpha2 + lam3 * alpha3
        shear_energy = 0.0
        for d in range(dim):
            dvt = dv[d] - dvn * normal[d]
            diss[1 + d] = (lam1 * alpha1 * (vel[d] - a * normal[d])
                           + lam2 * (alpha2 * vel[d] + rho * dvt)
                           + lam3 * alpha3 * (vel[d] + a * normal[d]))
            shear_energy = shear_energy + vel[d] * dvt
        diss[-1] = (lam1 * alpha1 * (H - vn * a)
                    + lam2 * (alpha2 * 0.5 * vel2 + rho * shear_energy)
                    + lam3 * alpha3 * (H + vn * a))

        central = self._central(u_int, u_ext, normal)
        out = empty_like_state(ph.nstate, central, diss)
        for s in range(ph.nstate):
            out[s] = central[s] - 0.5 * diss[s]
        return out
