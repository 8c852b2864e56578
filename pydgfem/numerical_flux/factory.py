from pydgfem.numerical_flux.convective import ConvectiveNumericalFlux, LaxFriedrichs, Upwind, RoePike
from pydgfem.numerical_flux.dissipative import DissipativeNumericalFlux, SymmetricInternalPenalty

CONVECTIVE_FLUXES = {
    "lax_friedrichs": LaxFriedrichs,
    "upwind": Upwind,
    "roe": RoePike,
}

DISSIPATIVE_FLUXES = {
    "symm_internal_penalty": SymmetricInternalPenalty,
}


def create_convective_numerical_flux(name: str, physics) -> ConvectiveNumericalFlux:
    if name not in CONVECTIVE_FLUXES:
        raise KeyError(name)
    return CONVECTIVE_FLUXES[name](physics)


def create_dissipative_numerical_flux(name: str, physics) -> DissipativeNumericalFlux:
    if name not in DISSIPATIVE_FLUXES:
        raise KeyError(name)
    return DISSIPATIVE_FLUXES[name](physics)
