from .convective import ConvectiveNumericalFlux, LaxFriedrichs, Upwind, RoePike
from .dissipative import DissipativeNumericalFlux, SymmetricInternalPenalty
from .split_form import SplitFluxPair, SplitForm, create_split_form, SPLIT_FORMS
from .factory import (create_convective_numerical_flux, create_dissipative_numerical_flux,
                      CONVECTIVE_FLUXES, DISSIPATIVE_FLUXES)

__all__ = ["ConvectiveNumericalFlux", "LaxFriedrichs", "Upwind", "RoePike",
           "DissipativeNumericalFlux", "SymmetricInternalPenalty",
           "SplitFluxPair", "SplitForm", "create_split_form", "SPLIT_FORMS",
           "create_convective_numerical_flux", "create_dissipative_numerical_flux",
           "CONVECTIVE_FLUXES", "DISSIPATIVE_FLUXES"]
