"""pydgfem.parameters
Settings of a DG discretisation, validated on construction.
"""
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional, Tuple

from pydgfem.physics.factory import PDE_TYPES
from pydgfem.numerical_flux.factory import CONVECTIVE_FLUXES, DISSIPATIVE_FLUXES
from pydgfem.numerical_flux.split_form import SPLIT_FORMS
from pydgfem.integration.quadrature import QUADRATURE_FAMILIES

NODE_FAMILIES = ("equispaced",) + QUADRATURE_FAMILIES


@dataclass
class DGParameters:
    """Everything needed to build a ``DGSystem``."""

    pde_type: str = "advection"
    dimension: int = 2

    # numerical fluxes
    conv_num_flux: str = "lax_friedrichs"
    diss_num_flux: str = "symm_internal_penalty"
    penalty_factor: float = 1.0            # sigma = penalty_factor (p+1)^2 / h

    # discretisation
    poly_degree: int = 1
    overintegration: int = 0               # extra quadrature points per direction
    node_family: str = "equispaced"        # solution interpolation nodes
    quadrature_family: str = "gauss"
    use_collocated_nodes: bool = False     # solution nodes = quadrature nodes
    use_split_form: bool = False
    use_manufactured_source_term: bool = False

    # physics constants
    advection_speed: Optional[Tuple[float, ...]] = None
    diffusion_coefficient: float = 0.1
    diffusion_tensor: Optional[Tuple[Tuple[float, ...], ...]] = None
    gamma: float = 1.4
    mach_inf: float = 0.5
    angle_of_attack: float = 0.0
    manufactured_solution: Any = None

    def __post_init__(self):
        if self.pde_type not in PDE_TYPES:
            raise ValueError(f"Unknown pde_type '{self.pde_type}'; expected one of {PDE_TYPES}")
        if self.dimension not in (1, 2):
            raise ValueError(f"dimension must be 1 or 2, got {self.dimension}")
        if self.conv_num_flux not in CONVECTIVE_FLUXES:
            raise ValueError(f"Unknown conv_num_flux '{self.conv_num_flux}'; "
                             f"expected one of {sorted(CONVECTIVE_FLUXES)}")
        if self.conv_num_flux == "roe" and self.pde_type != "euler":
            raise ValueError("The Roe flux is only available for pde_type 'euler'.")
        if self.diss_num_flux not in DISSIPATIVE_FLUXES:
            raise ValueError(f"Unknown diss_num_flux '{self.diss_num_flux}'; "
                             f"expected one of {sorted(DISSIPATIVE_FLUXES)}")
        if self.poly_degree < 0:
            raise ValueError(f"poly_degree must be non-negative, got {self.poly_degree}")
        if self.overintegration < 0:
            raise ValueError(f"overintegration must be non-negative, got {self.overintegration}")
        if self.penalty_factor <= 0.0:
            raise ValueError(f"penalty_factor must be positive, got {self.penalty_factor}")
        if self.node_family not in NODE_FAMILIES:
            raise ValueError(f"Unknown node_family '{self.node_family}'; expected one of {NODE_FAMILIES}")
        if self.quadrature_family not in QUADRATURE_FAMILIES:
            raise ValueError(f"Unknown quadrature_family '{self.quadrature_family}'; "
                             f"expected one of {QUADRATURE_FAMILIES}")
        if self.quadrature_family == "gauss_lobatto" and self.poly_degree + 1 + self.overintegration < 2:
            raise ValueError("Gauss-Lobatto quadrature needs at least two points per direction.")
        if self.use_collocated_nodes:
            if self.overintegration != 0:
                raise ValueError("Collocated nodes require overintegration = 0.")
            self.node_family = self.quadrature_family
        if self.use_split_form:
            if self.pde_type not in SPLIT_FORMS:
                raise ValueError(f"No split form is registered for pde_type '{self.pde_type}'.")
            if not self.is_collocated:
                raise ValueError("use_split_form requires solution nodes collocated with the quadrature "
                                 "(use_collocated_nodes, or node_family == quadrature_family "
                                 "with overintegration = 0).")
        if self.advection_speed is not None and len(self.advection_speed) != self.dimension:
            raise ValueError(f"advection_speed must have {self.dimension} components.")

    @property
    def is_collocated(self) -> bool:
        """Solution nodes coincide with the volume quadrature points."""
        return self.node_family == self.quadrature_family and self.overintegration == 0

    @property
    def nstate(self) -> int:
        if self.pde_type == "euler":
            return self.dimension + 2
        return 2 if self.pde_type == "advection_vector" else 1

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "DGParameters":
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Unknown DG parameters: {sorted(unknown)}")
        return cls(**values)
