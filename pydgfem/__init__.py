"""pydgfem: strong-form nodal discontinuous Galerkin residuals with exact AD Jacobians."""
from pydgfem.parameters import DGParameters
from pydgfem.assembly.dg_global import DGSystem
from pydgfem.core.mesh import Mesh

__all__ = ["DGParameters", "DGSystem", "Mesh"]
__version__ = "0.1.0"
