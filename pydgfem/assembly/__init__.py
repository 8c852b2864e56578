from .global_matrix import SparseAccumulator
from .dg_global import DGSystem

__all__ = ["SparseAccumulator", "DGSystem"]
