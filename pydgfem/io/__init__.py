from .visualization import plot_mesh, plot_sparsity
from .vtk import export_vtk, state_names

__all__ = ["plot_mesh", "plot_sparsity", "export_vtk", "state_names"]
