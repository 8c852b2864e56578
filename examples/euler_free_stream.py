"""Example: free-stream preservation of the Euler residual on a randomly perturbed quad mesh"""
import numpy as np
from pydgfem import DGParameters, DGSystem
from pydgfem.physics import BoundaryType
from pydgfem.utils.meshgen import quad_mesh
from pydgfem.io import plot_mesh, plot_sparsity, export_vtk

mesh = quad_mesh(2.0, 1.0, nx=8, ny=4, perturbation=0.04, seed=7,
                 default_boundary_id=BoundaryType.FARFIELD)
mesh.tag_boundary_faces({BoundaryType.WALL: lambda x, y: np.isclose(y, 0.0) and 0.5 < x < 1.5})

params = DGParameters(pde_type="euler", dimension=2, poly_degree=3, conv_num_flux="roe",
                      mach_inf=0.3, angle_of_attack=0.0)
system = DGSystem(mesh, params)
system.set_initial_condition(lambda x: system.physics.free_stream_state())
J, R = system.assemble_system()
print('|R|_inf at free stream =', np.max(np.abs(R)))
print('Jacobian nnz =', J.nnz)

export_vtk('euler_free_stream.vtu', system)
plot_mesh(mesh, plot_normals=False, show=False)
plot_sparsity(J)
