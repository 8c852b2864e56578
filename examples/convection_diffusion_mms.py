"""Example: steady convection-diffusion with a manufactured solution on refined quad meshes"""
import numpy as np, scipy.sparse.linalg as spla
from pydgfem import DGParameters, DGSystem
from pydgfem.physics import BoundaryType
from pydgfem.utils.meshgen import quad_mesh

params = DGParameters(pde_type="convection_diffusion", dimension=2, poly_degree=2,
                      use_manufactured_source_term=True, penalty_factor=2.0)
errors = []
for n in (2, 4, 8):
    mesh = quad_mesh(1.0, 1.0, nx=n, ny=n, default_boundary_id=BoundaryType.MANUFACTURED_SOLUTION)
    system = DGSystem(mesh, params)
    # the residual is affine in U: R(U) = R(0) + J U
    J, R0 = system.assemble_system(np.zeros(system.n_dofs))
    uh = spla.spsolve(J.tocsc(), -R0)
    u_exact = system.interpolate_manufactured_solution()
    errors.append(np.max(np.abs(uh - u_exact)))
    print(f'n = {n:2d}  n_dofs = {system.n_dofs:5d}  max nodal error = {errors[-1]:.3e}')
print('observed orders:', np.log2(np.array(errors[:-1]) / np.array(errors[1:])))
