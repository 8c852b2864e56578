"""pydgfem.assembly.dg_global
Global residual / Jacobian assembly of the strong-form DG operator.
"""
import logging
import time
from typing import Callable, Optional, Tuple
import numpy as np, scipy.sparse as sp

from pydgfem.assembly.global_matrix import SparseAccumulator
from pydgfem.core.dofhandler import DofHandler
from pydgfem.core.mesh import Mesh
from pydgfem.dg.strong_dg import StrongDG
from pydgfem.fem.values import Discretization
from pydgfem.numerical_flux.factory import create_convective_numerical_flux, create_dissipative_numerical_flux
from pydgfem.numerical_flux.split_form import create_split_form
from pydgfem.parameters import DGParameters
from pydgfem.physics.factory import create_physics

logger = logging.getLogger(__name__)


class DGSystem:
    """
    Owns the discretisation, the global residual and the Jacobian accumulator.

    Cells are visited in id order, then faces in id order; every interior face
    is assembled once from its canonical (left) side, so repeated assemblies
    of the same state are bit-identical.

    Parameters
    ----------
    mesh : Mesh
        Line or quad mesh with boundary ids on its boundary faces.
    parameters : DGParameters
        Discretisation and physics settings.
    physics : PhysicsModel, optional
        Overrides the model built from ``parameters``.
    """

    def __init__(self, mesh: Mesh, parameters: DGParameters, *, physics=None):
        if mesh.spatial_dim != parameters.dimension:
            raise ValueError(f"Mesh is {mesh.spatial_dim}D but parameters.dimension={parameters.dimension}.")
        self.mesh = mesh
        self.parameters = parameters
        self.physics = create_physics(parameters) if physics is None else physics
        if self.physics.dim != mesh.spatial_dim:
            raise ValueError(f"Physics is {self.physics.dim}D but the mesh is {mesh.spatial_dim}D.")
        nstate = self.physics.nstate
        p = parameters.poly_degree
        self.dof_handler = DofHandler(mesh, p, nstate, node_family=parameters.node_family)
        self.discretization = Discretization(mesh, p, nstate,
                                             overintegration=parameters.overintegration,
                                             node_family=parameters.node_family,
                                             quadrature_family=parameters.quadrature_family)
        if parameters.use_split_form and not self.discretization.is_collocated:
            raise ValueError("use_split_form requires solution nodes collocated with the quadrature.")
        split_form = create_split_form(parameters.pde_type, self.physics) if parameters.use_split_form else None
        self.dg = StrongDG(
            self.physics,
            create_convective_numerical_flux(parameters.conv_num_flux, self.physics),
            create_dissipative_numerical_flux(parameters.diss_num_flux, self.physics),
            split_form=split_form,
            use_manufactured_source=parameters.use_manufactured_source_term,
        )
        self.n_dofs = self.dof_handler.n_dofs
        self.solution = np.zeros(self.n_dofs)
        self.residual = np.zeros(self.n_dofs)
        self.jacobian: Optional[sp.csr_matrix] = None
        logger.info("DGSystem: %s, degree %d, %d cells, %d dofs",
                    parameters.pde_type, p, mesh.n_elements, self.n_dofs)

    # ------------------------------------------------------------------
    # state
    # ------------------------------------------------------------------
    def set_initial_condition(self, func: Callable[[np.ndarray], np.ndarray]) -> np.ndarray:
        self.solution = self.dof_handler.interpolate(func)
        return self.solution

    def interpolate_manufactured_solution(self) -> np.ndarray:
        return self.set_initial_condition(self.physics.manufactured_solution)

    def penalty(self, face_id: int) -> float:
        """``penalty_factor (p+1)^2 / h`` with the smaller ``h = |K|/|F|`` of the adjacent cells."""
        f = self.mesh.face(face_id)
        h = self.mesh.element_char_length(f.left, face_id)
        if f.right is not None:
            h = min(h, self.mesh.element_char_length(f.right, face_id))
        p = self.parameters.poly_degree
        return self.parameters.penalty_factor * (p + 1) ** 2 / h

    # ------------------------------------------------------------------
    # assembly
    # ------------------------------------------------------------------
    def assemble_residual(self, solution: Optional[np.ndarray] = None, *,
                          compute_jacobian: bool = False) -> np.ndarray:
        """Assemble the global residual (and CSR Jacobian) at ``solution``."""
        U = self.solution if solution is None else np.asarray(solution, dtype=float)
        if U.shape != (self.n_dofs,):
            raise ValueError(f"Solution has shape {U.shape}, expected ({self.n_dofs},).")
        t0 = time.perf_counter()
        residual = np.zeros(self.n_dofs)
        jac = SparseAccumulator(self.n_dofs) if compute_jacobian else None
        disc, dh = self.discretization, self.dof_handler
        use_split = self.parameters.use_split_form

        # --- Volume terms ---
        for elem in self.mesh.elements_list:
            self.dg.assemble_cell(disc.cell_values(elem.id), disc.flux_values(elem.id),
                                  dh.get_elemental_dofs(elem.id), U, residual, jac,
                                  compute_jacobian=compute_jacobian, use_split_form=use_split)

        # --- Face terms ---
        for face in self.mesh.faces_list:
            fv_int, fv_ext = disc.face_values(face.gid)
            dofs_L = dh.get_elemental_dofs(face.left)
            if face.right is None:
                self.dg.assemble_boundary_face(face.boundary_id, fv_int, self.penalty(face.gid),
                                               dofs_L, U, residual, jac,
                                               compute_jacobian=compute_jacobian,
                                               use_split_form=use_split)
            else:
                dofs_R = dh.get_elemental_dofs(face.right)
                self.dg.assemble_interior_face(fv_int, fv_ext, self.penalty(face.gid),
                                               dofs_L, dofs_R, U, residual, jac,
                                               compute_jacobian=compute_jacobian,
                                               use_split_form=use_split)

        self.residual = residual
        if compute_jacobian:
            self.jacobian = jac.tocsr()
        logger.info("Assembled residual%s in %.3f s, |R|_inf = %.3e",
                    " and Jacobian" if compute_jacobian else "",
                    time.perf_counter() - t0, float(np.max(np.abs(residual))) if residual.size else 0.0)
        return residual

    def assemble_system(self, solution: Optional[np.ndarray] = None) -> Tuple[sp.csr_matrix, np.ndarray]:
        """``(J, R)`` at ``solution``, in the ``(K, F)`` order of a linear assembly."""
        R = self.assemble_residual(solution, compute_jacobian=True)
        return self.jacobian, R

    def residual_norm(self) -> float:
        return float(np.linalg.norm(self.residual))

    def integrate(self, solution: Optional[np.ndarray] = None) -> np.ndarray:
        """``int u`` over the domain, per state."""
        U = self.solution if solution is None else solution
        total = np.zeros(self.physics.nstate)
        n_shape = self.dof_handler.n_shape
        for elem in self.mesh.elements_list:
            cv = self.discretization.cell_values(elem.id)
            coeffs = U[self.dof_handler.get_elemental_dofs(elem.id)]
            for s in range(self.physics.nstate):
                total[s] += cv.JxW @ (cv.shape_values @ coeffs[s * n_shape:(s + 1) * n_shape])
        return total

    def __repr__(self):
        return f"<DGSystem {self.parameters.pde_type} p={self.parameters.poly_degree} n_dofs={self.n_dofs}>"
