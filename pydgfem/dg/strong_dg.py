"""pydgfem.dg.strong_dg
Strong-form nodal DG residual and exact local Jacobians for one cell or face.

Residual convention (per test function ``phi``)::

    rhs = - int phi div F_conv + int grad(phi) . F_diss + int phi s
          - oint phi (F* - F_conv) . n - oint phi sigma* . n
          + oint grad(phi) . F_diss(u, (u* - u) (x) n)

Jacobians are obtained by forward-mode AD: each local unknown is seeded with a
one-hot derivative vector, and the derivative of every residual entry is read
back as one Jacobian row.
"""
import logging
from typing import Optional, Tuple
import numpy as np

from pydgfem.ad import DerivativeArena, weighted_sum, jacobian_of, value_of, empty_like_state
from pydgfem.fem.values import CellValues, FaceValues

logger = logging.getLogger(__name__)

JXW_TOLERANCE = 1e-14


class StrongDG:
    """Cell, boundary-face and interior-face assemblers.

    Parameters
    ----------
    physics : PhysicsModel
    conv_flux : ConvectiveNumericalFlux
    diss_flux : DissipativeNumericalFlux
    split_form : SplitForm, optional
        Required when assembling with ``use_split_form=True``.
    use_manufactured_source : bool
        Add ``physics.source_term`` to the cell residual.

    All three assemblers take ``compute_jacobian`` and ``use_split_form``.
    The split form only changes the volume term, so the face assemblers
    accept the flag and assemble the same face residual either way.
    """

    def __init__(self, physics, conv_flux, diss_flux, *, split_form=None,
                 use_manufactured_source: bool = False):
        self.physics = physics
        self.conv_flux = conv_flux
        self.diss_flux = diss_flux
        self.split_form = split_form
        self.use_manufactured_source = bool(use_manufactured_source)

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _check_dofs(self, values, dof_indices, label):
        if values.nstate != self.physics.nstate:
            raise ValueError(f"{label}: basis tables have nstate={values.nstate}, "
                             f"physics has nstate={self.physics.nstate}.")
        if len(dof_indices) != values.n_dofs:
            raise ValueError(f"{label}: {len(dof_indices)} dof indices given, "
                             f"basis tables have {values.n_dofs} dofs.")

    @staticmethod
    def _local_coefficients(solution, dof_indices, arena: Optional[DerivativeArena], offset=0):
        coeffs = np.asarray(solution, dtype=float)[np.asarray(dof_indices)]
        if arena is None:
            return coeffs
        return arena.seed(coeffs, offset)

    def _interpolate(self, values, coeffs):
        """State ``(n_q, nstate)`` and gradient ``(n_q, nstate, dim)`` at the quadrature points."""
        n_q, n_shape, dim, nstate = values.n_q, values.n_shape, values.dim, values.nstate
        U = empty_like_state((n_q, nstate), coeffs)
        G = empty_like_state((n_q, nstate, dim), coeffs)
        for s in range(nstate):
            block = coeffs[s * n_shape:(s + 1) * n_shape]
            for q in range(n_q):
                U[q, s] = weighted_sum(block, values.shape_values[q])
                for d in range(dim):
                    G[q, s, d] = weighted_sum(block, values.shape_grads[q, :, d])
        return U, G

    @staticmethod
    def _extract(rhs, n_indep):
        values = np.array([value_of(r) for r in rhs], dtype=float)
        jac = jacobian_of(rhs, n_indep) if n_indep else None
        return values, jac

    # ------------------------------------------------------------------
    # cell
    # ------------------------------------------------------------------
    def assemble_cell(self, cell_values: CellValues, flux_values: CellValues, dof_indices,
                      solution, residual, jacobian=None, *, compute_jacobian: bool = False,
                      use_split_form: bool = False) -> Tuple[np.ndarray, Optional[np.ndarray]]:
        """Volume residual of one cell, scattered into ``residual`` (and ``jacobian``).

        Returns ``(local_rhs, local_jacobian)``; the Jacobian is None unless
        requested.
        """
        self._check_dofs(cell_values, dof_indices, "assemble_cell")
        if flux_values.n_shape != flux_values.n_q:
            raise ValueError("Flux basis must interpolate at the volume quadrature points.")
        measure = max(cell_values.measure, np.finfo(float).tiny)
        if np.max(np.abs(cell_values.JxW - flux_values.JxW)) > JXW_TOLERANCE * max(1.0, measure):
            raise RuntimeError("JxW of the solution and flux-basis tables disagree.")
        if use_split_form:
            if self.split_form is None:
                raise ValueError("use_split_form requested but no split form is registered "
                                 f"for {type(self.physics).__name__}.")
            if cell_values.n_shape != cell_values.n_q or not np.allclose(
                    cell_values.shape_values, np.eye(cell_values.n_q), atol=1e-12):
                raise ValueError("The split form requires solution nodes collocated with "
                                 "the volume quadrature points.")

        n_dofs = cell_values.n_dofs
        arena = DerivativeArena(n_dofs) if compute_jacobian else None
        coeffs = self._local_coefficients(solution, dof_indices, arena)
        U, G = self._interpolate(cell_values, coeffs)

        ph = self.physics
        n_q, dim, nstate = cell_values.n_q, cell_values.dim, ph.nstate
        F_conv = [ph.convective_flux(U[q]) for q in range(n_q)]
        F_diss = [ph.dissipative_flux(U[q], G[q]) for q in range(n_q)]
        source = None
        if self.use_manufactured_source:
            source = [ph.source_term(cell_values.quadrature_points[q], U[q]) for q in range(n_q)]

        # strong divergence: contract nodal flux values with the flux-basis gradients
        div_F = None
        if not use_split_form:
            div_F = empty_like_state((n_q, nstate), coeffs)
            for s in range(nstate):
                for q in range(n_q):
                    terms = [F_conv[fb][s, d] for d in range(dim) for fb in range(n_q)]
                    weights = [flux_values.shape_grads[q, fb, d] for d in range(dim) for fb in range(n_q)]
                    div_F[q, s] = weighted_sum(terms, weights)
        else:
            split_terms = self._split_derivatives(flux_values, U, n_q, dim, nstate)

        rhs = empty_like_state(n_dofs, coeffs)
        for itest in range(n_dofs):
            s, k = cell_values.split_dof(itest)
            phi = cell_values.shape_values[:, k]
            dphi = cell_values.shape_grads[:, k, :]
            JxW = cell_values.JxW

            if use_split_form:
                # collocated: phi_itest(q) = delta_kq
                acc = 0.0
                for d in range(dim):
                    for ipair, pair in enumerate(self.split_form.pairs(d, s)):
                        acc = acc + pair.alpha * pair.f(U[k]) * split_terms[d][s][ipair][k]
                r = -acc * JxW[k]
            else:
                r = -weighted_sum(div_F[:, s], phi * JxW)

            for d in range(dim):
                r = r + weighted_sum([F_diss[q][s, d] for q in range(n_q)], dphi[:, d] * JxW)
            if source is not None:
                r = r + float(np.sum(phi * JxW * np.array([src[s] for src in source])))
            rhs[itest] = r

        local_rhs, local_jac = self._extract(rhs, n_dofs if compute_jacobian else 0)
        dofs = np.asarray(dof_indices)
        residual[dofs] += local_rhs
        if compute_jacobian and jacobian is not None:
            jacobian.add(dofs, dofs, local_jac)
        return local_rhs, local_jac

    def _split_derivatives(self, flux_values, U, n_q, dim, nstate):
        """``d/dx_d I[g](x_q)`` for every direction, state and pair."""
        out = []
        for d in range(dim):
            per_state = []
            for s in range(nstate):
                per_pair = []
                for pair in self.split_form.pairs(d, s):
                    g_nodes = [pair.g(U[fb]) for fb in range(n_q)]
                    per_pair.append([weighted_sum(g_nodes, flux_values.shape_grads[q, :, d])
                                     for q in range(n_q)])
                per_state.append(per_pair)
            out.append(per_state)
        return out

    # ------------------------------------------------------------------
    # boundary face
    # ------------------------------------------------------------------
    def assemble_boundary_face(self, boundary_id, face_values: FaceValues, penalty: float,
                               dof_indices, solution, residual, jacobian=None, *,
                               compute_jacobian: bool = False,
                               use_split_form: bool = False) -> Tuple[np.ndarray, Optional[np.ndarray]]:
        """Boundary-face residual; the ghost state comes from ``physics.boundary_face_values``."""
        self._check_dofs(face_values, dof_indices, "assemble_boundary_face")
        ph = self.physics
        n_dofs = face_values.n_dofs
        arena = DerivativeArena(n_dofs) if compute_jacobian else None
        coeffs = self._local_coefficients(solution, dof_indices, arena)
        U, G = self._interpolate(face_values, coeffs)

        n_q, dim, nstate = face_values.n_q, face_values.dim, ph.nstate
        conv_jump = empty_like_state((n_q, nstate), coeffs)
        aux_dot_n = []
        diss_jump = []
        for q in range(n_q):
            n = face_values.normals[q]
            x = face_values.quadrature_points[q]
            u_ext, g_ext = ph.boundary_face_values(boundary_id, x, n, U[q], G[q])
            F_star = self.conv_flux.evaluate_flux(U[q], u_ext, n)
            F_int_n = ph.convective_normal_flux(U[q], n)
            for s in range(nstate):
                conv_jump[q, s] = F_star[s] - F_int_n[s]
            u_star = self.diss_flux.evaluate_solution_flux(u_ext, u_ext, n)
            jump = empty_like_state((nstate, dim), u_star, U[q])
            for s in range(nstate):
                for d in range(dim):
                    jump[s, d] = (u_star[s] - U[q][s]) * n[d]
            diss_jump.append(ph.dissipative_flux(U[q], jump))
            aux_dot_n.append(self.diss_flux.evaluate_auxiliary_flux(
                U[q], u_ext, G[q], g_ext, n, penalty, on_boundary=True))

        rhs = self._face_rhs(face_values, conv_jump, aux_dot_n, diss_jump, aux_sign=1.0, like=coeffs)
        local_rhs, local_jac = self._extract(rhs, n_dofs if compute_jacobian else 0)
        dofs = np.asarray(dof_indices)
        residual[dofs] += local_rhs
        if compute_jacobian and jacobian is not None:
            jacobian.add(dofs, dofs, local_jac)
        return local_rhs, local_jac

    def _face_rhs(self, fv, conv_term, aux_dot_n, diss_jump, aux_sign, like):
        """``-phi conv_term - phi (aux_sign aux) + grad(phi) . diss_jump``, quadrature-summed."""
        rhs = empty_like_state(fv.n_dofs, like, conv_term)
        for itest in range(fv.n_dofs):
            s, k = fv.split_dof(itest)
            w = fv.shape_values[:, k] * fv.JxW
            r = -weighted_sum([conv_term[q, s] for q in range(fv.n_q)], w)
            r = r - aux_sign * weighted_sum([aux_dot_n[q][s] for q in range(fv.n_q)], w)
            for d in range(fv.dim):
                r = r + weighted_sum([diss_jump[q][s, d] for q in range(fv.n_q)],
                                     fv.shape_grads[:, k, d] * fv.JxW)
            rhs[itest] = r
        return rhs

    # ------------------------------------------------------------------
    # interior face
    # ------------------------------------------------------------------
    def assemble_interior_face(self, values_int: FaceValues, values_ext: FaceValues, penalty: float,
                               dofs_int, dofs_ext, solution, residual, jacobian=None, *,
                               compute_jacobian: bool = False,
                               use_split_form: bool = False):
        """Residuals of both sides of an interior face from one shared numerical flux.

        Returns ``(rhs_int, rhs_ext, blocks)`` where ``blocks`` is None or the
        dict ``{(int,int), (int,ext), (ext,int), (ext,ext)}`` of local Jacobians.
        """
        self._check_dofs(values_int, dofs_int, "assemble_interior_face (interior)")
        self._check_dofs(values_ext, dofs_ext, "assemble_interior_face (exterior)")
        if values_int.n_q != values_ext.n_q:
            raise ValueError("Interior and exterior face tables have different quadrature sizes.")
        ph = self.physics
        n_int, n_ext = values_int.n_dofs, values_ext.n_dofs
        n_total = n_int + n_ext
        arena = DerivativeArena(n_total) if compute_jacobian else None
        c_int = self._local_coefficients(solution, dofs_int, arena, 0)
        c_ext = self._local_coefficients(solution, dofs_ext, arena, n_int)
        U_i, G_i = self._interpolate(values_int, c_int)
        U_e, G_e = self._interpolate(values_ext, c_ext)

        n_q, dim, nstate = values_int.n_q, values_int.dim, ph.nstate
        conv_int = empty_like_state((n_q, nstate), c_int)
        conv_ext = empty_like_state((n_q, nstate), c_int)
        aux_dot_n = []
        diss_jump_int, diss_jump_ext = [], []
        for q in range(n_q):
            n = values_int.normals[q]
            F_star = self.conv_flux.evaluate_flux(U_i[q], U_e[q], n)
            Fi_n = ph.convective_normal_flux(U_i[q], n)
            Fe_n = ph.convective_normal_flux(U_e[q], n)
            for s in range(nstate):
                conv_int[q, s] = F_star[s] - Fi_n[s]
                # exterior: (-F*) - F_ext . (-n)
                conv_ext[q, s] = -F_star[s] + Fe_n[s]
            u_star = self.diss_flux.evaluate_solution_flux(U_i[q], U_e[q], n)
            jump_i = empty_like_state((nstate, dim), u_star)
            jump_e = empty_like_state((nstate, dim), u_star)
            for s in range(nstate):
                for d in range(dim):
                    jump_i[s, d] = (u_star[s] - U_i[q][s]) * n[d]
                    jump_e[s, d] = (u_star[s] - U_e[q][s]) * (-n[d])
            diss_jump_int.append(ph.dissipative_flux(U_i[q], jump_i))
            diss_jump_ext.append(ph.dissipative_flux(U_e[q], jump_e))
            aux_dot_n.append(self.diss_flux.evaluate_auxiliary_flux(
                U_i[q], U_e[q], G_i[q], G_e[q], n, penalty, on_boundary=False))

        rhs_int = self._face_rhs(values_int, conv_int, aux_dot_n, diss_jump_int, aux_sign=1.0, like=c_int)
        # the exterior reuses the auxiliary flux of the canonical side, negated
        rhs_ext = self._face_rhs(values_ext, conv_ext, aux_dot_n, diss_jump_ext, aux_sign=-1.0, like=c_int)

        vals_int, jac_int = self._extract(rhs_int, n_total if compute_jacobian else 0)
        vals_ext, jac_ext = self._extract(rhs_ext, n_total if compute_jacobian else 0)

        d_int, d_ext = np.asarray(dofs_int), np.asarray(dofs_ext)
        residual[d_int] += vals_int
        residual[d_ext] += vals_ext
        blocks = None
        if compute_jacobian:
            blocks = {
                ("int", "int"): jac_int[:, :n_int],
                ("int", "ext"): jac_int[:, n_int:],
                ("ext", "int"): jac_ext[:, :n_int],
                ("ext", "ext"): jac_ext[:, n_int:],
            }
            if jacobian is not None:
                jacobian.add(d_int, d_int, blocks[("int", "int")])
                jacobian.add(d_int, d_ext, blocks[("int", "ext")])
                jacobian.add(d_ext, d_int, blocks[("ext", "int")])
                jacobian.add(d_ext, d_ext, blocks[("ext", "ext")])
        return vals_int, vals_ext, blocks
