"""pydgfem.fem.operators
Dense per-cell operators built from the basis tables and the
summation-by-parts check that ties volume and face integrals together.
"""
import numpy as np

from pydgfem.fem.values import CellValues, FaceValues, Discretization


def mass_matrix(cv: CellValues) -> np.ndarray:
    """``M_ij = int phi_i phi_j`` for the scalar basis."""
    return (cv.shape_values * cv.JxW[:, None]).T @ cv.shape_values


def stiffness_matrix(cv: CellValues, idim: int) -> np.ndarray:
    """``S_ij = int phi_i d phi_j / d x_idim``."""
    return (cv.shape_values * cv.JxW[:, None]).T @ cv.shape_grads[:, :, idim]


def flux_basis_stiffness(cv: CellValues, flux: CellValues, idim: int) -> np.ndarray:
    """``int phi_i d chi_j / d x_idim`` with ``chi`` the flux basis."""
    return (cv.shape_values * cv.JxW[:, None]).T @ flux.shape_grads[:, :, idim]


def flux_basis_transpose_stiffness(cv: CellValues, flux: CellValues, idim: int) -> np.ndarray:
    """``int d phi_i / d x_idim chi_j``."""
    return (cv.shape_grads[:, :, idim] * cv.JxW[:, None]).T @ flux.shape_values


def face_integral_basis(fv: FaceValues, fv_flux: FaceValues, idim: int) -> np.ndarray:
    """``oint phi_i chi_j n_idim`` over one face."""
    w = fv.JxW * fv.normals[:, idim]
    return (fv.shape_values * w[:, None]).T @ fv_flux.shape_values


def differentiation_matrix(flux: CellValues, idim: int) -> np.ndarray:
    """``D[q, j] = d chi_j / d x_idim (x_q)``; nodal derivative of a flux sampled at the quadrature nodes."""
    return flux.shape_grads[:, :, idim]


def sbp_defect(disc: Discretization, elem_id: int) -> float:
    """Largest entry of ``int dphi chi + int phi dchi - oint phi chi n`` over all directions.

    Zero (to round-off) whenever the quadrature integrates the products
    exactly, which is the discrete integration-by-parts identity the strong
    form relies on.
    """
    cv = disc.cell_values(elem_id)
    flux = disc.flux_values(elem_id)
    n_faces = len(disc.mesh.element(elem_id).faces)
    worst = 0.0
    for idim in range(cv.dim):
        vol = flux_basis_transpose_stiffness(cv, flux, idim) + flux_basis_stiffness(cv, flux, idim)
        surf = np.zeros_like(vol)
        for lid in range(n_faces):
            fv = disc.cell_face_values(elem_id, lid)
            fv_flux = disc.cell_face_values(elem_id, lid, ref=disc.flux_ref)
            surf += face_integral_basis(fv, fv_flux, idim)
        worst = max(worst, float(np.max(np.abs(vol - surf))))
    return worst
