"""pydgfem.fem.transform
Reference -> physical mapping for straight-sided line and bilinear quad cells.
"""
import numpy as np

from pydgfem.fem.reference import get_reference


def _geometry_ref(corners: np.ndarray):
    element_type = "line" if corners.shape[1] == 1 else "quad"
    return get_reference(element_type, 1)


def _reorder_ccw(corners: np.ndarray) -> np.ndarray:
    """Corners in the geometry basis' lattice order (eta outer, xi inner)."""
    if corners.shape[0] == 4:
        return corners[[0, 1, 3, 2]]
    return corners


def _shape_and_grad(ref, xi_eta):
    xi_eta = np.atleast_1d(np.asarray(xi_eta, dtype=float))
    xi = float(xi_eta[0])
    eta = float(xi_eta[1]) if xi_eta.shape[0] > 1 else 0.0
    return ref.shape(xi, eta), ref.grad(xi, eta)


def x_mapping(corners, xi_eta):
    corners = np.asarray(corners, dtype=float)
    N, _ = _shape_and_grad(_geometry_ref(corners), xi_eta)
    return N @ _reorder_ccw(corners)              # (dim,)


def jacobian(corners, xi_eta):
    """``J[i, j] = d x_i / d xi_j``."""
    corners = np.asarray(corners, dtype=float)
    _, dN = _shape_and_grad(_geometry_ref(corners), xi_eta)
    return _reorder_ccw(corners).T @ dN


def det_jacobian(corners, xi_eta):
    return float(np.linalg.det(jacobian(corners, xi_eta)))


def inv_jac_T(corners, xi_eta):
    return np.linalg.inv(jacobian(corners, xi_eta)).T


def inverse_mapping(corners, x, tol=1e-13, maxiter=50):
    corners = np.asarray(corners, dtype=float)
    x = np.asarray(x, dtype=float)
    xi = np.zeros(corners.shape[1])
    for iter in range(maxiter):
        X = x_mapping(corners, xi)
        J = jacobian(corners, xi)
        try:
            delta = np.linalg.solve(J, x - X)
        except np.linalg.LinAlgError:
            raise ValueError(f"Jacobian singular at iteration {iter}, x={x}")
        xi += delta
        if np.linalg.norm(delta) < tol:
            break
    else:
        raise ValueError(f"Inverse mapping did not converge after {maxiter} iterations, "
                         f"x={x}, residual={np.linalg.norm(x - X)}")
    return xi
