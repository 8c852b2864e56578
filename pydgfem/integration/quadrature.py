"""pydgfem.integration.quadrature
Gauss rules for lines and tensor-product quads on the reference domain [-1,1]^d.

Volume points are stacked eta-outer, xi-inner (``index = j*n + i``), the same
ordering the tensor-product Lagrange bases use, so a basis built on the
quadrature nodes is collocated point by point.
"""
import numpy as np
from functools import lru_cache
from numpy.polynomial.legendre import leggauss, Legendre

__all__ = ["gauss_legendre", "gauss_lobatto", "line_rule", "quad_rule",
           "volume", "face", "nodes_1d", "QUADRATURE_FAMILIES"]

QUADRATURE_FAMILIES = ("gauss", "gauss_lobatto")


# -------------------------------------------------------------------------
# 1-D rules
# -------------------------------------------------------------------------
def gauss_legendre(n_points: int):
    if n_points < 1:
        raise ValueError(n_points)
    return leggauss(n_points)  # (points, weights)


@lru_cache(maxsize=None)
def _gauss_lobatto_cached(n_points: int):
    if n_points == 2:
        return np.array([-1.0, 1.0]), np.array([1.0, 1.0])
    n = n_points - 1
    Pn = Legendre.basis(n)
    interior = np.sort(Pn.deriv().roots().real)
    x = np.concatenate(([-1.0], interior, [1.0]))
    w = 2.0 / (n * (n + 1) * Pn(x) ** 2)
    return x, w


def gauss_lobatto(n_points: int):
    """Gauss-Lobatto-Legendre points (end points included) and weights."""
    if n_points < 2:
        raise ValueError(f"Gauss-Lobatto needs at least 2 points, got {n_points}")
    x, w = _gauss_lobatto_cached(int(n_points))
    return x.copy(), w.copy()


def line_rule(n_points: int, family: str = "gauss"):
    if family == "gauss":
        return gauss_legendre(n_points)
    if family == "gauss_lobatto":
        return gauss_lobatto(n_points)
    raise KeyError(family)


def nodes_1d(n_nodes: int, family: str = "equispaced") -> np.ndarray:
    """1-D interpolation nodes on [-1,1] for a Lagrange basis of ``n_nodes`` points."""
    if n_nodes < 1:
        raise ValueError(n_nodes)
    if family == "equispaced":
        return np.array([0.0]) if n_nodes == 1 else np.linspace(-1.0, 1.0, n_nodes)
    if family == "gauss":
        return gauss_legendre(n_nodes)[0]
    if family == "gauss_lobatto":
        if n_nodes == 1:
            return np.array([0.0])
        return gauss_lobatto(n_nodes)[0]
    raise KeyError(family)


# -------------------------------------------------------------------------
# Tensor-product construction
# -------------------------------------------------------------------------
@lru_cache(maxsize=None)
def _quad_rule_cached(n_points: int, family: str):
    xi, wi = line_rule(n_points, family)
    # eta outer, xi inner
    pts = np.array([[x, y] for y in xi for x in xi])
    wts = np.array([wx * wy for wy in wi for wx in wi])
    return pts, wts


def quad_rule(n_points: int, family: str = "gauss"):
    pts, wts = _quad_rule_cached(int(n_points), family)
    return pts.copy(), wts.copy()


# -------------------------------------------------------------------------
# Public API
# -------------------------------------------------------------------------
def volume(element_type: str, n_points: int, family: str = "gauss"):
    """Reference volume rule; points have shape ``(n_q, dim)``."""
    if element_type == "line":
        x, w = line_rule(n_points, family)
        return x[:, None], w
    if element_type == "quad":
        return quad_rule(n_points, family)
    raise KeyError(element_type)


def face(element_type: str, face_index: int, n_points: int, family: str = "gauss"):
    """Reference points on local face ``face_index`` and the 1-D reference weights.

    Quad faces run counter-clockwise (bottom, right, top, left), the same
    orientation as the mesh's local edge table.  Line faces are the two end
    points with unit weight.
    """
    if element_type == "line":
        if face_index == 0:
            return np.array([[-1.0]]), np.array([1.0])
        if face_index == 1:
            return np.array([[1.0]]), np.array([1.0])
        raise IndexError(face_index)
    if element_type == "quad":
        t, w = line_rule(n_points, family)
        if face_index == 0:   # bottom
            pts = np.column_stack([t, -np.ones_like(t)])
        elif face_index == 1: # right
            pts = np.column_stack([np.ones_like(t), t])
        elif face_index == 2: # top
            pts = np.column_stack([t[::-1], np.ones_like(t)])
        elif face_index == 3: # left
            pts = np.column_stack([-np.ones_like(t), t[::-1]])
        else:
            raise IndexError(face_index)
        return pts, w[::-1] if face_index in (2, 3) else w
    raise KeyError(element_type)
