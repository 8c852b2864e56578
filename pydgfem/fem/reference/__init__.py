# pydgfem.fem.reference
"""
Order-agnostic Lagrange reference-element factory.
"""
from functools import lru_cache
from importlib import import_module
import numpy as np

from pydgfem.integration.quadrature import nodes_1d

_DIM = {"line": 1, "quad": 2}


class Ref:
    def __init__(self, element_type, shape_lambda, grad_lambda, nodes, nodes_1d):
        self.element_type = element_type
        self.dim = _DIM[element_type]
        self.shape_lambda = shape_lambda
        self.grad_lambda = grad_lambda
        self.nodes = nodes            # (n_shape, dim) reference support points
        self.nodes_1d = nodes_1d
        self.n_shape = nodes.shape[0]
        self.degree = len(nodes_1d) - 1

    @lru_cache(maxsize=None)
    def shape(self, xi, eta=0.0):
        return self.shape_lambda(xi, eta).astype(float).ravel()

    @lru_cache(maxsize=None)
    def grad(self, xi, eta=0.0):
        """Reference gradient, shape ``(n_shape, dim)``."""
        return np.asarray(self.grad_lambda(xi, eta), dtype=float).reshape(self.n_shape, self.dim)

    def tabulate(self, points):
        """Values ``(n_q, n_shape)`` and reference gradients ``(n_q, n_shape, dim)``."""
        points = np.atleast_2d(np.asarray(points, dtype=float))
        vals = np.empty((points.shape[0], self.n_shape))
        grads = np.empty((points.shape[0], self.n_shape, self.dim))
        for q, p in enumerate(points):
            xi_eta = (float(p[0]), float(p[1]) if self.dim > 1 else 0.0)
            vals[q] = self.shape(*xi_eta)
            grads[q] = self.grad(*xi_eta)
        return vals, grads

    def __repr__(self):
        return f"Ref({self.element_type}, degree={self.degree}, n_shape={self.n_shape})"


@lru_cache(maxsize=None)
def get_reference_on_nodes(element_type: str, nodes: tuple):
    """Lagrange element interpolating at the tensor product of the 1-D ``nodes``."""
    nodes = tuple(float(x) for x in nodes)
    if element_type == "line":
        shape_l, grad_l, ref_nodes = import_module("pydgfem.fem.reference.line_pn").line_pn(nodes)
    elif element_type == "quad":
        shape_l, grad_l, ref_nodes = import_module("pydgfem.fem.reference.quad_qn").quad_qn(nodes)
    else:
        raise KeyError(element_type)
    return Ref(element_type, shape_l, grad_l, ref_nodes, np.asarray(nodes))


@lru_cache(maxsize=None)
def get_reference(element_type: str, poly_order: int = 1, node_family: str = "equispaced"):
    if poly_order < 0:
        raise ValueError(f"poly_order must be non-negative, got {poly_order}")
    return get_reference_on_nodes(element_type, tuple(nodes_1d(poly_order + 1, node_family)))
