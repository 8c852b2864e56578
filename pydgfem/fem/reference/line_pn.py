from functools import lru_cache
import numpy as np
from .lagrange_1d import _lagrange_basis_1d, _eval_1d


@lru_cache(maxsize=None)
def line_pn(nodes: tuple):
    """
    Lagrange P_n on [-1,1] interpolating at ``nodes``.
    Returns: (shape_fn, grad_fn) with
      shape_fn(xi) -> (n,)
      grad_fn(xi)  -> (n, 1)
    """
    L, dL = _lagrange_basis_1d(nodes, 1)

    def shape(xi, eta=0.0):
        return _eval_1d(L, xi)

    def grad(xi, eta=0.0):
        return _eval_1d(dL[1], xi)[:, None]

    ref_nodes = np.asarray(nodes, dtype=float)[:, None]
    return shape, grad, ref_nodes
