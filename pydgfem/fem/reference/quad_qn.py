from functools import lru_cache
import numpy as np
from .lagrange_1d import _lagrange_basis_1d, _eval_1d


@lru_cache(maxsize=None)
def quad_qn(nodes: tuple):
    """
    Tensor-product Q_n on [-1,1]^2 interpolating at ``nodes`` x ``nodes``.
    Stacking order is (eta outer, xi inner): index = j*(n+1) + i
    """
    L, dL = _lagrange_basis_1d(nodes, 1)

    def shape(xi, eta):
        lx = _eval_1d(L, xi)          # (n+1,)
        ly = _eval_1d(L, eta)         # (n+1,)
        # eta outer, xi inner
        return np.outer(ly, lx).reshape(-1)

    def grad(xi, eta):
        lx, ly = _eval_1d(L, xi), _eval_1d(L, eta)
        dx, dy = _eval_1d(dL[1], xi), _eval_1d(dL[1], eta)
        return np.column_stack([np.outer(ly, dx).reshape(-1),
                                np.outer(dy, lx).reshape(-1)])

    n1 = np.asarray(nodes, dtype=float)
    ref_nodes = np.array([[x, y] for y in n1 for x in n1])
    return shape, grad, ref_nodes
