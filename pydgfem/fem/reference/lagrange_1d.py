from functools import lru_cache
import sympy as sp
import numpy as np


@lru_cache(maxsize=None)
def _lagrange_basis_1d(nodes: tuple, max_deriv_order: int = 1):
    """Return 1D Lagrange basis on ``nodes`` + derivatives as NUMPY-callable lambdas."""
    x = sp.symbols('x')
    L = []
    dL = {k: [] for k in range(max_deriv_order+1)}
    for i, xi in enumerate(nodes):
        Li = sp.Integer(1)
        for j, xj in enumerate(nodes):
            if i == j:
                continue
            Li *= (x - sp.Float(xj)) / sp.Float(xi - xj)
        for k in range(max_deriv_order+1):
            dL[k].append(sp.lambdify(x, sp.diff(Li, x, k), 'numpy'))
    L = dL[0]
    return L, dL


def _eval_1d(fns, z):
    return np.array([f(z) for f in fns], dtype=float)
