"""pydgfem.physics.manufactured
Symbolic manufactured solutions, lambdified to numpy callables.
"""
from functools import lru_cache
from typing import Sequence
import numpy as np
import sympy as sp

_COORDS = sp.symbols('x y')


class ManufacturedSolution:
    """Vector-valued ``u(x)`` with exact gradient and Hessian.

    Parameters
    ----------
    expressions : sequence of sympy expressions or strings
        One expression per state component in the coordinates ``x`` (and ``y``).
    dim : int
        Spatial dimension (1 or 2).
    """

    def __init__(self, expressions: Sequence, dim: int):
        if dim not in (1, 2):
            raise ValueError(f"Manufactured solutions are defined for dim 1 or 2, got {dim}")
        self.dim = dim
        self.symbols = _COORDS[:dim]
        self.expressions = [sp.sympify(e) for e in expressions]
        self.nstate = len(self.expressions)
        syms = self.symbols
        self._u = [sp.lambdify(syms, e, 'numpy') for e in self.expressions]
        self._du = [[sp.lambdify(syms, sp.diff(e, s), 'numpy') for s in syms]
                    for e in self.expressions]
        self._d2u = [[[sp.lambdify(syms, sp.diff(e, s, t), 'numpy') for t in syms] for s in syms]
                     for e in self.expressions]

    def value(self, x) -> np.ndarray:
        x = np.atleast_1d(np.asarray(x, dtype=float))[:self.dim]
        return np.array([float(f(*x)) for f in self._u])

    def gradient(self, x) -> np.ndarray:
        """``(nstate, dim)``."""
        x = np.atleast_1d(np.asarray(x, dtype=float))[:self.dim]
        return np.array([[float(f(*x)) for f in row] for row in self._du])

    def hessian(self, x) -> np.ndarray:
        """``(nstate, dim, dim)``."""
        x = np.atleast_1d(np.asarray(x, dtype=float))[:self.dim]
        return np.array([[[float(f(*x)) for f in r] for r in m] for m in self._d2u])

    def integral(self, linear: bool = True) -> np.ndarray:
        """``int u`` (or ``int u^2``) over the unit hypercube, per state."""
        return _integral_unit_cube(tuple(self.expressions), self.symbols, bool(linear))

    @classmethod
    def sine_product(cls, dim: int, nstate: int = 1, *, freq=(1.59, 1.81), offset=(1.0, 1.2)):
        """``sin(a x + d) sin(b y + e)``, shifted per state so the components differ."""
        exprs = []
        for s in range(nstate):
            e = sp.Integer(1)
            for i, sym in enumerate(_COORDS[:dim]):
                e *= sp.sin(freq[i] * sym + offset[i] + 0.1 * s)
            exprs.append(e)
        return cls(exprs, dim)

    @classmethod
    def polynomial(cls, expressions: Sequence[str], dim: int):
        return cls(list(expressions), dim)

    def __repr__(self):
        return f"ManufacturedSolution({[str(e) for e in self.expressions]})"


@lru_cache(maxsize=None)
def _integral_unit_cube(expressions, symbols, linear):
    out = []
    for e in expressions:
        integrand = e if linear else e**2
        bounds = [(s, 0, 1) for s in symbols]
        # trig antiderivatives may come back with a vanishing imaginary part
        out.append(float(sp.re(sp.N(sp.integrate(integrand, *bounds)))))
    return np.array(out)
