"""pydgfem.ad.dual
Forward-mode dual numbers carrying a value and a dense derivative vector.

A :class:`Dual` is created per assembly call, one-hot seeded from a
:class:`DerivativeArena`, and propagated through the physics, numerical fluxes
and quadrature sums.  ``x.dx(k)`` is then the exact partial derivative of ``x``
with respect to local unknown ``k``.
"""
import numbers
import numpy as np


class Dual:
    """Scalar ``val + sum_k deriv[k] eps_k`` with ``eps_i eps_j = 0``."""
    __slots__ = ("val", "deriv")
    # keep numpy from broadcasting over a Dual; binary ops come back to us
    __array_ufunc__ = None

    def __init__(self, val, deriv):
        self.val = float(val)
        self.deriv = np.asarray(deriv, dtype=float)

    # ------------------------------------------------------------------
    # access
    # ------------------------------------------------------------------
    def value(self) -> float:
        return self.val

    def dx(self, k: int) -> float:
        return float(self.deriv[k])

    @property
    def size(self) -> int:
        return self.deriv.shape[0]

    def __repr__(self):
        return f"Dual({self.val!r}, n={self.size})"

    # ------------------------------------------------------------------
    # arithmetic
    # ------------------------------------------------------------------
    def _elementwise(self, other, op):
        out = np.empty(other.shape, dtype=object)
        for idx, o in np.ndenumerate(other):
            out[idx] = op(self, o)
        return out

    def __add__(self, other):
        if isinstance(other, Dual):
            return Dual(self.val + other.val, self.deriv + other.deriv)
        if isinstance(other, numbers.Real):
            return Dual(self.val + other, self.deriv)
        if isinstance(other, np.ndarray):
            return self._elementwise(other, lambda a, b: a + b)
        return NotImplemented

    def __radd__(self, other):
        return self.__add__(other)

    def __sub__(self, other):
        if isinstance(other, Dual):
            return Dual(self.val - other.val, self.deriv - other.deriv)
        if isinstance(other, numbers.Real):
            return Dual(self.val - other, self.deriv)
        if isinstance(other, np.ndarray):
            return self._elementwise(other, lambda a, b: a - b)
        return NotImplemented

    def __rsub__(self, other):
        if isinstance(other, numbers.Real):
            return Dual(other - self.val, -self.deriv)
        if isinstance(other, np.ndarray):
            return self._elementwise(other, lambda a, b: b - a)
        return NotImplemented

    def __mul__(self, other):
        if isinstance(other, Dual):
            return Dual(self.val * other.val,
                        self.deriv * other.val + other.deriv * self.val)
        if isinstance(other, numbers.Real):
            return Dual(self.val * other, self.deriv * other)
        if isinstance(other, np.ndarray):
            return self._elementwise(other, lambda a, b: a * b)
        return NotImplemented

    def __rmul__(self, other):
        return self.__mul__(other)

    def __truediv__(self, other):
        if isinstance(other, Dual):
            inv = 1.0 / other.val
            val = self.val * inv
            return Dual(val, (self.deriv - val * other.deriv) * inv)
        if isinstance(other, numbers.Real):
            return Dual(self.val / other, self.deriv / other)
        if isinstance(other, np.ndarray):
            return self._elementwise(other, lambda a, b: a / b)
        return NotImplemented

    def __rtruediv__(self, other):
        if isinstance(other, numbers.Real):
            val = other / self.val
            return Dual(val, -val / self.val * self.deriv)
        if isinstance(other, np.ndarray):
            return self._elementwise(other, lambda a, b: b / a)
        return NotImplemented

    def __pow__(self, other):
        if isinstance(other, Dual):
            # a**b = exp(b log a)
            return (other * self.log()).exp()
        if isinstance(other, numbers.Real):
            if other == 0:
                return Dual(1.0, np.zeros_like(self.deriv))
            return Dual(self.val ** other,
                        other * self.val ** (other - 1) * self.deriv)
        return NotImplemented

    def __rpow__(self, other):
        if isinstance(other, numbers.Real):
            val = other ** self.val
            return Dual(val, val * np.log(other) * self.deriv)
        return NotImplemented

    def __neg__(self):
        return Dual(-self.val, -self.deriv)

    def __pos__(self):
        return self

    def __abs__(self):
        # derivative of |x| at 0 taken as 0
        return Dual(abs(self.val), np.sign(self.val) * self.deriv)

    # comparisons act on the value only
    def __lt__(self, other): return self.val < value_of(other)
    def __le__(self, other): return self.val <= value_of(other)
    def __gt__(self, other): return self.val > value_of(other)
    def __ge__(self, other): return self.val >= value_of(other)

    # ------------------------------------------------------------------
    # elementary functions
    # ------------------------------------------------------------------
    def sqrt(self):
        val = np.sqrt(self.val)
        return Dual(val, 0.5 / val * self.deriv)

    def exp(self):
        val = np.exp(self.val)
        return Dual(val, val * self.deriv)

    def log(self):
        return Dual(np.log(self.val), self.deriv / self.val)

    def sin(self):
        return Dual(np.sin(self.val), np.cos(self.val) * self.deriv)

    def cos(self):
        return Dual(np.cos(self.val), -np.sin(self.val) * self.deriv)


# -------------------------------------------------------------------------
# helpers that accept floats and duals alike
# -------------------------------------------------------------------------
def is_dual(x) -> bool:
    return isinstance(x, Dual)


def contains_dual(*arrays) -> bool:
    """True if any argument is a Dual or an object array holding one."""
    for a in arrays:
        if isinstance(a, Dual):
            return True
        if isinstance(a, np.ndarray) and a.dtype == object:
            if any(isinstance(v, Dual) for v in a.flat):
                return True
    return False


def value_of(x):
    if isinstance(x, Dual):
        return x.val
    if isinstance(x, np.ndarray) and x.dtype == object:
        return np.vectorize(value_of, otypes=[float])(x) if x.size else x.astype(float)
    return x


def derivatives_of(x, n_indep: int) -> np.ndarray:
    """Derivative vector of ``x`` (zeros for a constant)."""
    if isinstance(x, Dual):
        return x.deriv
    return np.zeros(n_indep)


def empty_like_state(shape, *like):
    """Allocate an output array that can hold duals when any input does."""
    dtype = object if contains_dual(*like) else float
    out = np.empty(shape, dtype=dtype)
    if dtype is float:
        out.fill(0.0)
    return out


def sqrt(x):
    return x.sqrt() if isinstance(x, Dual) else np.sqrt(x)


def exp(x):
    return x.exp() if isinstance(x, Dual) else np.exp(x)


def log(x):
    return x.log() if isinstance(x, Dual) else np.log(x)


def sin(x):
    return x.sin() if isinstance(x, Dual) else np.sin(x)


def cos(x):
    return x.cos() if isinstance(x, Dual) else np.cos(x)


def fabs(x):
    return abs(x)


def maximum(a, b):
    """Larger of ``a`` and ``b`` by value; the chosen branch carries its derivatives."""
    return a if value_of(a) >= value_of(b) else b


def dot(a, b):
    """Sum of products for short 1-D sequences of floats or duals."""
    total = 0.0
    for x, y in zip(a, b):
        total = total + x * y
    return total


def weighted_sum(terms, weights):
    """``sum_i weights[i] * terms[i]`` evaluated in one vectorised step.

    ``terms`` may mix floats and duals; the result is a float when none of
    them is a dual.
    """
    weights = np.asarray(weights, dtype=float)
    terms = list(terms)
    if len(terms) != weights.shape[0]:
        raise ValueError(f"weighted_sum: {len(terms)} terms but {weights.shape[0]} weights")
    n_indep = None
    for t in terms:
        if isinstance(t, Dual):
            n_indep = t.size
            break
    vals = np.array([value_of(t) for t in terms], dtype=float)
    if n_indep is None:
        return float(weights @ vals)
    D = np.zeros((len(terms), n_indep))
    for i, t in enumerate(terms):
        if isinstance(t, Dual):
            D[i] = t.deriv
    return Dual(weights @ vals, weights @ D)


class DerivativeArena:
    """Seeding buffer for one assembly call.

    All seeded unknowns share one identity matrix; each dual takes a row of it.
    Dual arithmetic never writes into its operands, so the rows are safe to
    share for the lifetime of the call.
    """

    def __init__(self, n_indep: int):
        if n_indep < 1:
            raise ValueError(f"DerivativeArena needs at least one unknown, got {n_indep}")
        self.n_indep = int(n_indep)
        self._eye = np.eye(self.n_indep)

    def seed(self, values, offset: int = 0) -> np.ndarray:
        """One-hot seed ``values[i]`` as unknown ``offset + i``."""
        values = np.asarray(values, dtype=float)
        if offset < 0 or offset + values.shape[0] > self.n_indep:
            raise ValueError(
                f"Cannot seed {values.shape[0]} unknowns at offset {offset} "
                f"into an arena of size {self.n_indep}."
            )
        out = np.empty(values.shape[0], dtype=object)
        for i, v in enumerate(values):
            out[i] = Dual(v, self._eye[offset + i])
        return out

    def constant(self, value) -> Dual:
        return Dual(value, np.zeros(self.n_indep))


def seed(values, offset: int = 0, n_indep: int = None) -> np.ndarray:
    """Convenience wrapper: seed ``values`` in a fresh arena."""
    values = np.asarray(values, dtype=float)
    n = values.shape[0] + offset if n_indep is None else n_indep
    return DerivativeArena(n).seed(values, offset)


def jacobian_of(outputs, n_indep: int) -> np.ndarray:
    """Stack the derivative vectors of ``outputs`` into a dense matrix."""
    outputs = np.asarray(outputs, dtype=object).ravel()
    J = np.zeros((outputs.shape[0], n_indep))
    for i, y in enumerate(outputs):
        J[i] = derivatives_of(y, n_indep)
    return J
