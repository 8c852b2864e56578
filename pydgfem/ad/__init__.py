from .dual import (Dual, DerivativeArena, seed, weighted_sum, jacobian_of,
                   value_of, derivatives_of, empty_like_state, contains_dual,
                   is_dual, sqrt, exp, log, sin, cos, fabs, maximum, dot)

__all__ = ["Dual", "DerivativeArena", "seed", "weighted_sum", "jacobian_of",
           "value_of", "derivatives_of", "empty_like_state", "contains_dual",
           "is_dual", "sqrt", "exp", "log", "sin", "cos", "fabs", "maximum", "dot"]
