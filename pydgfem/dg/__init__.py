from .strong_dg import StrongDG

__all__ = ["StrongDG"]
