from .quadrature import gauss_legendre, gauss_lobatto, line_rule, quad_rule, volume, face, nodes_1d

__all__ = ["gauss_legendre", "gauss_lobatto", "line_rule", "quad_rule", "volume", "face", "nodes_1d"]
