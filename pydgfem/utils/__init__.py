from .meshgen import structured_line, structured_quad, line_mesh, quad_mesh, perturb_interior_nodes

__all__ = ["structured_line", "structured_quad", "line_mesh", "quad_mesh", "perturb_interior_nodes"]
