"""pydgfem.utils.meshgen
Structured mesh generators for quick tests.
"""
import numpy as np
from typing import List, Tuple, Optional
import numba

from pydgfem.core.topology import Node
from pydgfem.core.mesh import Mesh

__all__ = ["structured_line", "structured_quad", "perturb_interior_nodes",
           "line_mesh", "quad_mesh"]


@numba.jit(nopython=True, cache=True)
def _structured_line_numba(x0: float, L: float, nx: int):
    coords = np.empty(nx + 1, dtype=np.float64)
    for i in range(nx + 1):
        coords[i] = x0 + L * i / nx
    corners = np.empty((nx, 2), dtype=np.int64)
    for e in range(nx):
        corners[e, 0] = e
        corners[e, 1] = e + 1
    return coords, corners


@numba.jit(nopython=True, parallel=True, cache=True)
def _structured_q1_numba(Lx: float, Ly: float, nx: int, ny: int):
    """
    Generates node coordinates and CCW corner connectivity of a structured
    nx-by-ny quad grid.
    """
    n_nodes_x = nx + 1
    n_nodes_y = ny + 1
    nodes_coords = np.zeros((n_nodes_x * n_nodes_y, 2), dtype=np.float64)
    for j in numba.prange(n_nodes_y):
        for i in range(n_nodes_x):
            node_id = j * n_nodes_x + i
            nodes_coords[node_id, 0] = Lx * i / nx
            nodes_coords[node_id, 1] = Ly * j / ny

    corners = np.empty((nx * ny, 4), dtype=np.int64)
    for el_idx in numba.prange(nx * ny):
        el_j = el_idx // nx
        el_i = el_idx % nx
        bl = el_j * n_nodes_x + el_i
        corners[el_idx, 0] = bl
        corners[el_idx, 1] = bl + 1
        corners[el_idx, 2] = bl + 1 + n_nodes_x
        corners[el_idx, 3] = bl + n_nodes_x
    return nodes_coords, corners


def structured_line(L: float, *, nx: int, offset: float = 0.0) -> Tuple[List[Node], np.ndarray]:
    """Nodes and corner connectivity of a uniform 1-D grid on ``[offset, offset + L]``."""
    if nx < 1:
        raise ValueError("nx must be a positive integer.")
    coords, corners = _structured_line_numba(float(offset), float(L), int(nx))
    nodes = [Node(id=i, x=float(x)) for i, x in enumerate(coords)]
    return nodes, corners


def structured_quad(Lx: float, Ly: float, *, nx: int, ny: int,
                    offset: Optional[Tuple[float, float]] = None) -> Tuple[List[Node], np.ndarray]:
    """Nodes and CCW corner connectivity of a uniform ``nx x ny`` quad grid."""
    if nx < 1 or ny < 1:
        raise ValueError("nx and ny must be positive integers.")
    nodes_coords, corners = _structured_q1_numba(float(Lx), float(Ly), int(nx), int(ny))
    if offset is not None:
        nodes_coords = nodes_coords + np.asarray(offset, dtype=float)
    nodes = [Node(id=i, x=float(c[0]), y=float(c[1])) for i, c in enumerate(nodes_coords)]
    return nodes, corners


def perturb_interior_nodes(nodes: List[Node], amplitude: float, *, seed: int = 0,
                           Lx: float = 1.0, Ly: float = 1.0, offset=(0.0, 0.0)) -> List[Node]:
    """Randomly displaces nodes strictly inside the box, keeping boundary nodes fixed."""
    rng = np.random.default_rng(seed)
    out = []
    for nd in nodes:
        x, y = nd.x, nd.y
        inside = (not np.isclose(x, offset[0]) and not np.isclose(x, offset[0] + Lx)
                  and not np.isclose(y, offset[1]) and not np.isclose(y, offset[1] + Ly))
        if inside:
            dx, dy = rng.uniform(-amplitude, amplitude, size=2)
            x, y = x + dx, y + dy
        out.append(Node(id=nd.id, x=x, y=y, tag=nd.tag))
    return out


def line_mesh(L: float = 1.0, nx: int = 4, offset: float = 0.0, **kwargs) -> Mesh:
    nodes, corners = structured_line(L, nx=nx, offset=offset)
    return Mesh(nodes, corners, element_type="line", **kwargs)


def quad_mesh(Lx: float = 1.0, Ly: float = 1.0, nx: int = 2, ny: int = 2, *,
              offset=None, perturbation: float = 0.0, seed: int = 0, **kwargs) -> Mesh:
    nodes, corners = structured_quad(Lx, Ly, nx=nx, ny=ny, offset=offset)
    if perturbation > 0.0:
        nodes = perturb_interior_nodes(nodes, perturbation, seed=seed, Lx=Lx, Ly=Ly,
                                       offset=(0.0, 0.0) if offset is None else offset)
    return Mesh(nodes, corners, element_type="quad", **kwargs)
